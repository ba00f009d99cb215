# app/db/models/slot.py
from sqlalchemy import Column, Integer, Time, ForeignKey, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base


class ReservationSlot(Base):
    """
    A recurring bookable time window of a store (e.g. 12:00-13:00).

    count: base remaining capacity, copied into every newly published date.
    closed: per-date ledger {"YYYY-MM-DD": remaining}; -1 marks the date closed.
    Every open date has an explicit entry, there is no fallback to count.
    """
    __tablename__ = "reservation_slots"
    __table_args__ = (
        CheckConstraint("start_at < end_at", name="ck_slot_interval"),
        CheckConstraint("min_count <= max_count", name="ck_slot_party_size"),
    )

    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    partner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    start_at = Column(Time, nullable=False)
    end_at = Column(Time, nullable=False)

    min_count = Column(Integer, nullable=False, default=1)
    max_count = Column(Integer, nullable=False)
    count = Column(Integer, nullable=False)

    closed = Column(JSON, nullable=False, default=dict)

    store = relationship("Store", back_populates="slots")
