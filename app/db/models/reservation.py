import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from app.db.base import Base


class ReservationStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    STORE_DELETED = "STORE_DELETED"


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        # one reservation per customer, slot and date
        UniqueConstraint("customer_id", "slot_id", "reservation_date", name="uq_reservation_customer_slot_date"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # plain ids, the slot outlives its reservations and owns none of them
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    slot_id = Column(Integer, ForeignKey("reservation_slots.id"), nullable=False, index=True)

    phone = Column(String, nullable=True)

    reservation_date = Column(Date, nullable=False)
    head_count = Column(Integer, nullable=False)

    status = Column(Enum(ReservationStatus), nullable=False, default=ReservationStatus.PENDING)
    visited = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
