# app/db/models/store.py

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Time,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship
from app.db.base import Base


class Store(Base):
    __tablename__ = "stores"
    __table_args__ = (
        CheckConstraint("open_at < close_at", name="ck_store_hours"),
    )

    id = Column(Integer, primary_key=True, index=True)
    partner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Basic details
    name = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=True)
    address = Column(String, nullable=True)

    # Operating hours
    open_at = Column(Time, nullable=False)
    close_at = Column(Time, nullable=False)

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Soft delete, stores are never removed while reservations point at them
    deleted = Column(Boolean, nullable=False, default=False)

    # Running rating aggregate, maintained by RatingAggregator
    rating_sum = Column(Float, nullable=False, default=0.0)
    rating_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships (the store owns its slots and its published dates)
    slots = relationship(
        "ReservationSlot",
        back_populates="store",
        cascade="all, delete-orphan",
        order_by="ReservationSlot.start_at",
        lazy="selectin",
    )
    open_dates = relationship(
        "StoreOpenDate",
        cascade="all, delete-orphan",
        order_by="StoreOpenDate.open_date",
        lazy="selectin",
    )

    @property
    def rating(self) -> float:
        if not self.rating_count:
            return 0.0
        return self.rating_sum / self.rating_count

    @property
    def dates(self) -> list:
        return [d.open_date for d in self.open_dates]


class StoreOpenDate(Base):
    """
    A calendar date the store has published as open for reservations.
    """
    __tablename__ = "store_open_dates"
    __table_args__ = (
        UniqueConstraint("store_id", "open_date", name="uq_store_open_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    open_date = Column(Date, nullable=False)
