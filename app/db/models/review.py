# app/db/models/review.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Float, func
from app.db.base import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    reservation_id = Column(Integer, ForeignKey("reservations.id"), nullable=False, unique=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    # copied from the slot so partners can find reviews of their stores directly
    partner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    rating = Column(Float, nullable=False)   # 0..5
    comment = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
