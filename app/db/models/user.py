# app/db/models/user.py
from sqlalchemy import Column, DateTime, Integer, String, func
from app.db.base import Base

ROLE_CUSTOMER = "customer"
ROLE_PARTNER = "partner"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    # customer books and reviews, partner runs stores
    role = Column(String, nullable=False, default=ROLE_CUSTOMER, server_default=ROLE_CUSTOMER)

    phone = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
