from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Optional

from app.db.models.reservation import ReservationStatus


# --- CREATE (Customer) ---
class ReservationCreate(BaseModel):
    slot_id: int
    head_count: int = Field(..., description="Party size, checked against the slot's min/max")
    phone: Optional[str] = Field(None, max_length=32)
    reservation_date: date


# --- UPDATE (Partner) ---
class ReservationStatusUpdate(BaseModel):
    reservation_id: int
    status: ReservationStatus = Field(..., description="Allowed values: APPROVED, REJECTED")

    @field_validator("status")
    @classmethod
    def decided_only(cls, v: ReservationStatus) -> ReservationStatus:
        if v not in (ReservationStatus.APPROVED, ReservationStatus.REJECTED):
            raise ValueError("status must be APPROVED or REJECTED")
        return v


# --- RESPONSE ---
class ReservationResponse(BaseModel):
    id: int
    customer_id: int
    store_id: int
    slot_id: int
    phone: Optional[str]
    reservation_date: date
    head_count: int
    status: ReservationStatus
    visited: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
