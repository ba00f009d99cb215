# app/schemas/store.py

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime, time

from app.schemas.slot import SlotResponse


# Shared fields
class StoreBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    address: Optional[str] = None
    open_at: time
    close_at: time
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


# Partner registers a store
class StoreCreate(StoreBase):
    pass


# Partner edits a store
class StoreUpdate(StoreBase):
    pass


# Partner (re)publishes the dates open for reservations
class StoreDatesUpdate(BaseModel):
    dates: List[date]


# What API returns
class StoreResponse(BaseModel):
    id: int
    partner_id: int

    name: str
    description: Optional[str]
    address: Optional[str]
    open_at: time
    close_at: time
    latitude: Optional[float]
    longitude: Optional[float]

    deleted: bool
    rating: float
    rating_count: int

    dates: List[date] = []
    slots: List[SlotResponse] = []

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StoreDeletedResponse(BaseModel):
    id: int
    deleted: bool
    reservations_closed: int
