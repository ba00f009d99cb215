# app/schemas/review.py
from pydantic import BaseModel, Field, confloat
from typing import Optional
from datetime import datetime


class ReviewCreate(BaseModel):
    reservation_id: int
    # upper bound is a business rule (OVER_RATING_LIMIT), checked by the service
    rating: confloat(ge=0) = Field(..., description="Rating 0-5")
    comment: Optional[str] = None


class ReviewUpdate(BaseModel):
    rating: confloat(ge=0) = Field(..., description="Rating 0-5")
    comment: Optional[str] = None


class ReviewResponse(BaseModel):
    id: int
    reservation_id: int
    customer_id: int
    store_id: int
    partner_id: int
    rating: float
    comment: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewDeletedResponse(BaseModel):
    id: int
    message: str
