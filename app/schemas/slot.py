# app/schemas/slot.py
from pydantic import BaseModel, Field, conint, field_validator
from typing import Dict, List
from datetime import date, time


class SlotCreate(BaseModel):
    start_at: time
    end_at: time
    min_count: conint(ge=1) = Field(1, description="Smallest party accepted")
    max_count: conint(ge=1) = Field(..., description="Largest party accepted")
    count: conint(ge=0) = Field(..., description="Seats available on each open date")


class SlotUpdate(SlotCreate):
    pass


class SlotDelete(BaseModel):
    ids: List[int] = Field(..., min_length=1)


class SlotClosedUpdate(BaseModel):
    target_date: date
    # -1 closes the date, any other value overrides the remaining seats
    closed: int

    @field_validator("closed")
    @classmethod
    def normalize_closed(cls, v: int) -> int:
        return -1 if v < 0 else v


class SlotResponse(BaseModel):
    id: int
    store_id: int
    partner_id: int
    start_at: time
    end_at: time
    min_count: int
    max_count: int
    count: int
    closed: Dict[str, int]

    class Config:
        from_attributes = True
