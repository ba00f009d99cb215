from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List

from app.db.base import get_db
from app.db.models.user import User
from app.schemas.reservation import ReservationCreate, ReservationResponse, ReservationStatusUpdate
from app.core.security import require_customer, require_partner
from app.services import reservation_service

router = APIRouter(prefix="/api/reservation", tags=["reservations"])

# Customer makes a reservation

@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
def make_reservation(
    payload: ReservationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    return reservation_service.make_reservation(db, current_user.id, payload)


# Partner approves or rejects

@router.patch("", response_model=ReservationResponse)
def change_reservation_status(
    payload: ReservationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return reservation_service.change_reservation_status(db, current_user.id, payload)


# Customer cancels (the reservation is removed)

@router.delete("/{reservation_id}", response_model=ReservationResponse)
def cancel_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    return reservation_service.cancel_reservation(db, current_user.id, reservation_id)


# Customer confirms the visit at the store

@router.patch("/{reservation_id}/visit", response_model=ReservationResponse)
def visit_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    return reservation_service.visit_reservation(db, current_user.id, reservation_id)


# Customer views their reservations

@router.get("/me", response_model=List[ReservationResponse])
def my_reservations(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    return reservation_service.list_by_member(db, current_user.id)


@router.get("/me/store/{store_id}", response_model=List[ReservationResponse])
def my_reservations_at_store(
    store_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    return reservation_service.list_by_member_and_store(db, current_user.id, store_id)


# Partner views a day of reservations for one of their stores

@router.get("/partner/store/{store_id}", response_model=List[ReservationResponse])
def partner_reservations(
    store_id: int,
    on: date = Query(..., alias="date", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return reservation_service.list_by_partner(db, current_user.id, store_id, on)
