# app/api/routes/stores.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.db.base import get_db
from app.db.models.user import User
from app.schemas.slot import SlotClosedUpdate, SlotCreate, SlotDelete, SlotResponse, SlotUpdate
from app.schemas.store import (
    StoreCreate,
    StoreDatesUpdate,
    StoreDeletedResponse,
    StoreResponse,
    StoreUpdate,
)
from app.core.security import require_partner
from app.services import store_service

router = APIRouter(prefix="/api/store", tags=["stores"])


# Public store lookup

@router.get("", response_model=List[StoreResponse])
def list_stores(
    name: Optional[str] = Query(None, description="Filter by part of the store name"),
    db: Session = Depends(get_db),
):
    return store_service.list_stores(db, name)


# declared before /{store_id} so "partner" is not parsed as an id
@router.get("/partner", response_model=List[StoreResponse])
def my_stores(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return store_service.list_by_partner(db, current_user.id)


@router.get("/{store_id}", response_model=StoreResponse)
def get_store(store_id: int, db: Session = Depends(get_db)):
    return store_service.get_store(db, store_id)


# Partner manages stores

@router.post("", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
def register_store(
    payload: StoreCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return store_service.register_store(db, current_user.id, payload)


@router.put("/{store_id}", response_model=StoreResponse)
def update_store(
    store_id: int,
    payload: StoreUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return store_service.update_store(db, current_user.id, store_id, payload)


@router.put("/{store_id}/dates", response_model=StoreResponse)
def publish_dates(
    store_id: int,
    payload: StoreDatesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return store_service.publish_dates(db, current_user.id, store_id, payload.dates)


@router.delete("/{store_id}", response_model=StoreDeletedResponse)
def delete_store(
    store_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return store_service.delete_store(db, current_user.id, store_id)


# Partner manages reservation slots

@router.post("/{store_id}/slots", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
def add_slots(
    store_id: int,
    payload: List[SlotCreate],
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return store_service.add_slots(db, current_user.id, store_id, payload)


@router.put("/slots/{slot_id}", response_model=SlotResponse)
def update_slot(
    slot_id: int,
    payload: SlotUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return store_service.update_slot(db, current_user.id, slot_id, payload)


@router.delete("/{store_id}/slots", response_model=StoreResponse)
def delete_slots(
    store_id: int,
    payload: SlotDelete,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return store_service.delete_slots(db, current_user.id, store_id, payload.ids)


@router.patch("/slots/{slot_id}/closed", response_model=SlotResponse)
def set_slot_closed(
    slot_id: int,
    payload: SlotClosedUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    return store_service.set_slot_closed(db, current_user.id, slot_id, payload.target_date, payload.closed)
