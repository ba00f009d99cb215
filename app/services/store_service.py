"""
Store and slot management for partners.

Stores are soft deleted; slots can only be changed or removed while no
reservation references them. Publishing open dates rebuilds every slot's
per-date ledger.
"""
import logging
from datetime import date, time
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    ErrorCode,
    MismatchError,
    NotFoundError,
    ScheduleError,
    StateError,
)
from app.db.base import transaction
from app.db.models.reservation import Reservation
from app.db.models.slot import ReservationSlot
from app.db.models.store import Store, StoreOpenDate
from app.schemas.slot import SlotCreate, SlotResponse, SlotUpdate
from app.schemas.store import StoreCreate, StoreDeletedResponse, StoreResponse, StoreUpdate
from app.services import capacity_ledger, reservation_lifecycle

logger = logging.getLogger(__name__)


# --------------------------
# validation helpers
# --------------------------

def check_store_hours(open_at: time, close_at: time) -> None:
    if open_at >= close_at:
        raise ScheduleError(
            ErrorCode.CHECK_STORE_HOURS,
            f"[open: {open_at}, close: {close_at}] check the store opening hours.",
        )


def check_slot_times(windows: Iterable[tuple]) -> None:
    """Each (start, end) must be a proper interval and, sorted by start, none may overlap the next."""
    windows = sorted(windows)
    for start, end in windows:
        if start >= end:
            raise ScheduleError(
                ErrorCode.CHECK_RESERVATION_TIME,
                f"[slot start: {start}, end: {end}] check the slot times.",
            )
    for (_, prev_end), (next_start, _) in zip(windows, windows[1:]):
        if prev_end > next_start:
            raise ScheduleError(
                ErrorCode.CHECK_RESERVATION_TIME,
                f"[previous slot end: {prev_end}, next slot start: {next_start}] slots overlap.",
            )


def check_party_size(form: SlotCreate) -> None:
    if form.min_count > form.max_count:
        raise ScheduleError(
            ErrorCode.CHECK_PARTY_SIZE,
            f"[min: {form.min_count}, max: {form.max_count}] minimum party size cannot exceed the maximum.",
        )


def _check_name_free(db: Session, name: str, store_id: Optional[int] = None) -> None:
    q = db.query(Store.id).filter(Store.name == name)
    if store_id is not None:
        q = q.filter(Store.id != store_id)
    if q.first():
        raise StateError(ErrorCode.DUPLICATE_STORE_NAME)


def _has_reservations(db: Session, slot_id: int) -> bool:
    return db.query(Reservation.id).filter(Reservation.slot_id == slot_id).first() is not None


def get_owned_store(db: Session, store_id: int, partner_id: int, lock: bool = False) -> Store:
    q = db.query(Store).filter(Store.id == store_id)
    if lock:
        q = q.with_for_update()
    store = q.first()
    if not store:
        raise NotFoundError(ErrorCode.NOT_FOUND_STORE)
    if store.partner_id != partner_id:
        raise MismatchError(ErrorCode.UNMATCHED_PARTNER_STORE)
    return store


def _check_not_deleted(store: Store) -> None:
    if store.deleted:
        raise StateError(ErrorCode.ALREADY_DELETED_STORE)


# --------------------------
# stores
# --------------------------

def register_store(db: Session, partner_id: int, form: StoreCreate) -> StoreResponse:
    with transaction(db):
        _check_name_free(db, form.name)
        check_store_hours(form.open_at, form.close_at)

        store = Store(partner_id=partner_id, **form.model_dump())
        db.add(store)
        try:
            db.flush()
        except IntegrityError as e:
            raise StateError(ErrorCode.DUPLICATE_STORE_NAME) from e

    logger.info("Partner %s registered store %s (%s)", partner_id, store.id, store.name)
    return StoreResponse.model_validate(store)


def update_store(db: Session, partner_id: int, store_id: int, form: StoreUpdate) -> StoreResponse:
    with transaction(db):
        check_store_hours(form.open_at, form.close_at)
        store = get_owned_store(db, store_id, partner_id)
        _check_not_deleted(store)
        _check_name_free(db, form.name, store_id=store.id)

        for field, value in form.model_dump().items():
            setattr(store, field, value)

    return StoreResponse.model_validate(store)


def publish_dates(db: Session, partner_id: int, store_id: int, dates: List[date]) -> StoreResponse:
    """Replace the store's open-date list and rebuild every slot's per-date ledger."""
    new_dates = sorted(set(dates))
    with transaction(db):
        store = get_owned_store(db, store_id, partner_id, lock=True)
        _check_not_deleted(store)

        previous = store.dates
        slots = (
            db.query(ReservationSlot)
            .filter(ReservationSlot.store_id == store.id)
            .with_for_update()
            .all()
        )
        for slot in slots:
            capacity_ledger.publish_dates(slot, new_dates, previous)

        keep = set(new_dates)
        for row in list(store.open_dates):
            if row.open_date not in keep:
                store.open_dates.remove(row)
        for d in sorted(keep - set(previous)):
            store.open_dates.append(StoreOpenDate(open_date=d))

    logger.info("Store %s published %d open dates", store_id, len(new_dates))
    return StoreResponse.model_validate(store)


def delete_store(db: Session, partner_id: int, store_id: int) -> StoreDeletedResponse:
    with transaction(db):
        store = get_owned_store(db, store_id, partner_id, lock=True)
        _check_not_deleted(store)

        reservations = db.query(Reservation).filter(Reservation.store_id == store.id).all()
        changed = reservation_lifecycle.mark_store_deleted(reservations)
        store.deleted = True

    logger.info("Store %s deleted, %d reservations marked STORE_DELETED", store_id, changed)
    return StoreDeletedResponse(id=store_id, deleted=True, reservations_closed=changed)


def get_store(db: Session, store_id: int) -> StoreResponse:
    store = db.query(Store).filter(Store.id == store_id).first()
    if not store:
        raise NotFoundError(ErrorCode.NOT_FOUND_STORE)
    return StoreResponse.model_validate(store)


def list_stores(db: Session, name: Optional[str] = None) -> List[StoreResponse]:
    q = db.query(Store).filter(Store.deleted == False)  # noqa: E712
    if name:
        q = q.filter(Store.name.contains(name))
    return [StoreResponse.model_validate(s) for s in q.order_by(Store.id).all()]


def list_by_partner(db: Session, partner_id: int) -> List[StoreResponse]:
    """All stores of a partner, soft deleted ones included."""
    rows = db.query(Store).filter(Store.partner_id == partner_id).order_by(Store.id).all()
    return [StoreResponse.model_validate(s) for s in rows]


# --------------------------
# slots
# --------------------------

def add_slots(db: Session, partner_id: int, store_id: int, forms: List[SlotCreate]) -> StoreResponse:
    with transaction(db):
        store = get_owned_store(db, store_id, partner_id, lock=True)
        _check_not_deleted(store)

        for form in forms:
            check_party_size(form)
        check_slot_times(
            [(s.start_at, s.end_at) for s in store.slots] + [(f.start_at, f.end_at) for f in forms]
        )

        dates = store.dates
        for form in forms:
            slot = ReservationSlot(partner_id=partner_id, **form.model_dump())
            capacity_ledger.seed_dates(slot, dates)
            store.slots.append(slot)

    logger.info("Store %s: added %d slots", store_id, len(forms))
    return StoreResponse.model_validate(store)


def update_slot(db: Session, partner_id: int, slot_id: int, form: SlotUpdate) -> SlotResponse:
    with transaction(db):
        slot = (
            db.query(ReservationSlot)
            .filter(ReservationSlot.id == slot_id, ReservationSlot.partner_id == partner_id)
            .with_for_update()
            .first()
        )
        if not slot:
            raise NotFoundError(ErrorCode.NOT_FOUND_SLOT)
        if _has_reservations(db, slot.id):
            raise StateError(ErrorCode.STILL_HAVE_RESERVATION)

        check_party_size(form)
        others = (
            db.query(ReservationSlot)
            .filter(ReservationSlot.store_id == slot.store_id, ReservationSlot.id != slot.id)
            .all()
        )
        check_slot_times([(s.start_at, s.end_at) for s in others] + [(form.start_at, form.end_at)])

        for field, value in form.model_dump().items():
            setattr(slot, field, value)
        capacity_ledger.rebase(slot)

    return SlotResponse.model_validate(slot)


def delete_slots(db: Session, partner_id: int, store_id: int, slot_ids: List[int]) -> StoreResponse:
    with transaction(db):
        store = get_owned_store(db, store_id, partner_id, lock=True)

        for slot_id in slot_ids:
            slot = (
                db.query(ReservationSlot)
                .filter(ReservationSlot.id == slot_id, ReservationSlot.store_id == store.id)
                .first()
            )
            if not slot:
                raise NotFoundError(ErrorCode.NOT_FOUND_SLOT)
            if _has_reservations(db, slot.id):
                raise StateError(ErrorCode.STILL_HAVE_RESERVATION)
            store.slots.remove(slot)

    logger.info("Store %s: deleted slots %s", store_id, slot_ids)
    return StoreResponse.model_validate(store)


def set_slot_closed(db: Session, partner_id: int, slot_id: int, target_date: date, closed: int) -> SlotResponse:
    """Close a published date (-1) or override its remaining seats."""
    with transaction(db):
        slot = (
            db.query(ReservationSlot)
            .filter(ReservationSlot.id == slot_id, ReservationSlot.partner_id == partner_id)
            .with_for_update()
            .first()
        )
        if not slot:
            raise NotFoundError(ErrorCode.NOT_FOUND_SLOT)
        capacity_ledger.set_closed(slot, target_date, closed)

    logger.info("Slot %s on %s set to %s", slot_id, target_date, closed)
    return SlotResponse.model_validate(slot)
