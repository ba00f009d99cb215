"""
Reservation orchestration: one transaction per call.

Lock order for writes is reservation row, then slot row, so concurrent
approvals and cancellations on the same slot serialise their ledger
read-check-write instead of losing updates.
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ErrorCode, MismatchError, NotFoundError, StateError
from app.db.base import transaction
from app.db.models.reservation import Reservation
from app.db.models.review import Review
from app.db.models.slot import ReservationSlot
from app.db.models.store import Store, StoreOpenDate
from app.schemas.reservation import ReservationCreate, ReservationResponse, ReservationStatusUpdate
from app.services import capacity_ledger, reservation_lifecycle
from app.services.store_service import get_owned_store

logger = logging.getLogger(__name__)


def _get_slot(db: Session, slot_id: int, lock: bool = False) -> ReservationSlot:
    q = db.query(ReservationSlot).filter(ReservationSlot.id == slot_id)
    if lock:
        q = q.with_for_update()
    slot = q.first()
    if not slot:
        raise NotFoundError(ErrorCode.NOT_FOUND_SLOT)
    return slot


def _get_store(db: Session, store_id: int) -> Store:
    store = db.query(Store).filter(Store.id == store_id).first()
    if not store:
        raise NotFoundError(ErrorCode.NOT_FOUND_STORE)
    return store


def store_has_date(db: Session, store_id: int, d: date) -> bool:
    return (
        db.query(StoreOpenDate.id)
        .filter(StoreOpenDate.store_id == store_id, StoreOpenDate.open_date == d)
        .first()
        is not None
    )


def make_reservation(db: Session, customer_id: int, form: ReservationCreate) -> ReservationResponse:
    with transaction(db):
        slot = _get_slot(db, form.slot_id)
        store = _get_store(db, slot.store_id)

        existing = (
            db.query(Reservation)
            .filter(
                Reservation.customer_id == customer_id,
                Reservation.slot_id == slot.id,
                Reservation.reservation_date == form.reservation_date,
            )
            .first()
        )

        reservation = reservation_lifecycle.create(
            store=store,
            slot=slot,
            reservation_date=form.reservation_date,
            head_count=form.head_count,
            customer_id=customer_id,
            phone=form.phone,
            date_published=store_has_date(db, store.id, form.reservation_date),
            existing=existing,
        )
        db.add(reservation)
        try:
            db.flush()
        except IntegrityError as e:
            # a concurrent request stored the same customer, slot and date first
            raise StateError(ErrorCode.ALREADY_MAKE_RESERVATION) from e

    logger.info(
        "Customer %s requested reservation %s (slot %s, %s, party of %s)",
        customer_id, reservation.id, slot.id, form.reservation_date, form.head_count,
    )
    return ReservationResponse.model_validate(reservation)


def change_reservation_status(db: Session, partner_id: int, form: ReservationStatusUpdate) -> ReservationResponse:
    with transaction(db):
        reservation = (
            db.query(Reservation)
            .filter(Reservation.id == form.reservation_id)
            .with_for_update()
            .first()
        )
        if not reservation:
            raise NotFoundError(ErrorCode.NOT_FOUND_RESERVATION)

        slot = _get_slot(db, reservation.slot_id, lock=True)
        owned = (
            db.query(Store.id)
            .filter(Store.id == slot.store_id, Store.partner_id == partner_id)
            .first()
        )
        if not owned:
            raise MismatchError(ErrorCode.UNMATCHED_PARTNER_STORE)

        reservation_lifecycle.change_status(reservation, slot, form.status)
        left = slot.closed.get(capacity_ledger.date_key(reservation.reservation_date))

    logger.info(
        "Reservation %s -> %s by partner %s (slot %s left: %s)",
        form.reservation_id, form.status.value, partner_id, reservation.slot_id, left,
    )
    return ReservationResponse.model_validate(reservation)


def cancel_reservation(db: Session, customer_id: int, reservation_id: int) -> ReservationResponse:
    """Delete the customer's reservation, giving back capacity an approval took."""
    with transaction(db):
        reservation = (
            db.query(Reservation)
            .filter(Reservation.id == reservation_id, Reservation.customer_id == customer_id)
            .with_for_update()
            .first()
        )
        if not reservation:
            raise MismatchError(ErrorCode.UNMATCHED_MEMBER_RESERVATION)

        # the review keeps counting in the store rating, so its reservation stays
        if db.query(Review.id).filter(Review.reservation_id == reservation.id).first():
            raise StateError(ErrorCode.ALREADY_REVIEWED_RESERVATION)

        slot = _get_slot(db, reservation.slot_id, lock=True)
        reservation_lifecycle.cancel(reservation, slot)

        snapshot = ReservationResponse.model_validate(reservation)
        db.delete(reservation)

    logger.info("Customer %s cancelled reservation %s (%s)", customer_id, reservation_id, snapshot.status.value)
    return snapshot


def visit_reservation(
    db: Session,
    customer_id: int,
    reservation_id: int,
    now: Optional[datetime] = None,
) -> ReservationResponse:
    now = now or datetime.now()
    with transaction(db):
        reservation = (
            db.query(Reservation)
            .filter(Reservation.id == reservation_id, Reservation.customer_id == customer_id)
            .with_for_update()
            .first()
        )
        if not reservation:
            raise NotFoundError(ErrorCode.NOT_FOUND_RESERVATION)

        slot = _get_slot(db, reservation.slot_id)
        reservation_lifecycle.record_visit(reservation, slot, now, settings.visit_window_minutes)

    logger.info("Customer %s visited for reservation %s", customer_id, reservation_id)
    return ReservationResponse.model_validate(reservation)


# --------------------------
# listings
# --------------------------

def list_by_member(db: Session, customer_id: int) -> List[ReservationResponse]:
    rows = (
        db.query(Reservation)
        .filter(Reservation.customer_id == customer_id)
        .order_by(Reservation.reservation_date.desc(), Reservation.id.desc())
        .all()
    )
    return [ReservationResponse.model_validate(r) for r in rows]


def list_by_member_and_store(db: Session, customer_id: int, store_id: int) -> List[ReservationResponse]:
    rows = (
        db.query(Reservation)
        .filter(Reservation.customer_id == customer_id, Reservation.store_id == store_id)
        .order_by(Reservation.reservation_date.desc(), Reservation.id.desc())
        .all()
    )
    return [ReservationResponse.model_validate(r) for r in rows]


def list_by_partner(db: Session, partner_id: int, store_id: int, on: date) -> List[ReservationResponse]:
    store = get_owned_store(db, store_id, partner_id)
    rows = (
        db.query(Reservation)
        .filter(Reservation.store_id == store.id, Reservation.reservation_date == on)
        .order_by(Reservation.slot_id, Reservation.id)
        .all()
    )
    return [ReservationResponse.model_validate(r) for r in rows]
