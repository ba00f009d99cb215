"""
State machine of a single reservation.

    PENDING --approve--> APPROVED --visit--> APPROVED (visited=True)
    PENDING --reject---> REJECTED
    any     --store soft delete--> STORE_DELETED

Cancelling removes the record instead of moving it to another state; the
service deletes the row after `cancel` released any held capacity.

Capacity is taken at approval, never at creation, so pending requests alone
cannot exhaust a date.

Every guard raises a ServiceError subclass; a function that returns has
applied its transition to the objects passed in.
"""
from datetime import date, datetime, timedelta

from app.core.errors import (
    CapacityViolation,
    ErrorCode,
    StateError,
    VisitWindowViolation,
)
from app.db.models.reservation import Reservation, ReservationStatus
from app.db.models.slot import ReservationSlot
from app.db.models.store import Store
from app.services import capacity_ledger


DECIDED = (ReservationStatus.APPROVED, ReservationStatus.REJECTED)


def create(
    store: Store,
    slot: ReservationSlot,
    reservation_date: date,
    head_count: int,
    customer_id: int,
    phone: str | None,
    date_published: bool,
    existing: Reservation | None,
) -> Reservation:
    """
    Validate a new request and build the PENDING reservation.

    date_published: whether the store lists `reservation_date` as open.
    existing: the customer's earlier reservation on this slot, if any.
    """
    if not date_published:
        raise CapacityViolation(ErrorCode.CANNOT_RESERVATION_DATE)

    if store.deleted:
        raise StateError(ErrorCode.ALREADY_DELETED_STORE)

    if existing is not None and existing.reservation_date == reservation_date:
        raise StateError(ErrorCode.ALREADY_MAKE_RESERVATION)

    if head_count < slot.min_count:
        raise CapacityViolation(ErrorCode.LOWER_STORE_MIN_CAPACITY)
    if head_count > slot.max_count:
        raise CapacityViolation(ErrorCode.OVER_STORE_MAX_CAPACITY)

    if not capacity_ledger.is_open(slot, reservation_date):
        raise CapacityViolation(ErrorCode.RESERVATION_CLOSED)

    return Reservation(
        customer_id=customer_id,
        store_id=store.id,
        slot_id=slot.id,
        phone=phone,
        reservation_date=reservation_date,
        head_count=head_count,
        status=ReservationStatus.PENDING,
        visited=False,
    )


def check_undecided(reservation: Reservation) -> None:
    if reservation.status == ReservationStatus.APPROVED:
        raise StateError(ErrorCode.ALREADY_CHANGE_STATUS, "Reservation is already approved.")
    if reservation.status == ReservationStatus.REJECTED:
        raise StateError(ErrorCode.ALREADY_CHANGE_STATUS, "Reservation is already rejected.")
    if reservation.status == ReservationStatus.STORE_DELETED:
        raise StateError(ErrorCode.ALREADY_DELETED_STORE)


def change_status(reservation: Reservation, slot: ReservationSlot, new_status: ReservationStatus) -> Reservation:
    """Approve or reject a pending reservation; approval takes capacity from the slot's date."""
    check_undecided(reservation)

    if new_status not in DECIDED:
        raise StateError(
            ErrorCode.CHECK_RESERVATION_STATUS,
            f"Reservations can only be approved or rejected, not {new_status.value}.",
        )

    if new_status == ReservationStatus.APPROVED:
        capacity_ledger.reserve_capacity(slot, reservation.reservation_date, reservation.head_count)

    reservation.status = new_status
    return reservation


def cancel(reservation: Reservation, slot: ReservationSlot) -> None:
    """Release what an approval took. Pending and rejected reservations never held capacity."""
    if reservation.status == ReservationStatus.APPROVED:
        capacity_ledger.release_capacity(slot, reservation.reservation_date, reservation.head_count)


def record_visit(
    reservation: Reservation,
    slot: ReservationSlot,
    now: datetime,
    window_minutes: int = 10,
) -> Reservation:
    if reservation.status == ReservationStatus.REJECTED:
        raise VisitWindowViolation(ErrorCode.CHECK_RESERVATION_STATUS, "Reservation was rejected.")
    if reservation.status == ReservationStatus.PENDING:
        raise VisitWindowViolation(ErrorCode.CHECK_RESERVATION_STATUS, "Reservation is still pending approval.")
    if reservation.status == ReservationStatus.STORE_DELETED:
        raise VisitWindowViolation(ErrorCode.CHECK_RESERVATION_STATUS, "Store of this reservation was deleted.")

    if reservation.reservation_date != now.date():
        raise VisitWindowViolation(
            ErrorCode.NOT_TODAY_RESERVATION,
            f"[reservation date: {reservation.reservation_date}] check the date of your reservation.",
        )

    starts = datetime.combine(reservation.reservation_date, slot.start_at)
    current = now.replace(tzinfo=None)
    if current < starts - timedelta(minutes=window_minutes):
        raise VisitWindowViolation(
            ErrorCode.CANNOT_CHECK_YET,
            f"[reservation time: {slot.start_at}, current time: {current.time()}] "
            f"visits can be confirmed from {window_minutes} minutes before.",
        )
    if current > starts:
        raise VisitWindowViolation(
            ErrorCode.OVER_RESERVATION_TIME,
            f"[reservation time: {slot.start_at}, current time: {current.time()}] reservation time has passed.",
        )

    reservation.visited = True
    return reservation


def mark_store_deleted(reservations) -> int:
    """Administrative override: every reservation of a deleted store ends as STORE_DELETED."""
    changed = 0
    for r in reservations:
        if r.status != ReservationStatus.STORE_DELETED:
            r.status = ReservationStatus.STORE_DELETED
            changed += 1
    return changed
