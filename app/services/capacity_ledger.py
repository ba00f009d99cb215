"""
Per-slot, per-date remaining capacity.

A slot's `closed` column maps ISO dates to the seats still available on that
date, with CLOSED (-1) marking a date the partner shut. The same weekly time
window has an independent counter for every calendar date.

Functions here only mutate the slot in memory. The calling service owns the
transaction and the row lock on the slot.
"""
import logging
from datetime import date
from typing import Iterable

from app.core.errors import CapacityViolation, ErrorCode
from app.db.models.slot import ReservationSlot

logger = logging.getLogger(__name__)

CLOSED = -1


def date_key(d: date) -> str:
    return d.isoformat()


def normalize(value: int) -> int:
    """Any negative value means closed and is stored as the -1 sentinel."""
    return CLOSED if value < 0 else value


def _entry(slot: ReservationSlot, d: date):
    return (slot.closed or {}).get(date_key(d))


def _write(slot: ReservationSlot, d: date, value: int) -> None:
    # reassign a fresh dict so the ORM sees the JSON column change
    ledger = dict(slot.closed or {})
    ledger[date_key(d)] = value
    slot.closed = ledger


def is_open(slot: ReservationSlot, d: date) -> bool:
    value = _entry(slot, d)
    return value is not None and value != CLOSED


def remaining(slot: ReservationSlot, d: date) -> int:
    value = _entry(slot, d)
    if value is None or value == CLOSED:
        raise CapacityViolation(ErrorCode.RESERVATION_CLOSED)
    return value


def reserve_capacity(slot: ReservationSlot, d: date, party_size: int) -> int:
    left = remaining(slot, d)
    if party_size > left:
        raise CapacityViolation(
            ErrorCode.OVER_RESERVATION_COUNT,
            f"[requested: {party_size}, remaining: {left}] party size exceeds the remaining capacity.",
        )
    _write(slot, d, left - party_size)
    return left - party_size


def release_capacity(slot: ReservationSlot, d: date, party_size: int) -> int | None:
    """
    Give `party_size` seats back for `d`. Not capped by the slot's base count,
    a release only ever reverses an earlier reserve of at least that size.

    A date that has since been closed or unpublished has no counter to restore
    and is left as is.
    """
    value = _entry(slot, d)
    if value is None or value == CLOSED:
        logger.info(
            "Slot %s: no open counter on %s, %s released seats dropped", slot.id, d, party_size
        )
        return None
    _write(slot, d, value + party_size)
    return value + party_size


def set_closed(slot: ReservationSlot, d: date, closed_or_count: int) -> None:
    """Close a published date (-1) or override its remaining count."""
    if _entry(slot, d) is None:
        raise CapacityViolation(ErrorCode.CANNOT_UPDATE_INFO)
    _write(slot, d, normalize(closed_or_count))


def seed_dates(slot: ReservationSlot, dates: Iterable[date]) -> None:
    """Give a new slot an explicit entry with its base count for every open date."""
    slot.closed = {date_key(d): slot.count for d in dates}


def rebase(slot: ReservationSlot) -> None:
    """Reset every open date to the slot's (new) base count, closed dates stay closed."""
    slot.closed = {
        key: value if value == CLOSED else slot.count
        for key, value in (slot.closed or {}).items()
    }


def publish_dates(slot: ReservationSlot, dates: Iterable[date], previously_published: Iterable[date]) -> None:
    """
    Rebuild the ledger for a new open-date list. Dates that were already open
    keep their current value, new dates start from the slot's base count and
    dates no longer published are dropped.
    """
    before = {date_key(d) for d in previously_published}
    current = slot.closed or {}
    ledger = {}
    for d in dates:
        key = date_key(d)
        if key in before and key in current:
            ledger[key] = current[key]
        else:
            ledger[key] = slot.count
    slot.closed = ledger
