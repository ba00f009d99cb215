from datetime import date, time

import pytest

from app.core.errors import CapacityViolation, ErrorCode
from app.db.models import ReservationSlot
from app.services import capacity_ledger
from app.services.capacity_ledger import CLOSED

MAY_1 = date(2030, 5, 1)
MAY_2 = date(2030, 5, 2)
MAY_3 = date(2030, 5, 3)


def make_slot(closed=None, count=20):
    return ReservationSlot(
        id=1,
        start_at=time(12),
        end_at=time(13),
        min_count=1,
        max_count=4,
        count=count,
        closed=closed if closed is not None else {},
    )


def test_reserve_then_release_restores_count():
    slot = make_slot({"2030-05-01": 20})

    assert capacity_ledger.reserve_capacity(slot, MAY_1, 3) == 17
    assert slot.closed["2030-05-01"] == 17

    assert capacity_ledger.release_capacity(slot, MAY_1, 3) == 20
    assert slot.closed["2030-05-01"] == 20


def test_dates_are_independent():
    slot = make_slot({"2030-05-01": 20, "2030-05-02": 20})
    capacity_ledger.reserve_capacity(slot, MAY_1, 4)
    assert slot.closed == {"2030-05-01": 16, "2030-05-02": 20}


def test_reserve_over_remaining_fails_and_leaves_ledger():
    slot = make_slot({"2030-05-01": 2})
    with pytest.raises(CapacityViolation) as exc:
        capacity_ledger.reserve_capacity(slot, MAY_1, 3)
    assert exc.value.code is ErrorCode.OVER_RESERVATION_COUNT
    assert "remaining: 2" in exc.value.message
    assert slot.closed["2030-05-01"] == 2


def test_reserve_exact_remaining_reaches_zero():
    slot = make_slot({"2030-05-01": 3})
    assert capacity_ledger.reserve_capacity(slot, MAY_1, 3) == 0


@pytest.mark.parametrize("ledger", [{"2030-05-01": CLOSED}, {}])
def test_reserve_on_closed_or_missing_date(ledger):
    slot = make_slot(ledger)
    with pytest.raises(CapacityViolation) as exc:
        capacity_ledger.reserve_capacity(slot, MAY_1, 1)
    assert exc.value.code is ErrorCode.RESERVATION_CLOSED


def test_release_on_closed_date_is_skipped():
    slot = make_slot({"2030-05-01": CLOSED})
    assert capacity_ledger.release_capacity(slot, MAY_1, 3) is None
    assert slot.closed["2030-05-01"] == CLOSED


def test_release_is_not_capped_by_base_count():
    slot = make_slot({"2030-05-01": 19}, count=20)
    assert capacity_ledger.release_capacity(slot, MAY_1, 4) == 23


def test_write_replaces_the_dict():
    original = {"2030-05-01": 20}
    slot = make_slot(original)
    capacity_ledger.reserve_capacity(slot, MAY_1, 1)
    assert slot.closed is not original
    assert original == {"2030-05-01": 20}


def test_set_closed_normalizes_negative_values():
    slot = make_slot({"2030-05-01": 20})
    capacity_ledger.set_closed(slot, MAY_1, -7)
    assert slot.closed["2030-05-01"] == CLOSED
    assert not capacity_ledger.is_open(slot, MAY_1)

    capacity_ledger.set_closed(slot, MAY_1, 5)
    assert capacity_ledger.remaining(slot, MAY_1) == 5


def test_set_closed_on_unpublished_date():
    slot = make_slot({"2030-05-01": 20})
    with pytest.raises(CapacityViolation) as exc:
        capacity_ledger.set_closed(slot, MAY_2, CLOSED)
    assert exc.value.code is ErrorCode.CANNOT_UPDATE_INFO


def test_seed_and_rebase():
    slot = make_slot(count=10)
    capacity_ledger.seed_dates(slot, [MAY_1, MAY_2])
    assert slot.closed == {"2030-05-01": 10, "2030-05-02": 10}

    capacity_ledger.reserve_capacity(slot, MAY_1, 4)
    capacity_ledger.set_closed(slot, MAY_2, CLOSED)
    slot.count = 8
    capacity_ledger.rebase(slot)
    assert slot.closed == {"2030-05-01": 8, "2030-05-02": CLOSED}


def test_publish_keeps_existing_values_and_drops_unlisted_dates():
    slot = make_slot({"2030-05-01": 17, "2030-05-02": CLOSED}, count=20)
    capacity_ledger.publish_dates(slot, [MAY_1, MAY_3], previously_published=[MAY_1, MAY_2])
    assert slot.closed == {"2030-05-01": 17, "2030-05-03": 20}
