import pytest

from app.core.errors import ErrorCode, ReviewViolation
from app.db.models import Store
from app.services import rating_aggregator


def test_create_update_delete_round_trip():
    store = Store(rating_sum=99.0, rating_count=30)

    rating_aggregator.on_create(store, 3.3)
    assert store.rating_sum == pytest.approx(102.3)
    assert store.rating_count == 31
    assert store.rating == pytest.approx(3.3)

    rating_aggregator.on_update(store, 3.3, 4.0)
    assert store.rating_sum == pytest.approx(103.0)
    assert store.rating_count == 31

    rating_aggregator.on_delete(store, 4.0)
    assert store.rating_sum == pytest.approx(99.0)
    assert store.rating_count == 30


def test_empty_store_has_zero_rating():
    assert Store(rating_sum=0.0, rating_count=0).rating == 0.0


def test_deleting_last_review_resets_sum():
    store = Store(rating_sum=0.0, rating_count=0)
    rating_aggregator.on_create(store, 0.1)
    rating_aggregator.on_update(store, 0.1, 0.3)
    rating_aggregator.on_delete(store, 0.3)
    assert store.rating_count == 0
    assert store.rating_sum == 0.0


def test_count_never_goes_negative():
    store = Store(rating_sum=0.0, rating_count=0)
    rating_aggregator.on_delete(store, 2.0)
    assert store.rating_count == 0


@pytest.mark.parametrize("rating", [5.01, 6])
def test_rating_above_five_is_rejected(rating):
    store = Store(rating_sum=10.0, rating_count=2)
    with pytest.raises(ReviewViolation) as exc:
        rating_aggregator.on_create(store, rating)
    assert exc.value.code is ErrorCode.OVER_RATING_LIMIT
    assert (store.rating_sum, store.rating_count) == (10.0, 2)


def test_rating_of_five_is_allowed():
    rating_aggregator.check_rating(5)
