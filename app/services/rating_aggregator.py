"""
Running rating of a store kept as (rating_sum, rating_count).

Updated in O(1) from review create/update/delete events inside the same
transaction as the review change; never recomputed by scanning reviews.
"""
from app.core.errors import ErrorCode, ReviewViolation
from app.db.models.store import Store

MAX_RATING = 5


def check_rating(rating: float) -> None:
    if rating > MAX_RATING:
        raise ReviewViolation(ErrorCode.OVER_RATING_LIMIT)


def on_create(store: Store, rating: float) -> None:
    check_rating(rating)
    store.rating_sum = (store.rating_sum or 0.0) + rating
    store.rating_count = (store.rating_count or 0) + 1


def on_update(store: Store, old_rating: float, new_rating: float) -> None:
    check_rating(new_rating)
    store.rating_sum = (store.rating_sum or 0.0) + (new_rating - old_rating)


def on_delete(store: Store, rating: float) -> None:
    count = max((store.rating_count or 0) - 1, 0)
    store.rating_count = count
    # an empty aggregate drops any accumulated float error
    store.rating_sum = (store.rating_sum or 0.0) - rating if count else 0.0
