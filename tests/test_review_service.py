from datetime import datetime

import pytest

from app.core.errors import (
    ErrorCode,
    MismatchError,
    ReviewViolation,
    StateError,
    VisitWindowViolation,
)
from app.db.models import Reservation, Review, ReservationStatus, Store
from app.schemas.reservation import ReservationCreate, ReservationStatusUpdate
from app.schemas.review import ReviewCreate, ReviewUpdate
from app.services import reservation_service, review_service

from conftest import DAY


def booked(db, partner, customer, slot_id, visit=True):
    r = reservation_service.make_reservation(
        db, customer.id, ReservationCreate(slot_id=slot_id, head_count=2, reservation_date=DAY)
    )
    reservation_service.change_reservation_status(
        db, partner.id, ReservationStatusUpdate(reservation_id=r.id, status=ReservationStatus.APPROVED)
    )
    if visit:
        reservation_service.visit_reservation(db, customer.id, r.id, now=datetime(2030, 5, 1, 11, 55))
    return r


@pytest.fixture()
def visited(db, partner, customer, slot_id):
    return booked(db, partner, customer, slot_id)


def aggregate(db, store_id):
    store = db.get(Store, store_id)
    db.refresh(store)
    return store.rating_sum, store.rating_count


def test_review_lifecycle_keeps_aggregate(db, partner, customer, store, visited):
    row = db.get(Store, store.id)
    row.rating_sum, row.rating_count = 99.0, 30
    db.commit()

    review = review_service.create_review(
        db, customer.id, ReviewCreate(reservation_id=visited.id, rating=3.3, comment="good noodles")
    )
    assert review.partner_id == partner.id
    total, count = aggregate(db, store.id)
    assert total == pytest.approx(102.3)
    assert count == 31

    updated = review_service.update_review(db, customer.id, review.id, ReviewUpdate(rating=4.0, comment="better"))
    assert updated.rating == 4.0
    assert updated.comment == "better"
    total, count = aggregate(db, store.id)
    assert total == pytest.approx(103.0)
    assert count == 31

    deleted = review_service.delete_review_by_partner(db, partner.id, review.id)
    assert deleted.id == review.id
    total, count = aggregate(db, store.id)
    assert total == pytest.approx(99.0)
    assert count == 30
    assert db.get(Review, review.id) is None


def test_single_review_sets_store_rating(db, customer, store, visited):
    review_service.create_review(db, customer.id, ReviewCreate(reservation_id=visited.id, rating=4.5))
    refreshed = db.get(Store, store.id)
    db.refresh(refreshed)
    assert refreshed.rating == pytest.approx(4.5)


def test_review_requires_visit(db, partner, customer, slot_id):
    r = booked(db, partner, customer, slot_id, visit=False)
    with pytest.raises(VisitWindowViolation) as exc:
        review_service.create_review(db, customer.id, ReviewCreate(reservation_id=r.id, rating=3))
    assert exc.value.code is ErrorCode.VISIT_NOT_TRUE


def test_review_of_someone_elses_reservation(db, other_customer, visited):
    with pytest.raises(MismatchError) as exc:
        review_service.create_review(db, other_customer.id, ReviewCreate(reservation_id=visited.id, rating=3))
    assert exc.value.code is ErrorCode.UNMATCHED_CUSTOMER_RESERVATION


def test_rating_over_five(db, customer, store, visited):
    with pytest.raises(ReviewViolation) as exc:
        review_service.create_review(db, customer.id, ReviewCreate(reservation_id=visited.id, rating=5.5))
    assert exc.value.code is ErrorCode.OVER_RATING_LIMIT
    assert aggregate(db, store.id) == (0.0, 0)


def test_one_review_per_reservation(db, customer, store, visited):
    review_service.create_review(db, customer.id, ReviewCreate(reservation_id=visited.id, rating=3))
    with pytest.raises(ReviewViolation) as exc:
        review_service.create_review(db, customer.id, ReviewCreate(reservation_id=visited.id, rating=4))
    assert exc.value.code is ErrorCode.ALREADY_CREATED_REVIEW
    assert aggregate(db, store.id) == (3.0, 1)


def test_only_author_updates_or_deletes(db, customer, other_customer, visited):
    review = review_service.create_review(db, customer.id, ReviewCreate(reservation_id=visited.id, rating=3))

    with pytest.raises(MismatchError) as exc:
        review_service.update_review(db, other_customer.id, review.id, ReviewUpdate(rating=1))
    assert exc.value.code is ErrorCode.UNMATCHED_CUSTOMER_REVIEW

    with pytest.raises(MismatchError) as exc:
        review_service.delete_review_by_customer(db, other_customer.id, review.id)
    assert exc.value.code is ErrorCode.UNMATCHED_CUSTOMER_REVIEW


def test_customer_deletes_last_review(db, customer, store, visited):
    review = review_service.create_review(db, customer.id, ReviewCreate(reservation_id=visited.id, rating=2.7))
    review_service.delete_review_by_customer(db, customer.id, review.id)
    assert aggregate(db, store.id) == (0.0, 0)


def test_other_partner_cannot_delete(db, customer, other_partner, visited):
    review = review_service.create_review(db, customer.id, ReviewCreate(reservation_id=visited.id, rating=3))
    with pytest.raises(MismatchError) as exc:
        review_service.delete_review_by_partner(db, other_partner.id, review.id)
    assert exc.value.code is ErrorCode.UNMATCHED_PARTNER_REVIEW


def test_review_listings(db, partner, customer, store, visited):
    review = review_service.create_review(db, customer.id, ReviewCreate(reservation_id=visited.id, rating=3))
    assert [r.id for r in review_service.list_by_customer(db, customer.id)] == [review.id]
    assert [r.id for r in review_service.list_by_partner_store(db, partner.id, store.id)] == [review.id]
    assert review_service.list_by_partner_store(db, partner.id, 999) == []


def test_reviewed_reservation_cannot_be_cancelled(db, customer, store, visited):
    review = review_service.create_review(db, customer.id, ReviewCreate(reservation_id=visited.id, rating=4))

    with pytest.raises(StateError) as exc:
        reservation_service.cancel_reservation(db, customer.id, visited.id)
    assert exc.value.code is ErrorCode.ALREADY_REVIEWED_RESERVATION

    assert db.get(Reservation, visited.id) is not None
    assert db.get(Review, review.id) is not None
    assert aggregate(db, store.id) == (4.0, 1)


def test_visited_reservation_without_review_can_be_cancelled(db, customer, visited):
    reservation_service.cancel_reservation(db, customer.id, visited.id)
    assert db.get(Reservation, visited.id) is None
