"""
Review orchestration. Each write touches the review row and the store's
rating aggregate in one transaction, with the store row locked.
"""
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    ErrorCode,
    MismatchError,
    NotFoundError,
    ReviewViolation,
    VisitWindowViolation,
)
from app.db.base import transaction
from app.db.models.reservation import Reservation
from app.db.models.review import Review
from app.db.models.slot import ReservationSlot
from app.db.models.store import Store
from app.schemas.review import ReviewCreate, ReviewDeletedResponse, ReviewResponse, ReviewUpdate
from app.services import rating_aggregator

logger = logging.getLogger(__name__)


def _lock_store(db: Session, store_id: int) -> Store:
    store = db.query(Store).filter(Store.id == store_id).with_for_update().first()
    if not store:
        raise NotFoundError(ErrorCode.NOT_FOUND_STORE)
    return store


def create_review(db: Session, customer_id: int, form: ReviewCreate) -> ReviewResponse:
    with transaction(db):
        reservation = (
            db.query(Reservation)
            .filter(Reservation.id == form.reservation_id, Reservation.customer_id == customer_id)
            .first()
        )
        if not reservation:
            raise MismatchError(ErrorCode.UNMATCHED_CUSTOMER_RESERVATION)

        if not reservation.visited:
            raise VisitWindowViolation(ErrorCode.VISIT_NOT_TRUE)

        rating_aggregator.check_rating(form.rating)

        already = (
            db.query(Review.id)
            .filter(Review.customer_id == customer_id, Review.reservation_id == reservation.id)
            .first()
        )
        if already:
            raise ReviewViolation(ErrorCode.ALREADY_CREATED_REVIEW)

        store = _lock_store(db, reservation.store_id)
        slot = db.query(ReservationSlot).filter(ReservationSlot.id == reservation.slot_id).first()
        if not slot:
            raise NotFoundError(ErrorCode.NOT_FOUND_SLOT)

        review = Review(
            reservation_id=reservation.id,
            customer_id=customer_id,
            store_id=store.id,
            partner_id=slot.partner_id,
            rating=form.rating,
            comment=form.comment,
        )
        db.add(review)
        rating_aggregator.on_create(store, form.rating)
        try:
            db.flush()
        except IntegrityError as e:
            # lost a race with a concurrent review of the same reservation
            raise ReviewViolation(ErrorCode.ALREADY_CREATED_REVIEW) from e

        aggregate = (store.rating_sum, store.rating_count)

    logger.info("Review %s on store %s, rating aggregate now %s", review.id, review.store_id, aggregate)
    return ReviewResponse.model_validate(review)


def update_review(db: Session, customer_id: int, review_id: int, form: ReviewUpdate) -> ReviewResponse:
    with transaction(db):
        review = (
            db.query(Review)
            .filter(Review.id == review_id, Review.customer_id == customer_id)
            .first()
        )
        if not review:
            raise MismatchError(ErrorCode.UNMATCHED_CUSTOMER_REVIEW)

        rating_aggregator.check_rating(form.rating)
        store = _lock_store(db, review.store_id)

        rating_aggregator.on_update(store, review.rating, form.rating)
        review.rating = form.rating
        review.comment = form.comment

    return ReviewResponse.model_validate(review)


def _delete(db: Session, review: Review) -> ReviewDeletedResponse:
    store = _lock_store(db, review.store_id)
    rating_aggregator.on_delete(store, review.rating)
    db.delete(review)
    logger.info("Review %s deleted from store %s", review.id, store.id)
    return ReviewDeletedResponse(id=review.id, message=f"review {review.id} deleted")


def delete_review_by_customer(db: Session, customer_id: int, review_id: int) -> ReviewDeletedResponse:
    with transaction(db):
        review = (
            db.query(Review)
            .filter(Review.id == review_id, Review.customer_id == customer_id)
            .first()
        )
        if not review:
            raise MismatchError(ErrorCode.UNMATCHED_CUSTOMER_REVIEW)
        result = _delete(db, review)
    return result


def delete_review_by_partner(db: Session, partner_id: int, review_id: int) -> ReviewDeletedResponse:
    with transaction(db):
        review = (
            db.query(Review)
            .filter(Review.id == review_id, Review.partner_id == partner_id)
            .first()
        )
        if not review:
            raise MismatchError(ErrorCode.UNMATCHED_PARTNER_REVIEW)
        result = _delete(db, review)
    return result


def list_by_customer(db: Session, customer_id: int) -> List[ReviewResponse]:
    rows = db.query(Review).filter(Review.customer_id == customer_id).order_by(Review.id.desc()).all()
    return [ReviewResponse.model_validate(r) for r in rows]


def list_by_partner_store(db: Session, partner_id: int, store_id: int) -> List[ReviewResponse]:
    rows = (
        db.query(Review)
        .filter(Review.partner_id == partner_id, Review.store_id == store_id)
        .order_by(Review.id.desc())
        .all()
    )
    return [ReviewResponse.model_validate(r) for r in rows]
