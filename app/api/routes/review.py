# app/api/routes/review.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.db.base import get_db
from app.db.models.user import User
from app.schemas.review import ReviewCreate, ReviewDeletedResponse, ReviewResponse, ReviewUpdate
from app.core.security import require_customer, require_partner
from app.services import review_service

router = APIRouter(prefix="/api/review", tags=["reviews"])


# Create review (customer, after a recorded visit)
@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(review_in: ReviewCreate, db: Session = Depends(get_db), current_user: User = Depends(require_customer)):
    return review_service.create_review(db, current_user.id, review_in)


# Edit own review (customer)
@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(review_id: int, review_in: ReviewUpdate, db: Session = Depends(get_db), current_user: User = Depends(require_customer)):
    return review_service.update_review(db, current_user.id, review_id, review_in)


# Delete own review (customer)
@router.delete("/{review_id}", response_model=ReviewDeletedResponse)
def delete_review(review_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_customer)):
    return review_service.delete_review_by_customer(db, current_user.id, review_id)


# Delete a review of one of the partner's stores
@router.delete("/partner/{review_id}", response_model=ReviewDeletedResponse)
def partner_delete_review(review_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_partner)):
    return review_service.delete_review_by_partner(db, current_user.id, review_id)


# Reviews written by the customer
@router.get("/me", response_model=List[ReviewResponse])
def my_reviews(db: Session = Depends(get_db), current_user: User = Depends(require_customer)):
    return review_service.list_by_customer(db, current_user.id)


# Reviews of one of the partner's stores
@router.get("/partner/store/{store_id}", response_model=List[ReviewResponse])
def store_reviews(store_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_partner)):
    return review_service.list_by_partner_store(db, current_user.id, store_id)
