from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.db.models.user import ROLE_CUSTOMER, ROLE_PARTNER, User
from app.schemas.user import SignIn, TokenResponse, UserCreate, UserResponse
from app.core.security import get_current_user
from app.services import member_service

router = APIRouter(tags=["auth"])


@router.post("/signup/customer", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def signup_customer(user: UserCreate, db: Session = Depends(get_db)):
    return member_service.sign_up(db, user, ROLE_CUSTOMER)


@router.post("/signup/partner", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def signup_partner(user: UserCreate, db: Session = Depends(get_db)):
    return member_service.sign_up(db, user, ROLE_PARTNER)


@router.post("/signin", response_model=TokenResponse)
def signin(form: SignIn, db: Session = Depends(get_db)):
    return member_service.sign_in(db, form)


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
