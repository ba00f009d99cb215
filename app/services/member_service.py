"""
Member sign-up and sign-in for customers and partners.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import AuthError, ErrorCode, StateError
from app.core.security import create_access_token, hash_password, verify_password
from app.db.base import transaction
from app.db.models.user import User
from app.schemas.user import SignIn, TokenResponse, UserCreate, UserResponse

logger = logging.getLogger(__name__)


def sign_up(db: Session, form: UserCreate, role: str) -> UserResponse:
    email = form.email.lower()
    with transaction(db):
        existing = db.query(User.id).filter(User.email == email).first()
        if existing:
            raise StateError(ErrorCode.ALREADY_REGISTERED_USER)

        user = User(
            email=email,
            name=form.name,
            password_hash=hash_password(form.password),
            role=role,
            phone=form.phone,
        )
        db.add(user)
        try:
            db.flush()
        except IntegrityError as e:
            raise StateError(ErrorCode.ALREADY_REGISTERED_USER) from e

    logger.info("Registered %s %s", role, user.id)
    return UserResponse.model_validate(user)


def sign_in(db: Session, form: SignIn) -> TokenResponse:
    user = db.query(User).filter(User.email == form.email.lower()).first()
    if not user or not verify_password(form.password, user.password_hash):
        raise AuthError(ErrorCode.LOGIN_CHECK_FAIL)
    return TokenResponse(access_token=create_access_token(user))
