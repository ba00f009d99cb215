import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AuthError, ErrorCode
from app.db.base import get_db
from app.db.models.user import ROLE_CUSTOMER, ROLE_PARTNER, User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(user: User, expires_minutes: int | None = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    data = {
        "sub": str(user.id),
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(data, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.debug("Rejected token: %s", e)
        raise AuthError(ErrorCode.INVALID_TOKEN) from e


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthError(ErrorCode.INVALID_TOKEN)

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError) as e:
        raise AuthError(ErrorCode.INVALID_TOKEN) from e

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthError(ErrorCode.INVALID_TOKEN)
    return user


def require_customer(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != ROLE_CUSTOMER:
        raise AuthError(ErrorCode.FORBIDDEN_ROLE, "Customers only")
    return current_user


def require_partner(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != ROLE_PARTNER:
        raise AuthError(ErrorCode.FORBIDDEN_ROLE, "Partners only")
    return current_user
