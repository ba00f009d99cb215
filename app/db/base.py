# app/db/base.py
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import settings
from app.core.errors import InternalError, ServiceError

logger = logging.getLogger(__name__)

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    settings.database_url,
    echo=settings.sql_echo,
    pool_pre_ping=True,
    connect_args=_connect_args,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    One orchestrator call == one transaction.

    Commits when the block finishes, rolls back on any exception. Business
    errors propagate unchanged; anything else is logged and re-raised as
    InternalError with the original exception chained.
    """
    try:
        yield db
        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Transaction rolled back after unexpected error")
        raise InternalError() from e
