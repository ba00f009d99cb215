import os

# must be set before the app modules build their engine and settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import date, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base, get_db
from app.db.models import ReservationSlot, User
from app.db.models.user import ROLE_CUSTOMER, ROLE_PARTNER
from app.main import app
from app.schemas.slot import SlotCreate
from app.schemas.store import StoreCreate
from app.services import capacity_ledger, store_service

DAY = date(2030, 5, 1)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def add_user(db, email: str, role: str) -> User:
    user = User(email=email, name=email.split("@")[0], password_hash="unused", role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def seats_left(db, slot_id: int, d: date = DAY):
    slot = db.get(ReservationSlot, slot_id)
    db.refresh(slot)
    return slot.closed.get(capacity_ledger.date_key(d))


@pytest.fixture()
def partner(db):
    return add_user(db, "owner@example.com", ROLE_PARTNER)


@pytest.fixture()
def other_partner(db):
    return add_user(db, "rival@example.com", ROLE_PARTNER)


@pytest.fixture()
def customer(db):
    return add_user(db, "guest@example.com", ROLE_CUSTOMER)


@pytest.fixture()
def other_customer(db):
    return add_user(db, "second@example.com", ROLE_CUSTOMER)


@pytest.fixture()
def store(db, partner):
    """A store open on DAY with one 12:00-13:00 slot (parties of 1-4, 20 seats)."""
    created = store_service.register_store(
        db,
        partner.id,
        StoreCreate(name="Noodle Bar", address="1 Main St", open_at=time(11), close_at=time(22)),
    )
    store_service.publish_dates(db, partner.id, created.id, [DAY])
    return store_service.add_slots(
        db,
        partner.id,
        created.id,
        [SlotCreate(start_at=time(12), end_at=time(13), min_count=1, max_count=4, count=20)],
    )


@pytest.fixture()
def slot_id(store):
    return store.slots[0].id
