from app.db.models.user import User
from app.db.models.store import Store, StoreOpenDate
from app.db.models.slot import ReservationSlot
from app.db.models.reservation import Reservation, ReservationStatus
from app.db.models.review import Review

__all__ = [
    "Reservation",
    "ReservationSlot",
    "ReservationStatus",
    "Review",
    "Store",
    "StoreOpenDate",
    "User",
]
