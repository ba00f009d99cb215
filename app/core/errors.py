"""
Error taxonomy for the reservation core.

Every business-rule violation is raised as a ServiceError subclass carrying a
stable ErrorCode (the kind callers branch on) and a human readable message.
The API layer turns them into JSON responses in app/api/errors.py.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    def __new__(cls, value: str, status_code: int, description: str):
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.status_code = status_code
        obj.description = description
        return obj

    INTERNAL_SERVER_ERROR = ("INTERNAL_SERVER_ERROR", 500, "Internal server error.")

    # members
    ALREADY_REGISTERED_USER = ("ALREADY_REGISTERED_USER", 400, "Email is already registered.")
    NOT_FOUND_USER = ("NOT_FOUND_USER", 404, "No matching member.")
    LOGIN_CHECK_FAIL = ("LOGIN_CHECK_FAIL", 400, "Check your email and password.")
    INVALID_TOKEN = ("INVALID_TOKEN", 401, "Missing or invalid bearer token.")
    FORBIDDEN_ROLE = ("FORBIDDEN_ROLE", 403, "Your role cannot perform this action.")

    # stores and slots
    DUPLICATE_STORE_NAME = ("DUPLICATE_STORE_NAME", 400, "Store name is already taken.")
    CHECK_STORE_HOURS = ("CHECK_STORE_HOURS", 400, "Check the store opening hours.")
    CHECK_RESERVATION_TIME = ("CHECK_RESERVATION_TIME", 400, "Check the slot start and end times.")
    CHECK_PARTY_SIZE = ("CHECK_PARTY_SIZE", 400, "Minimum party size cannot exceed the maximum.")
    NOT_FOUND_STORE = ("NOT_FOUND_STORE", 404, "Store does not exist.")
    NOT_FOUND_SLOT = ("NOT_FOUND_SLOT", 404, "Reservation slot does not exist.")
    CANNOT_UPDATE_INFO = ("CANNOT_UPDATE_INFO", 400, "Reservations are not open on this date.")
    STILL_HAVE_RESERVATION = ("STILL_HAVE_RESERVATION", 400, "Reservations still reference this slot.")
    ALREADY_DELETED_STORE = ("ALREADY_DELETED_STORE", 400, "Store is already deleted.")
    UNMATCHED_PARTNER_STORE = ("UNMATCHED_PARTNER_STORE", 403, "Store does not belong to this partner.")

    # making reservations
    LOWER_STORE_MIN_CAPACITY = ("LOWER_STORE_MIN_CAPACITY", 400, "Party size is below the slot minimum.")
    OVER_STORE_MAX_CAPACITY = ("OVER_STORE_MAX_CAPACITY", 400, "Party size exceeds the slot maximum.")
    RESERVATION_CLOSED = ("RESERVATION_CLOSED", 400, "Reservations are closed for this date.")
    ALREADY_MAKE_RESERVATION = ("ALREADY_MAKE_RESERVATION", 409, "A reservation already exists for this slot and date.")
    CANNOT_RESERVATION_DATE = ("CANNOT_RESERVATION_DATE", 400, "This date is not open for reservations.")

    # deciding, cancelling and visiting
    NOT_FOUND_RESERVATION = ("NOT_FOUND_RESERVATION", 404, "Reservation does not exist.")
    ALREADY_CHANGE_STATUS = ("ALREADY_CHANGE_STATUS", 409, "Reservation status has already been decided.")
    OVER_RESERVATION_COUNT = ("OVER_RESERVATION_COUNT", 409, "Party size exceeds the remaining capacity.")
    UNMATCHED_MEMBER_RESERVATION = ("UNMATCHED_MEMBER_RESERVATION", 403, "Reservation does not belong to this member.")
    ALREADY_REVIEWED_RESERVATION = ("ALREADY_REVIEWED_RESERVATION", 409, "A reviewed reservation cannot be cancelled.")
    CHECK_RESERVATION_STATUS = ("CHECK_RESERVATION_STATUS", 400, "Check whether the reservation was approved.")
    CANNOT_CHECK_YET = ("CANNOT_CHECK_YET", 400, "Visits can be confirmed from 10 minutes before the slot.")
    NOT_TODAY_RESERVATION = ("NOT_TODAY_RESERVATION", 400, "The reservation is not for today.")
    OVER_RESERVATION_TIME = ("OVER_RESERVATION_TIME", 400, "The reservation time has passed.")

    # reviews
    VISIT_NOT_TRUE = ("VISIT_NOT_TRUE", 400, "No visit was recorded for this reservation.")
    UNMATCHED_CUSTOMER_RESERVATION = ("UNMATCHED_CUSTOMER_RESERVATION", 403, "Reservation does not belong to this customer.")
    OVER_RATING_LIMIT = ("OVER_RATING_LIMIT", 400, "Rating can be at most 5.")
    ALREADY_CREATED_REVIEW = ("ALREADY_CREATED_REVIEW", 409, "A review was already written for this reservation.")
    NOT_FOUND_REVIEW = ("NOT_FOUND_REVIEW", 404, "Review does not exist.")
    UNMATCHED_CUSTOMER_REVIEW = ("UNMATCHED_CUSTOMER_REVIEW", 403, "Only the author or the store partner can change this review.")
    UNMATCHED_PARTNER_REVIEW = ("UNMATCHED_PARTNER_REVIEW", 403, "Only the author or the store partner can delete this review.")


class ServiceError(Exception):
    """Base class for all business errors raised by the services."""

    def __init__(self, code: ErrorCode, message: str | None = None) -> None:
        self.code = code
        self.message = message or code.description
        self.status_code = code.status_code
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return self.code.value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value}: {self.message})"


class NotFoundError(ServiceError):
    pass


class MismatchError(ServiceError):
    pass


class CapacityViolation(ServiceError):
    pass


class StateError(ServiceError):
    pass


class ScheduleError(ServiceError):
    pass


class VisitWindowViolation(ServiceError):
    pass


class ReviewViolation(ServiceError):
    pass


class AuthError(ServiceError):
    pass


class InternalError(ServiceError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(ErrorCode.INTERNAL_SERVER_ERROR, message)
