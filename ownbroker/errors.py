"""Domain errors raised by the store and the moderation workflows."""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError


class OwnBrokerError(Exception):
    """Base class. `message` is safe to show to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SchemaIntegrityError(OwnBrokerError):
    """Live schema does not match the declared one. Fatal; fix the store, then restart."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("Database schema verification failed: " + "; ".join(self.problems))


class InitializationError(OwnBrokerError):
    """Opening, creating or seeding the store failed. The next acquire() retries."""


class ConstraintViolation(OwnBrokerError):
    DUPLICATE = "duplicate"
    MISSING_REFERENCE = "missing_reference"
    HAS_DEPENDENTS = "has_dependents"
    CHECK = "check"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


class NotFound(OwnBrokerError):
    pass


class StateConflict(OwnBrokerError):
    """The entity exists but is not in the state the transition starts from."""

    def __init__(self, message: str, current_status: str | None = None):
        super().__init__(message)
        self.current_status = current_status


class AlreadyCancelled(StateConflict):
    def __init__(self, booking_id: str):
        super().__init__("Booking is already cancelled.", current_status="cancelled")
        self.booking_id = booking_id


class PolicyViolation(OwnBrokerError):
    """Refused before any write (admin protection, inactive account, wrong role)."""


class InvalidRequest(OwnBrokerError):
    pass


class NotificationDeliveryFailure(OwnBrokerError):
    """Logged by the dispatcher, never raised to workflow callers."""


def translate_integrity_error(exc: IntegrityError) -> ConstraintViolation:
    """Map a driver integrity error onto a typed ConstraintViolation.

    SQLite reports everything as text; PostgreSQL carries a SQLSTATE in pgcode.
    """
    orig = getattr(exc, "orig", None)
    text = str(orig if orig is not None else exc)
    lowered = text.lower()
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    statement = (exc.statement or "").lstrip().upper()

    if pgcode == "23505" or "unique constraint" in lowered or "duplicate key" in lowered:
        if "email" in lowered:
            return ConstraintViolation(ConstraintViolation.DUPLICATE, "Email is already registered.")
        return ConstraintViolation(ConstraintViolation.DUPLICATE, f"Duplicate record: {text}")
    if pgcode == "23503" or "foreign key constraint" in lowered:
        if statement.startswith("DELETE"):
            return ConstraintViolation(
                ConstraintViolation.HAS_DEPENDENTS,
                "Cannot delete: the record still has related data.",
            )
        return ConstraintViolation(
            ConstraintViolation.MISSING_REFERENCE,
            "Referenced record does not exist.",
        )
    if pgcode == "23514" or "check constraint" in lowered:
        return ConstraintViolation(ConstraintViolation.CHECK, f"Value not allowed: {text}")
    return ConstraintViolation(ConstraintViolation.CHECK, f"Database constraint violation: {text}")
