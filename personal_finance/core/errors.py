"""Typed persistence errors raised by the stores."""

from sqlalchemy.exc import IntegrityError


class PersistenceError(RuntimeError):
    """Base class for errors raised by the persistence layer."""


class EntityNotFoundError(PersistenceError):
    """Raised when an entity cannot be located for the acting user."""


class EntityConflictError(PersistenceError):
    """Raised when a unique constraint is violated."""


class EntityValidationError(PersistenceError):
    """Raised when a write is rejected for missing or dangling values."""


# Markers of a unique violation across the drivers we run against
_UNIQUE_MARKERS = (
    "unique constraint",
    "duplicate key",
    "duplicate entry",
)


def is_unique_violation(exc: IntegrityError) -> bool:
    pgcode = getattr(exc.orig, "pgcode", None)
    if pgcode == "23505":
        return True
    message = str(exc.orig).lower()
    return any(marker in message for marker in _UNIQUE_MARKERS)


def translate_integrity_error(exc: IntegrityError, conflict_message: str) -> PersistenceError:
    """Map a driver ``IntegrityError`` onto the persistence error taxonomy."""
    if is_unique_violation(exc):
        return EntityConflictError(conflict_message)
    return EntityValidationError(f"Rejected by the database: {exc.orig}")
