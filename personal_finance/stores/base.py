"""Unit-of-work helpers shared by the stores."""

import logging
from typing import List, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel

from ..core.errors import EntityConflictError, translate_integrity_error


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)


def commit(session: Session, conflict_message: str = "Duplicate entry") -> None:
    """Commit the pending unit of work, or roll it back and raise a typed error."""
    execute(session, conflict_message=conflict_message)


def execute(session: Session, *statements, conflict_message: str = "Duplicate entry") -> List:
    """Run ``statements`` and commit them as one unit of work.

    Any failure, whether raised by a statement or by the commit, rolls the
    whole session back before the error propagates.
    """
    try:
        results = [session.exec(statement) for statement in statements]
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        error = translate_integrity_error(exc, conflict_message)
        if isinstance(error, EntityConflictError):
            logger.warning("Conflict: %s", conflict_message)
        raise error from exc
    except Exception:
        session.rollback()
        raise
    return results


def save(session: Session, instance: ModelT, conflict_message: str = "Duplicate entry") -> ModelT:
    session.add(instance)
    commit(session, conflict_message)
    session.refresh(instance)
    return instance


def apply_changes(instance: ModelT, changes: dict) -> bool:
    """Copy ``changes`` onto ``instance``; returns whether anything was given."""
    for field, value in changes.items():
        setattr(instance, field, value)
    return bool(changes)
