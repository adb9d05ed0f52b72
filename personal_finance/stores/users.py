"""User store: accounts and the cascade that removes everything they own."""

import logging
from typing import Optional

from pydantic import field_validator
from sqlalchemy import delete, func
from sqlmodel import SQLModel, Field, Session, select

from ..core.errors import EntityNotFoundError, EntityValidationError
from ..models.budget import Budget
from ..models.category import Category
from ..models.expense import Expense
from ..models.user import User
from .base import apply_changes, execute, save


logger = logging.getLogger(__name__)

EMAIL_CONFLICT = "Email already registered"


def normalize_email(email: str) -> str:
    """Comparison key for an email; the stored value keeps its casing."""
    return email.strip().lower()


def _check_email(value: str) -> str:
    value = value.strip()
    if "@" not in value:
        raise ValueError("Invalid email address")
    return value


# ─────────────────────────────
#   SCHEMAS
# ─────────────────────────────

class UserCreate(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    # Hashed by the caller; stored as given
    password: str = Field(min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _check_email(value)


class UserUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    password: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _check_email(value)


# ─────────────────────────────
#   OPERATIONS
# ─────────────────────────────

def create_user(session: Session, payload: UserCreate) -> User:
    user = User(name=payload.name, email=payload.email, password=payload.password)
    user = save(session, user, EMAIL_CONFLICT)
    logger.info("Created user %s", user.id)
    return user


def find_user(session: Session, user_id: int) -> Optional[User]:
    return session.get(User, user_id)


def get_user(session: Session, user_id: int) -> User:
    user = find_user(session, user_id)
    if user is None:
        raise EntityNotFoundError(f"User {user_id} not found")
    return user


def find_user_by_email(session: Session, email: str) -> Optional[User]:
    stmt = select(User).where(func.lower(User.email) == normalize_email(email))
    return session.exec(stmt).first()


def exists_by_email(session: Session, email: str) -> bool:
    return find_user_by_email(session, email) is not None


def update_user(session: Session, user_id: int, payload: UserUpdate) -> User:
    user = get_user(session, user_id)
    if not apply_changes(user, payload.model_dump(exclude_unset=True, exclude_none=True)):
        raise EntityValidationError("No fields to update")
    return save(session, user, EMAIL_CONFLICT)


def delete_user(session: Session, user_id: int) -> None:
    """Delete a user together with their budgets, expenses and categories.

    Children go first and everything happens in one transaction, so a failure
    leaves the user's data untouched.
    """
    get_user(session, user_id)

    budgets, expenses, categories, _ = execute(
        session,
        delete(Budget).where(Budget.user_id == user_id),
        delete(Expense).where(Expense.user_id == user_id),
        delete(Category).where(Category.user_id == user_id),
        delete(User).where(User.id == user_id),
    )

    logger.info(
        "Deleted user %s (%d categories, %d expenses, %d budgets)",
        user_id,
        categories.rowcount,
        expenses.rowcount,
        budgets.rowcount,
    )
