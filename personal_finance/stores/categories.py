"""Category store. Every lookup is scoped by the owning user's id."""

import logging
import re
from decimal import Decimal
from typing import List, Optional

from pydantic import field_validator
from sqlalchemy import delete
from sqlmodel import SQLModel, Field, Session, select

from ..core.errors import EntityNotFoundError, EntityValidationError
from ..models.budget import Budget
from ..models.category import Category
from ..models.expense import Expense
from .base import apply_changes, execute, save
from .users import get_user


logger = logging.getLogger(__name__)

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _check_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name must not be blank")
    return value


def _check_color(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not _COLOR_RE.match(value):
        raise ValueError("Color must be a hex code like #FF5733")
    return value.upper()


class CategoryCreate(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(default="#9E9E9E")
    default_budget: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value):
        return _check_name(value)

    @field_validator("color")
    @classmethod
    def validate_color(cls, value):
        return _check_color(value)


class CategoryUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color: Optional[str] = None
    default_budget: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value):
        return _check_name(value)

    @field_validator("color")
    @classmethod
    def validate_color(cls, value):
        return _check_color(value)


def create_category(session: Session, user_id: int, payload: CategoryCreate) -> Category:
    get_user(session, user_id)
    category = Category(user_id=user_id, **payload.model_dump())
    category = save(session, category)
    logger.info("Created category %s for user %s", category.id, user_id)
    return category


def list_categories(session: Session, user_id: int) -> List[Category]:
    stmt = (
        select(Category)
        .where(Category.user_id == user_id)
        .order_by(Category.name.asc(), Category.id.asc())
    )
    return list(session.exec(stmt).all())


def find_category(session: Session, category_id: int, user_id: int) -> Optional[Category]:
    stmt = select(Category).where(Category.id == category_id, Category.user_id == user_id)
    return session.exec(stmt).first()


def get_category(session: Session, category_id: int, user_id: int) -> Category:
    category = find_category(session, category_id, user_id)
    if category is None:
        # Same answer whether the row is missing or owned by someone else
        raise EntityNotFoundError(f"Category {category_id} not found")
    return category


def exists_by_name(session: Session, name: str, user_id: int) -> bool:
    stmt = select(Category.id).where(Category.name == name.strip(), Category.user_id == user_id)
    return session.exec(stmt).first() is not None


def update_category(
    session: Session,
    category_id: int,
    user_id: int,
    payload: CategoryUpdate,
) -> Category:
    category = get_category(session, category_id, user_id)
    changes = payload.model_dump(exclude_unset=True)
    # name and color are required columns; only default_budget may be cleared
    changes = {k: v for k, v in changes.items() if v is not None or k == "default_budget"}
    if not apply_changes(category, changes):
        raise EntityValidationError("No fields to update")
    return save(session, category)


def delete_category(session: Session, category_id: int, user_id: int) -> None:
    """Delete a category with its budgets and expenses in one transaction."""
    get_category(session, category_id, user_id)

    budgets, expenses, _ = execute(
        session,
        delete(Budget).where(Budget.category_id == category_id),
        delete(Expense).where(Expense.category_id == category_id),
        delete(Category).where(Category.id == category_id, Category.user_id == user_id),
    )

    logger.info(
        "Deleted category %s for user %s (%d expenses, %d budgets)",
        category_id,
        user_id,
        expenses.rowcount,
        budgets.rowcount,
    )
