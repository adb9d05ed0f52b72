"""Budget store. One budget per (user, category, year, month)."""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import SQLModel, Field, Session, select

from ..core.errors import EntityNotFoundError, EntityValidationError
from ..models.budget import Budget
from .base import apply_changes, commit, save
from .categories import get_category


logger = logging.getLogger(__name__)

PERIOD_CONFLICT = "A budget already exists for this category and month"


class BudgetCreate(SQLModel):
    category_id: int
    amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    year: int = Field(ge=1900, le=9999)
    month: int = Field(ge=1, le=12)


class BudgetUpdate(SQLModel):
    category_id: Optional[int] = None
    amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    year: Optional[int] = Field(default=None, ge=1900, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)


def create_budget(session: Session, user_id: int, payload: BudgetCreate) -> Budget:
    """Insert a budget; a second one for the same period raises a conflict."""
    get_category(session, payload.category_id, user_id)
    budget = Budget(user_id=user_id, **payload.model_dump())
    budget = save(session, budget, PERIOD_CONFLICT)
    logger.info(
        "Created budget %s for user %s (%04d-%02d)", budget.id, user_id, budget.year, budget.month
    )
    return budget


def list_budgets(
    session: Session,
    user_id: int,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> List[Budget]:
    """Budgets of a user, optionally narrowed to a year or a single month."""
    if month is not None and year is None:
        raise EntityValidationError("month filter requires a year")

    stmt = select(Budget).where(Budget.user_id == user_id)
    if year is not None:
        stmt = stmt.where(Budget.year == year)
    if month is not None:
        stmt = stmt.where(Budget.month == month)
    stmt = stmt.order_by(
        Budget.year.desc(),
        Budget.month.desc(),
        Budget.category_id.asc(),
        Budget.id.asc(),
    )
    return list(session.exec(stmt).all())


def find_budget_for_period(
    session: Session,
    user_id: int,
    category_id: int,
    year: int,
    month: int,
) -> Optional[Budget]:
    stmt = select(Budget).where(
        Budget.user_id == user_id,
        Budget.category_id == category_id,
        Budget.year == year,
        Budget.month == month,
    )
    return session.exec(stmt).first()


def find_budget(session: Session, budget_id: int, user_id: int) -> Optional[Budget]:
    stmt = select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
    return session.exec(stmt).first()


def get_budget(session: Session, budget_id: int, user_id: int) -> Budget:
    budget = find_budget(session, budget_id, user_id)
    if budget is None:
        raise EntityNotFoundError(f"Budget {budget_id} not found")
    return budget


def sum_total_budget(session: Session, user_id: int, year: int, month: int) -> Optional[Decimal]:
    stmt = select(func.sum(Budget.amount)).where(
        Budget.user_id == user_id,
        Budget.year == year,
        Budget.month == month,
    )
    return session.exec(stmt).one()


def update_budget(
    session: Session,
    budget_id: int,
    user_id: int,
    payload: BudgetUpdate,
) -> Budget:
    budget = get_budget(session, budget_id, user_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes:
        get_category(session, changes["category_id"], user_id)
    if not apply_changes(budget, changes):
        raise EntityValidationError("No fields to update")
    return save(session, budget, PERIOD_CONFLICT)


def delete_budget(session: Session, budget_id: int, user_id: int) -> None:
    budget = get_budget(session, budget_id, user_id)
    session.delete(budget)
    commit(session)
    logger.info("Deleted budget %s for user %s", budget_id, user_id)
