"""Expense store: ownership-scoped lookups, paging, search and SUM aggregates.

Lists are ordered newest first (``date DESC``) with ``id DESC`` as the
tiebreak, so pages are stable across calls. The SUM aggregates return
``None`` when no row matches; callers can tell "no expenses" from a total of
exactly zero.
"""

import datetime as dt
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import SQLModel, Field, Session, select

from ..core.errors import EntityNotFoundError, EntityValidationError
from ..models.expense import Expense
from .base import apply_changes, commit, save
from .categories import get_category
from .filters import ExpenseFilter
from .pagination import DEFAULT_PAGE_SIZE, Page, check_page_request


logger = logging.getLogger(__name__)


# ─────────────────────────────
#   SCHEMAS
# ─────────────────────────────

class ExpenseCreate(SQLModel):
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    description: str = Field(min_length=1, max_length=255)
    date: dt.date
    category_id: int


class ExpenseUpdate(SQLModel):
    amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(default=None, min_length=1, max_length=255)
    date: Optional[dt.date] = None
    category_id: Optional[int] = None


class CategoryExpenseSummary(SQLModel):
    category_id: int
    total_amount: Decimal


# ─────────────────────────────
#   OPERATIONS
# ─────────────────────────────

def _owned_by(user_id: int):
    return select(Expense).where(Expense.user_id == user_id)


def _newest_first(stmt):
    return stmt.order_by(Expense.date.desc(), Expense.id.desc())


def _paginate(session: Session, stmt, page: int, size: int) -> Page[Expense]:
    check_page_request(page, size)
    total = session.exec(select(func.count()).select_from(stmt.subquery())).one()
    items = session.exec(_newest_first(stmt).offset(page * size).limit(size)).all()
    return Page(items=list(items), page=page, size=size, total=total)


def create_expense(session: Session, user_id: int, payload: ExpenseCreate) -> Expense:
    # The category must belong to the same user
    get_category(session, payload.category_id, user_id)
    expense = Expense(user_id=user_id, **payload.model_dump())
    expense = save(session, expense)
    logger.info("Created expense %s for user %s", expense.id, user_id)
    return expense


def list_expenses(
    session: Session,
    user_id: int,
    page: int = 0,
    size: int = DEFAULT_PAGE_SIZE,
) -> Page[Expense]:
    return _paginate(session, _owned_by(user_id), page, size)


def find_expense(session: Session, expense_id: int, user_id: int) -> Optional[Expense]:
    stmt = _owned_by(user_id).where(Expense.id == expense_id)
    return session.exec(stmt).first()


def get_expense(session: Session, expense_id: int, user_id: int) -> Expense:
    expense = find_expense(session, expense_id, user_id)
    if expense is None:
        raise EntityNotFoundError(f"Expense {expense_id} not found")
    return expense


def list_expenses_between(
    session: Session,
    user_id: int,
    start: dt.date,
    end: dt.date,
) -> List[Expense]:
    """Expenses dated within ``[start, end]``, both ends included."""
    stmt = _owned_by(user_id).where(Expense.date >= start, Expense.date <= end)
    return list(session.exec(_newest_first(stmt)).all())


def list_expenses_by_category(session: Session, user_id: int, category_id: int) -> List[Expense]:
    stmt = _owned_by(user_id).where(Expense.category_id == category_id)
    return list(session.exec(_newest_first(stmt)).all())


def search_expenses(
    session: Session,
    user_id: int,
    criteria: Optional[ExpenseFilter] = None,
    page: int = 0,
    size: int = DEFAULT_PAGE_SIZE,
) -> Page[Expense]:
    stmt = _owned_by(user_id)
    if criteria is not None:
        stmt = criteria.apply(stmt)
    return _paginate(session, stmt, page, size)


def sum_total_amount(session: Session, user_id: int) -> Optional[Decimal]:
    stmt = select(func.sum(Expense.amount)).where(Expense.user_id == user_id)
    return session.exec(stmt).one()


def sum_total_amount_between(
    session: Session,
    user_id: int,
    start: dt.date,
    end: dt.date,
) -> Optional[Decimal]:
    stmt = select(func.sum(Expense.amount)).where(
        Expense.user_id == user_id,
        Expense.date >= start,
        Expense.date <= end,
    )
    return session.exec(stmt).one()


def sum_by_category_between(
    session: Session,
    user_id: int,
    start: dt.date,
    end: dt.date,
) -> List[CategoryExpenseSummary]:
    """Per-category totals; categories without expenses in range are omitted."""
    stmt = (
        select(Expense.category_id, func.sum(Expense.amount).label("total_amount"))
        .where(
            Expense.user_id == user_id,
            Expense.date >= start,
            Expense.date <= end,
        )
        .group_by(Expense.category_id)
        .order_by(Expense.category_id)
    )
    return [
        CategoryExpenseSummary(category_id=row.category_id, total_amount=row.total_amount)
        for row in session.exec(stmt)
    ]


def update_expense(
    session: Session,
    expense_id: int,
    user_id: int,
    payload: ExpenseUpdate,
) -> Expense:
    expense = get_expense(session, expense_id, user_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes:
        get_category(session, changes["category_id"], user_id)
    if not apply_changes(expense, changes):
        raise EntityValidationError("No fields to update")
    return save(session, expense)


def delete_expense(session: Session, expense_id: int, user_id: int) -> None:
    expense = get_expense(session, expense_id, user_id)
    session.delete(expense)
    commit(session)
    logger.info("Deleted expense %s for user %s", expense_id, user_id)
