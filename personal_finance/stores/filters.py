"""Composable optional filters for expense queries.

An ``ExpenseFilter`` collects SQL clauses and combines them with AND, so a
caller can build a query from any subset of search term, category and date
bounds without a dedicated store function per combination::

    criteria = ExpenseFilter().matching("coffee").on_or_after(date(2024, 3, 1))
    expenses.search_expenses(session, user_id, criteria)

Ownership scoping is not part of the filter; the store always adds it.
"""

import datetime as dt
from typing import List, Optional

from sqlalchemy.sql.elements import ColumnElement

from ..models.expense import Expense


class ExpenseFilter:
    def __init__(self, clauses: Optional[List[ColumnElement]] = None):
        self._clauses: List[ColumnElement] = list(clauses or [])

    @classmethod
    def of(
        cls,
        search: Optional[str] = None,
        category_id: Optional[int] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
    ) -> "ExpenseFilter":
        """Build a filter from whichever optional parameters were supplied."""
        criteria = cls()
        if search is not None and search.strip():
            criteria.matching(search)
        if category_id is not None:
            criteria.in_category(category_id)
        if start_date is not None:
            criteria.on_or_after(start_date)
        if end_date is not None:
            criteria.on_or_before(end_date)
        return criteria

    def where(self, clause: ColumnElement) -> "ExpenseFilter":
        self._clauses.append(clause)
        return self

    def matching(self, term: str) -> "ExpenseFilter":
        # Case-insensitive substring match; % and _ in the term are literal
        return self.where(Expense.description.icontains(term.strip(), autoescape=True))

    def in_category(self, category_id: int) -> "ExpenseFilter":
        return self.where(Expense.category_id == category_id)

    def on_or_after(self, start: dt.date) -> "ExpenseFilter":
        return self.where(Expense.date >= start)

    def on_or_before(self, end: dt.date) -> "ExpenseFilter":
        return self.where(Expense.date <= end)

    def between(self, start: dt.date, end: dt.date) -> "ExpenseFilter":
        return self.on_or_after(start).on_or_before(end)

    def and_(self, other: "ExpenseFilter") -> "ExpenseFilter":
        return ExpenseFilter(self._clauses + other.clauses)

    @property
    def clauses(self) -> List[ColumnElement]:
        return list(self._clauses)

    def __len__(self) -> int:
        return len(self._clauses)

    def apply(self, statement):
        if not self._clauses:
            return statement
        return statement.where(*self._clauses)
