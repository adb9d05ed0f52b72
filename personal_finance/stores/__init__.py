"""Ownership-scoped stores, one module per entity."""

from . import budgets, categories, expenses, users
from .filters import ExpenseFilter
from .pagination import Page

__all__ = [
    "budgets",
    "categories",
    "expenses",
    "users",
    "ExpenseFilter",
    "Page",
]
