"""Persistence layer for a personal-finance tracker: users, categories, expenses and budgets."""

__version__ = "0.1.0"
