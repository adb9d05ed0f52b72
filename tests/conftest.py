from __future__ import annotations

import datetime as dt
import pathlib
import sys
from decimal import Decimal

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import personal_finance.models  # noqa: F401,E402  # Ensure models are registered with metadata
from personal_finance.database import build_engine  # noqa: E402
from personal_finance.stores import categories, expenses, users  # noqa: E402


@pytest.fixture()
def engine():
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture()
def make_user(session):
    counter = {"n": 0}

    def _make(name: str = "Ada", email: str | None = None):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        return users.create_user(
            session, users.UserCreate(name=name, email=email, password="pbkdf2_sha256$salt$hash")
        )

    return _make


@pytest.fixture()
def make_category(session):
    def _make(user_id: int, name: str = "Groceries", color: str = "#4CAF50"):
        return categories.create_category(
            session, user_id, categories.CategoryCreate(name=name, color=color)
        )

    return _make


@pytest.fixture()
def make_expense(session):
    def _make(user_id: int, category_id: int, amount: str, on: dt.date, description: str = "Misc"):
        return expenses.create_expense(
            session,
            user_id,
            expenses.ExpenseCreate(
                amount=Decimal(amount),
                description=description,
                date=on,
                category_id=category_id,
            ),
        )

    return _make
