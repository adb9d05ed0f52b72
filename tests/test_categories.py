from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest
from pydantic import ValidationError

from personal_finance.core.errors import EntityNotFoundError, EntityValidationError
from personal_finance.stores import budgets, categories, expenses


def test_create_and_list_categories(session, make_user, make_category):
    user = make_user()
    make_category(user.id, name="Transport", color="#2196f3")
    make_category(user.id, name="Groceries")

    listed = categories.list_categories(session, user.id)
    assert [c.name for c in listed] == ["Groceries", "Transport"]
    assert listed[1].color == "#2196F3"


def test_default_budget_is_optional_decimal(session, make_user):
    user = make_user()
    category = categories.create_category(
        session,
        user.id,
        categories.CategoryCreate(name="Dining", color="#FF5733", default_budget=Decimal("150.00")),
    )
    assert category.default_budget == Decimal("150.00")

    plain = categories.create_category(session, user.id, categories.CategoryCreate(name="Other"))
    assert plain.default_budget is None


def test_invalid_color_is_rejected():
    with pytest.raises(ValidationError):
        categories.CategoryCreate(name="Bad", color="red")


def test_create_category_for_missing_user(session):
    with pytest.raises(EntityNotFoundError):
        categories.create_category(session, 42, categories.CategoryCreate(name="Ghost"))


def test_category_of_another_user_is_not_found(session, make_user, make_category):
    owner = make_user()
    intruder = make_user()
    category = make_category(owner.id)

    assert categories.find_category(session, category.id, intruder.id) is None
    with pytest.raises(EntityNotFoundError) as foreign:
        categories.get_category(session, category.id, intruder.id)
    with pytest.raises(EntityNotFoundError) as missing:
        categories.get_category(session, 9999, intruder.id)

    # Same message shape either way; existence does not leak
    assert str(foreign.value) == f"Category {category.id} not found"
    assert str(missing.value) == "Category 9999 not found"


def test_exists_by_name_is_per_user(session, make_user, make_category):
    first = make_user()
    second = make_user()
    make_category(first.id, name="Health")

    assert categories.exists_by_name(session, "Health", first.id) is True
    assert categories.exists_by_name(session, "Health", second.id) is False


def test_update_category(session, make_user, make_category):
    user = make_user()
    category = make_category(user.id, name="Fun")

    updated = categories.update_category(
        session,
        category.id,
        user.id,
        categories.CategoryUpdate(name="Entertainment", default_budget=Decimal("80.00")),
    )
    assert updated.name == "Entertainment"
    assert updated.color == "#4CAF50"
    assert updated.default_budget == Decimal("80.00")

    cleared = categories.update_category(
        session, category.id, user.id, categories.CategoryUpdate(default_budget=None)
    )
    assert cleared.default_budget is None


def test_update_category_requires_ownership(session, make_user, make_category):
    owner = make_user()
    intruder = make_user()
    category = make_category(owner.id)

    with pytest.raises(EntityNotFoundError):
        categories.update_category(
            session, category.id, intruder.id, categories.CategoryUpdate(name="Mine now")
        )


def test_empty_category_update_is_rejected(session, make_user, make_category):
    user = make_user()
    category = make_category(user.id)
    with pytest.raises(EntityValidationError):
        categories.update_category(session, category.id, user.id, categories.CategoryUpdate())


def test_delete_category_removes_expenses_and_budgets(session, make_user, make_category, make_expense):
    user = make_user()
    doomed = make_category(user.id, name="Subscriptions")
    kept = make_category(user.id, name="Groceries")
    make_expense(user.id, doomed.id, "9.99", dt.date(2024, 3, 5))
    kept_expense = make_expense(user.id, kept.id, "20.00", dt.date(2024, 3, 6))
    budgets.create_budget(
        session,
        user.id,
        budgets.BudgetCreate(category_id=doomed.id, amount=Decimal("10.00"), year=2024, month=3),
    )

    categories.delete_category(session, doomed.id, user.id)

    assert categories.find_category(session, doomed.id, user.id) is None
    assert expenses.list_expenses_by_category(session, user.id, doomed.id) == []
    assert budgets.list_budgets(session, user.id) == []
    assert [e.id for e in expenses.list_expenses(session, user.id).items] == [kept_expense.id]


def test_delete_category_of_another_user_is_not_found(session, make_user, make_category):
    owner = make_user()
    intruder = make_user()
    category = make_category(owner.id)

    with pytest.raises(EntityNotFoundError):
        categories.delete_category(session, category.id, intruder.id)
    assert categories.find_category(session, category.id, owner.id) is not None


def test_category_name_is_stripped_before_duplicate_check(session, make_user):
    user = make_user()
    created = categories.create_category(session, user.id, categories.CategoryCreate(name="  Groceries "))

    assert created.name == "Groceries"
    assert categories.exists_by_name(session, " Groceries", user.id) is True


def test_blank_category_name_is_rejected():
    with pytest.raises(ValidationError):
        categories.CategoryCreate(name="   ")


def test_failed_category_delete_rolls_back_children(session, make_user, make_category, make_expense):
    user = make_user()
    category = make_category(user.id)
    make_expense(user.id, category.id, "9.99", dt.date(2024, 3, 5))
    budgets.create_budget(
        session,
        user.id,
        budgets.BudgetCreate(category_id=category.id, amount=Decimal("10.00"), year=2024, month=3),
    )
    # Make the final DELETE fail after the child rows are already gone
    session.connection().exec_driver_sql(
        "CREATE TRIGGER block_category_delete BEFORE DELETE ON categories "
        "BEGIN SELECT RAISE(ABORT, 'category is locked'); END"
    )
    session.commit()

    with pytest.raises(EntityValidationError):
        categories.delete_category(session, category.id, user.id)
    assert not session.in_transaction()

    make_category(user.id, name="Unrelated")

    assert categories.find_category(session, category.id, user.id) is not None
    assert len(expenses.list_expenses_by_category(session, user.id, category.id)) == 1
    assert len(budgets.list_budgets(session, user.id)) == 1
