from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Column, Integer, Numeric, UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship

if TYPE_CHECKING:
    from .category import Category
    from .user import User


class Budget(SQLModel, table=True):
    __tablename__ = "budgets"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "category_id",
            "budget_year",
            "budget_month",
            name="uq_budget_user_category_period",
        ),
        CheckConstraint("budget_month BETWEEN 1 AND 12", name="ck_budget_month_range"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    amount: Decimal = Field(sa_column=Column("budget_amount", Numeric(10, 2), nullable=False))
    year: int = Field(sa_column=Column("budget_year", Integer, nullable=False))
    # 1 = January ... 12 = December
    month: int = Field(sa_column=Column("budget_month", Integer, nullable=False))

    user_id: int = Field(foreign_key="users.id", index=True)
    category_id: int = Field(foreign_key="categories.id", index=True)

    user: Optional["User"] = Relationship(back_populates="budgets")
    category: Optional["Category"] = Relationship(back_populates="budgets")
