import datetime as dt
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlmodel import SQLModel, Field, Relationship

if TYPE_CHECKING:
    from .category import Category
    from .user import User


class Expense(SQLModel, table=True):
    __tablename__ = "expenses"

    id: Optional[int] = Field(default=None, primary_key=True)

    amount: Decimal = Field(max_digits=10, decimal_places=2)
    description: str = Field(max_length=255)
    # Calendar day only
    date: dt.date = Field(index=True)

    category_id: int = Field(foreign_key="categories.id", index=True)
    # Same owner as the category; kept here so user-scoped queries need no join
    user_id: int = Field(foreign_key="users.id", index=True)

    category: Optional["Category"] = Relationship(back_populates="expenses")
    user: Optional["User"] = Relationship(back_populates="expenses")
