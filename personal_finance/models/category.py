from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import SQLModel, Field, Relationship

if TYPE_CHECKING:
    from .budget import Budget
    from .expense import Expense
    from .user import User


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(max_length=100)
    # Hex code, e.g. "#FF5733"
    color: str = Field(max_length=7)
    default_budget: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

    user_id: int = Field(foreign_key="users.id", index=True)

    user: Optional["User"] = Relationship(back_populates="categories")
    expenses: List["Expense"] = Relationship(back_populates="category")
    budgets: List["Budget"] = Relationship(back_populates="category")
