from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Index, func
from sqlmodel import SQLModel, Field, Relationship

if TYPE_CHECKING:
    from .budget import Budget
    from .category import Category
    from .expense import Expense


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(max_length=100)
    # Stored with the casing given at sign-up; compared case-insensitively
    email: str = Field(index=True, unique=True, max_length=255)
    # Already hashed by the caller
    password: str = Field(max_length=255)

    categories: List["Category"] = Relationship(back_populates="user")
    expenses: List["Expense"] = Relationship(back_populates="user")
    budgets: List["Budget"] = Relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, name={self.name!r}, email={self.email!r})"


# Case-insensitive uniqueness, enforced by the database
Index("uq_users_email_lower", func.lower(User.email), unique=True)

