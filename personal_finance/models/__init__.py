from .user import User
from .category import Category
from .expense import Expense
from .budget import Budget

__all__ = ["User", "Category", "Expense", "Budget"]
