"""Zero-based page slices for list queries."""

import math
from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

from ..core.errors import EntityValidationError


T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200


@dataclass
class Page(Generic[T]):
    """One page of results plus the size of the whole result set."""

    items: List[T] = field(default_factory=list)
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE
    total: int = 0

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total / self.size)

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages


def check_page_request(page: int, size: int) -> None:
    if page < 0:
        raise EntityValidationError("Page index must not be negative")
    if size < 1 or size > MAX_PAGE_SIZE:
        raise EntityValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
