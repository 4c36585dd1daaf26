from __future__ import annotations

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a listing plus the total row count"""
    items: List[T]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit
