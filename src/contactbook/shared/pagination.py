"""
Pagination and sorting primitives shared by list queries.
"""

import math
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class SortDirection(str, Enum):
    """Sort order for list queries."""

    ASCENDING = "Ascending"
    DESCENDING = "Descending"

    @classmethod
    def parse(cls, raw: str | None) -> "SortDirection":
        """Parse a query-string value.

        Accepts the enum names in any case, ``asc``/``desc`` and the numeric
        form ``0``/``1`` used by the web client. Missing means ascending.

        Raises:
            ValueError: If the value is not recognised.
        """
        if raw is None or raw.strip() == "":
            return cls.ASCENDING
        value = raw.strip().lower()
        if value in ("ascending", "asc", "0"):
            return cls.ASCENDING
        if value in ("descending", "desc", "1"):
            return cls.DESCENDING
        raise ValueError(f"Invalid sort direction: {raw}")


class PagedResult(BaseModel, Generic[T]):
    """One page of items plus paging metadata.

    ``items_to`` is ``items_from + page_size - 1`` and is not clamped to the
    total, so the last page may report an upper bound past the last item.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[T] = Field(default_factory=list)
    total_pages: int
    total_items_count: int
    items_from: int
    items_to: int

    @classmethod
    def create(
        cls,
        items: list[T],
        total_count: int,
        page_size: int,
        page_number: int,
    ) -> "PagedResult[T]":
        items_from = page_size * (page_number - 1) + 1
        return cls(
            items=items,
            total_items_count=total_count,
            total_pages=math.ceil(total_count / page_size),
            items_from=items_from,
            items_to=items_from + page_size - 1,
        )
