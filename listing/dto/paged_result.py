"""PagedResult DTO: one page of a server-side collection."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Mapping, Sequence, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    """
    Items of one page plus the counters needed for pagination controls.

    Derived values (``total_pages``, ``has_previous_page``, ``has_next_page``)
    are computed, never transported.
    """

    items: Tuple[T, ...]
    page: int
    page_size: int
    total_count: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {self.page_size}")
        if self.total_count < 0:
            raise ValueError(f"total_count must be >= 0, got {self.total_count}")
        if len(self.items) > self.page_size:
            raise ValueError(f"{len(self.items)} items exceed page_size {self.page_size}")

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    def item_range(self) -> Tuple[int, int]:
        """1-based (first, last) item numbers for "Showing X to Y of Z"."""
        if self.total_count == 0 or not self.items:
            return 0, 0
        first = (self.page - 1) * self.page_size + 1
        last = min(first + len(self.items) - 1, self.total_count)
        return first, last

    def page_window(self, width: int = 5) -> List[int]:
        """Page numbers to render as buttons, centred on the current page."""
        total = self.total_pages
        if total <= 0:
            return []
        if total <= width:
            return list(range(1, total + 1))
        start = self.page - width // 2
        start = max(1, min(start, total - width + 1))
        return list(range(start, start + width))

    @classmethod
    def empty(cls, page_size: int = 10) -> "PagedResult[T]":
        return cls(items=(), page=1, page_size=page_size, total_count=0)

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        item_factory: Callable[[Mapping[str, Any]], T],
    ) -> "PagedResult[T]":
        raw_items: Sequence[Mapping[str, Any]] = payload.get("items") or []
        return cls(
            items=tuple(item_factory(i) for i in raw_items),
            page=int(payload.get("page", 1)),
            page_size=int(payload.get("pageSize", len(raw_items) or 10)),
            total_count=int(payload.get("totalCount", len(raw_items))),
        )
