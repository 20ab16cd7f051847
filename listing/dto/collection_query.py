"""CollectionQuery DTO: the parameters of one list fetch."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def toggled(self) -> "SortOrder":
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


@dataclass(frozen=True)
class CollectionQuery:
    """
    Immutable query for a paged collection.

    Instances are replaced, never mutated; see ``QueryReducer`` for the
    transitions between them.
    """

    page: int = 1
    page_size: int = 10
    search_term: Optional[str] = None
    filters: Mapping[str, Any] = field(default_factory=dict)
    sort_by: str = "CreatedAt"
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {self.page_size}")
        object.__setattr__(self, "sort_order", SortOrder(self.sort_order))
        object.__setattr__(self, "filters", dict(self.filters))

    def with_changes(self, **changes: Any) -> "CollectionQuery":
        return replace(self, **changes)

    def to_params(self) -> Dict[str, Any]:
        """Render the wire query parameters, omitting empty values."""
        params: Dict[str, Any] = {
            "page": self.page,
            "pageSize": self.page_size,
            "searchTerm": self.search_term or None,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order.value,
        }
        for key, value in self.filters.items():
            params[key] = value.value if isinstance(value, Enum) else value
        return {k: v for k, v in params.items() if v is not None and v != ""}
