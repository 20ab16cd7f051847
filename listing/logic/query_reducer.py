"""
query_reducer.py

Pure transitions of a CollectionQuery in response to list-screen events.

=====================================================================
Rules
=====================================================================
- Search, filter and sort events always reset ``page`` to 1.
- Clicking the active sort column toggles its order; clicking another
  column selects it with that column's declared default order.
- A page-size change resets to page 1; only declared sizes are accepted.
- Navigation is clamped to ``[1, total_pages]``. At the boundary the very
  same query object is returned, so callers can skip the reload.
- Undeclared filter keys, filter values or sort columns raise ValueError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from listing.dto.collection_query import CollectionQuery
from listing.models.listing_spec import ListingSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchEdited:
    term: Optional[str]


@dataclass(frozen=True)
class FilterChanged:
    key: str
    value: Any = None


@dataclass(frozen=True)
class FiltersCleared:
    pass


@dataclass(frozen=True)
class SortClicked:
    column: str


@dataclass(frozen=True)
class PageSizeChanged:
    page_size: int


@dataclass(frozen=True)
class PageNavigated:
    page: int


@dataclass(frozen=True)
class NextPage:
    pass


@dataclass(frozen=True)
class PreviousPage:
    pass


@dataclass(frozen=True)
class FirstPage:
    pass


@dataclass(frozen=True)
class LastPage:
    pass


QueryEvent = Union[
    SearchEdited, FilterChanged, FiltersCleared, SortClicked, PageSizeChanged,
    PageNavigated, NextPage, PreviousPage, FirstPage, LastPage,
]


class QueryReducer:
    def __init__(self, spec: ListingSpec) -> None:
        self._spec = spec

    @property
    def spec(self) -> ListingSpec:
        return self._spec

    def initial_query(self) -> CollectionQuery:
        return self._spec.initial_query()

    def apply(
        self,
        query: CollectionQuery,
        event: QueryEvent,
        total_pages: Optional[int] = None,
    ) -> CollectionQuery:
        if isinstance(event, SearchEdited):
            term = (event.term or "").strip() or None
            return query.with_changes(search_term=term, page=1)

        if isinstance(event, FilterChanged):
            spec = self._spec.filter_spec(event.key)
            if spec is None:
                raise ValueError(f"Undeclared filter {event.key!r} for {self._spec.entity_type.value}")
            if not spec.accepts(event.value):
                raise ValueError(f"Invalid value {event.value!r} for filter {event.key!r}")
            filters = dict(query.filters)
            if event.value is None or event.value == "":
                filters.pop(event.key, None)
            else:
                filters[event.key] = event.value
            return query.with_changes(filters=filters, page=1)

        if isinstance(event, FiltersCleared):
            return query.with_changes(filters={}, search_term=None, page=1)

        if isinstance(event, SortClicked):
            column = self._spec.column(event.column)
            if column is None:
                raise ValueError(f"Undeclared sort column {event.column!r} for {self._spec.entity_type.value}")
            if column.field == query.sort_by:
                order = query.sort_order.toggled()
            else:
                order = column.default_order
            return query.with_changes(sort_by=column.field, sort_order=order, page=1)

        if isinstance(event, PageSizeChanged):
            if event.page_size not in self._spec.page_size_options:
                raise ValueError(
                    f"Page size {event.page_size} not in {self._spec.page_size_options}"
                )
            return query.with_changes(page_size=event.page_size, page=1)

        if isinstance(event, PageNavigated):
            return self._goto(query, event.page, total_pages)
        if isinstance(event, NextPage):
            return self._goto(query, query.page + 1, total_pages)
        if isinstance(event, PreviousPage):
            return self._goto(query, query.page - 1, total_pages)
        if isinstance(event, FirstPage):
            return self._goto(query, 1, total_pages)
        if isinstance(event, LastPage):
            if total_pages is None:
                return query
            return self._goto(query, total_pages, total_pages)

        raise TypeError(f"Unsupported query event: {event!r}")

    @staticmethod
    def _goto(query: CollectionQuery, target: int, total_pages: Optional[int]) -> CollectionQuery:
        upper = max(total_pages, 1) if total_pages is not None else None
        page = max(1, target)
        if upper is not None:
            page = min(page, upper)
        if page == query.page:
            logger.debug("Navigation to page %s clamped, query unchanged", target)
            return query
        return query.with_changes(page=page)
