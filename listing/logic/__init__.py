from listing.logic.debouncer import SearchDebouncer, ThreadingScheduler
from listing.logic.listing_registry import build_listing_registry, get_listing_spec
from listing.logic.query_reducer import (
    FilterChanged,
    FiltersCleared,
    FirstPage,
    LastPage,
    NextPage,
    PageNavigated,
    PageSizeChanged,
    PreviousPage,
    QueryEvent,
    QueryReducer,
    SearchEdited,
    SortClicked,
)
from listing.logic.request_tracker import RequestTracker

__all__ = [
    "FilterChanged",
    "FiltersCleared",
    "FirstPage",
    "LastPage",
    "NextPage",
    "PageNavigated",
    "PageSizeChanged",
    "PreviousPage",
    "QueryEvent",
    "QueryReducer",
    "RequestTracker",
    "SearchDebouncer",
    "SearchEdited",
    "SortClicked",
    "ThreadingScheduler",
    "build_listing_registry",
    "get_listing_spec",
]
