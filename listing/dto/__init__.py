"""Data Transfer Objects for list screens.

DTOs are immutable data containers for transferring data between layers.
"""

from listing.dto.collection_query import CollectionQuery, SortOrder
from listing.dto.paged_result import PagedResult
from listing.dto.statistics import EntityStatistics

__all__ = [
    "CollectionQuery",
    "EntityStatistics",
    "PagedResult",
    "SortOrder",
]
