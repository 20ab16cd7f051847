"""core/contracts/backend.py
========================

Backend gateway contract.

The backend is the single authority for entity status and for the
permissions of the actor. The console reads pages and statistics through
this interface and asks for transitions; it never changes status locally.

Errors:
- ``LoadFailedError`` when a page or statistics fetch fails
- ``TransitionRejectedError`` (server message verbatim) when a transition is refused
- ``BackendError`` for any other transport failure
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from core.models.actor import Actor
from core.models.entity import EntityRecord, EntityType
from listing.dto.collection_query import CollectionQuery
from listing.dto.paged_result import PagedResult
from listing.dto.statistics import EntityStatistics


class IBackendGateway(ABC):
    """Read collections and request transitions."""

    @abstractmethod
    def fetch_page(self, entity_type: EntityType, query: CollectionQuery) -> PagedResult[EntityRecord]:
        """Return one page of records matching ``query``."""

    @abstractmethod
    def fetch_statistics(self, entity_type: EntityType) -> EntityStatistics:
        """Return aggregate counters for the entity type (independent of paging)."""

    @abstractmethod
    def transition(
        self,
        entity_type: EntityType,
        entity_id: Any,
        action: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> EntityRecord:
        """Ask the backend to perform ``action``; returns the updated record."""

    @abstractmethod
    def current_actor(self) -> Actor:
        """Return the authenticated actor as known by the backend."""
