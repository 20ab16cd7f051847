"""ListController - state and orchestration of one list screen."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import List, Optional, Tuple

from capabilities.logic.capability_gate import CapabilityGate
from core.contracts.backend import IBackendGateway
from core.exceptions.errors import BackendError, PolicyViolationError
from core.models.entity import DUE_FIELDS, EntityRecord
from lifecycle.services.lifecycle_service import ActionState, LifecycleService
from lifecycle.services.transition_service import TransitionService
from listing.dto.collection_query import CollectionQuery
from listing.dto.paged_result import PagedResult
from listing.dto.statistics import EntityStatistics
from listing.logic.debouncer import DEFAULT_DELAY_MS, Scheduler, SearchDebouncer
from listing.logic.query_reducer import QueryEvent, QueryReducer, SearchEdited
from listing.logic.request_tracker import RequestTracker
from listing.models.listing_spec import ListingSpec
from urgency.enum.urgency_tier import UrgencyTier
from urgency.logic.urgency_classifier import UrgencyClassifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowState:
    """One rendered row: the record, its offered actions and its urgency tier."""

    entity: EntityRecord
    actions: Tuple[ActionState, ...]
    urgency: Optional[UrgencyTier] = None

    @property
    def enabled_actions(self) -> List[str]:
        return [a.action for a in self.actions if a.enabled]


class ListController:
    """
    Drives one list screen.

    Responsibilities:
    - Hold the current query and apply query events through the reducer
    - Fetch page and statistics together under one request token
    - Drop completions of superseded requests
    - Derive row actions (capability gate + lifecycle) and urgency tiers
    - Turn transition rejections into a dismissible notice and reload

    State is never patched after a mutation; every outcome reloads.
    """

    def __init__(
        self,
        *,
        spec: ListingSpec,
        backend: IBackendGateway,
        gate: CapabilityGate,
        lifecycle: LifecycleService,
        transitions: TransitionService,
        classifier: UrgencyClassifier,
        debounce_ms: int = DEFAULT_DELAY_MS,
        scheduler: Optional[Scheduler] = None,
        executor: Optional[Executor] = None,
        page_window: int = 5,
    ) -> None:
        self._spec = spec
        self._backend = backend
        self._gate = gate
        self._lifecycle = lifecycle
        self._transitions = transitions
        self._classifier = classifier
        self._executor = executor
        self._page_window = page_window

        self._reducer = QueryReducer(spec)
        self._tracker = RequestTracker()
        self._debouncer = SearchDebouncer(self._on_search_settled, delay_ms=debounce_ms, scheduler=scheduler)
        self._lock = threading.RLock()

        self.query: CollectionQuery = self._reducer.initial_query()
        self.page: Optional[PagedResult[EntityRecord]] = None
        self.statistics: Optional[EntityStatistics] = None
        self.rows: List[RowState] = []
        self.loading = False
        self.error: Optional[str] = None
        self.notice: Optional[str] = None

    # ------------------------------------------------------------------ #
    @property
    def spec(self) -> ListingSpec:
        return self._spec

    @property
    def is_visible(self) -> bool:
        """Whether the actor may see this screen at all."""
        return self._gate.evaluate(self._spec.view_constraints)

    def toolbar_actions(self) -> List[str]:
        if self._spec.create is None:
            return []
        return self._gate.filter([(self._spec.create.name, self._spec.create.constraints)])

    def page_numbers(self) -> List[int]:
        return self.page.page_window(self._page_window) if self.page else []

    # ------------------------------------------------------------------ #
    #  Loading
    # ------------------------------------------------------------------ #
    def reload(self) -> Optional[Future]:
        """
        Fetch page and statistics for the current query.

        Runs inline, or on the executor when one was given (the Future is
        returned). Only the latest request may update the state.
        """
        with self._lock:
            if not self.is_visible:
                self.page, self.statistics, self.rows = None, None, []
                self.loading = False
                return None
            token = self._tracker.issue()
            query = self.query
            self.loading = True

        if self._executor is not None:
            return self._executor.submit(self._fetch, token, query)
        self._fetch(token, query)
        return None

    def retry(self) -> Optional[Future]:
        return self.reload()

    def _fetch(self, token: int, query: CollectionQuery) -> None:
        entity_type = self._spec.entity_type
        try:
            page = self._backend.fetch_page(entity_type, query)
            stats = self._backend.fetch_statistics(entity_type)
        except BackendError as ex:
            logger.error("Loading %s failed: %s", entity_type.value, ex.message)
            self._apply_failure(token, ex.message)
            return
        except ValueError as ex:
            logger.exception("Loading %s returned an unusable payload", entity_type.value)
            self._apply_failure(token, f"Invalid data from backend: {ex}")
            return
        self._apply_success(token, page, stats)

    def _apply_success(self, token: int, page: PagedResult[EntityRecord], stats: EntityStatistics) -> None:
        rows = [self._row_for(entity) for entity in page.items]
        with self._lock:
            if not self._tracker.is_current(token):
                logger.debug("Discarding stale response for request %s", token)
                return
            last_page = max(page.total_pages, 1)
            out_of_range = page.page > last_page
            if out_of_range:
                # rows vanished after a mutation; show the new last page instead
                logger.info("Page %s out of range (%s pages), moving to last page", page.page, last_page)
                self.query = self.query.with_changes(page=last_page)
            else:
                self.page = page
                self.statistics = stats
                self.rows = rows
                self.error = None
                self.loading = False
        if out_of_range:
            self.reload()

    def _apply_failure(self, token: int, message: str) -> None:
        with self._lock:
            if not self._tracker.is_current(token):
                logger.debug("Discarding stale failure for request %s", token)
                return
            self.page = None
            self.statistics = None
            self.rows = []
            self.error = message
            self.loading = False

    def _row_for(self, entity: EntityRecord) -> RowState:
        gated = self._gate.filter([(a.name, a.constraints) for a in self._spec.row_actions])
        actions = tuple(ActionState(name) for name in gated) + tuple(self._lifecycle.describe_actions(entity))
        urgency = self._classifier.classify(entity) if entity.entity_type in DUE_FIELDS else None
        return RowState(entity=entity, actions=actions, urgency=urgency)

    # ------------------------------------------------------------------ #
    #  Query events
    # ------------------------------------------------------------------ #
    def dispatch(self, event: QueryEvent) -> bool:
        """Apply a query event; reloads and returns True when the query changed."""
        with self._lock:
            total_pages = self.page.total_pages if self.page else None
            new_query = self._reducer.apply(self.query, event, total_pages=total_pages)
            if new_query == self.query:
                return False
            self.query = new_query
        self.reload()
        return True

    def search(self, text: str) -> None:
        """Debounced search; the settled text is dispatched as SearchEdited."""
        self._debouncer.push(text)

    def flush_search(self) -> None:
        self._debouncer.flush()

    def _on_search_settled(self, text: str) -> None:
        self.dispatch(SearchEdited(text))

    # ------------------------------------------------------------------ #
    #  Transitions
    # ------------------------------------------------------------------ #
    def perform(self, entity: EntityRecord, action: str, payload=None) -> bool:
        """
        Request a lifecycle transition and reload.

        Returns True on success. A rejection sets ``notice`` to the server's
        message; the list is reloaded either way.
        """
        try:
            self._transitions.request(entity, action, payload)
            ok = True
            with self._lock:
                self.notice = None
        except (BackendError, PolicyViolationError) as ex:
            ok = False
            with self._lock:
                self.notice = ex.message if isinstance(ex, BackendError) else str(ex)
        self.reload()
        return ok

    def dismiss_notice(self) -> None:
        with self._lock:
            self.notice = None

    def close(self) -> None:
        self._debouncer.cancel()
