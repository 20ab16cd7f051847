"""
rest_gateway.py

Backend gateway over the production-management REST API (``requests``).

Paths follow the API's conventions: ``GET /{base}/paged`` for pages,
``GET /{base}/statistics`` for counters and ``POST /{base}/{id}/{action}``
for transitions, with per-action overrides where the API models a
transition differently (e.g. deactivating a material is ``DELETE
/inventory/{id}``). Authentication is a bearer token obtained by
``login``. There is no retry: failures surface as BackendError carrying the
server's ``message`` verbatim.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

import requests

from core.contracts.backend import IBackendGateway
from core.exceptions.errors import BackendError, LoadFailedError, TransitionRejectedError
from core.models.actor import Actor
from core.models.entity import EntityRecord, EntityType
from listing.dto.collection_query import CollectionQuery
from listing.dto.paged_result import PagedResult
from listing.dto.statistics import EntityStatistics

logger = logging.getLogger(__name__)

# raised by the DTO factories on malformed payloads
PAYLOAD_ERRORS = (ValueError, TypeError, AttributeError)

BASE_PATHS: Dict[EntityType, str] = {
    EntityType.ACQUISITION: "/acquisition",
    EntityType.MATERIAL: "/inventory",
    EntityType.PRODUCTION_PLAN: "/productionplan",
    EntityType.RECYCLABLE_PRODUCTION_PLAN: "/productionplan/recyclable",
    EntityType.ORDER: "/order",
    EntityType.CLIENT: "/client",
    EntityType.SUPPLIER: "/supplier",
    EntityType.TRANSPORT: "/transport",
    EntityType.USER: "/user",
}

STATISTICS_PATHS: Dict[EntityType, str] = {
    EntityType.RECYCLABLE_PRODUCTION_PLAN: "/productionplan/statistics",
}

# (entity type, action) -> (HTTP method, path template, fixed body)
TRANSITION_OVERRIDES: Dict[Tuple[EntityType, str], Tuple[str, str, Optional[Dict[str, Any]]]] = {
    (EntityType.MATERIAL, "deactivate"): ("DELETE", "/inventory/{id}", None),
    (EntityType.MATERIAL, "activate"): ("PUT", "/inventory/{id}", {"isActive": True}),
    (EntityType.USER, "deactivate"): ("PUT", "/user/{id}", {"isActive": False}),
    (EntityType.USER, "activate"): ("PUT", "/user/{id}", {"isActive": True}),
    (EntityType.PRODUCTION_PLAN, "receive"): ("PUT", "/productionplan/{id}", {"status": "Completed"}),
}


class RestBackendGateway(IBackendGateway):
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        token: Optional[str] = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._token = token
        self._actor: Optional[Actor] = None

    # ------------------------------------------------------------------ #
    #  Authentication
    # ------------------------------------------------------------------ #
    def login(self, username: str, password: str) -> Actor:
        """Authenticate, keep the bearer token and return the session's actor."""
        data = self._request("POST", "/auth/login", json={"username": username, "password": password})
        self._token = data.get("token")
        if not self._token:
            raise BackendError("Login response did not contain a token")
        self._actor = Actor.from_session_payload(data.get("user") or {})
        logger.info("Logged in as %s", self._actor.username)
        return self._actor

    def logout(self) -> None:
        self._token = None
        self._actor = None

    def current_actor(self) -> Actor:
        if self._actor is None:
            self._actor = Actor.from_session_payload(self._request("GET", "/user/profile"))
        return self._actor

    # ------------------------------------------------------------------ #
    #  Collections
    # ------------------------------------------------------------------ #
    def fetch_page(self, entity_type: EntityType, query: CollectionQuery) -> PagedResult[EntityRecord]:
        path = f"{BASE_PATHS[entity_type]}/paged"
        try:
            data = self._request("GET", path, params=query.to_params())
        except BackendError as ex:
            raise LoadFailedError(ex.message, status_code=ex.status_code) from ex
        try:
            return PagedResult.from_payload(data, lambda item: EntityRecord.from_payload(entity_type, item))
        except PAYLOAD_ERRORS as ex:
            raise LoadFailedError(f"Invalid page payload from {path}: {ex}") from ex

    def fetch_statistics(self, entity_type: EntityType) -> EntityStatistics:
        path = STATISTICS_PATHS.get(entity_type, f"{BASE_PATHS[entity_type]}/statistics")
        try:
            data = self._request("GET", path)
        except BackendError as ex:
            raise LoadFailedError(ex.message, status_code=ex.status_code) from ex
        try:
            return EntityStatistics.from_payload(data)
        except PAYLOAD_ERRORS as ex:
            raise LoadFailedError(f"Invalid statistics payload from {path}: {ex}") from ex

    # ------------------------------------------------------------------ #
    #  Transitions
    # ------------------------------------------------------------------ #
    def transition(
        self,
        entity_type: EntityType,
        entity_id: Any,
        action: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> EntityRecord:
        """
        Perform a transition. Answers without a body (e.g. DELETE) yield a
        record carrying only the id; callers reload the list anyway.
        """
        method, path, body = self._transition_route(entity_type, entity_id, action, payload)
        try:
            data = self._request(method, path, json=body)
        except BackendError as ex:
            if ex.status_code is not None and 400 <= ex.status_code < 500:
                raise TransitionRejectedError(ex.message, status_code=ex.status_code) from ex
            raise
        if not isinstance(data, Mapping) or not data:
            data = {"id": entity_id}
        try:
            return EntityRecord.from_payload(entity_type, data)
        except PAYLOAD_ERRORS as ex:
            raise BackendError(f"Invalid response from {path}: {ex}") from ex

    @staticmethod
    def _transition_route(
        entity_type: EntityType,
        entity_id: Any,
        action: str,
        payload: Optional[Mapping[str, Any]],
    ) -> Tuple[str, str, Optional[Dict[str, Any]]]:
        base = BASE_PATHS[entity_type]
        if action == "edit":
            return "PUT", f"{base}/{entity_id}", dict(payload or {})

        override = TRANSITION_OVERRIDES.get((entity_type, action))
        if override is not None:
            method, template, fixed = override
            body = None if fixed is None and not payload else {**(fixed or {}), **dict(payload or {})}
            return method, template.format(id=entity_id), body

        return "POST", f"{base}/{entity_id}/{action}", dict(payload or {})

    # ------------------------------------------------------------------ #
    #  HTTP
    # ------------------------------------------------------------------ #
    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as ex:
            raise BackendError(f"Could not reach backend: {ex}") from ex

        if response.status_code >= 400:
            raise BackendError(_error_message(response), status_code=response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as ex:
            raise BackendError(f"Invalid JSON from {path}") from ex


def _error_message(response: requests.Response) -> str:
    """Server ``message`` if present, else the body text, else the reason phrase."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping) and body.get("message"):
        return str(body["message"])
    text = (response.text or "").strip()
    return text or response.reason or f"HTTP {response.status_code}"
