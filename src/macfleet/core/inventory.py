from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import ValidationError

from macfleet.errors import AuthError, AuthErrorKind, FetchError, FetchErrorKind
from macfleet.models import (
    DeviceRecord,
    SearchSummary,
    Token,
    parse_search_payload,
)
from macfleet.storage.cache import CacheStore, search_cache_key

from .auth import AuthManager
from .client import BackendClient
from .session import FleetSession

logger = logging.getLogger(__name__)

SEARCH_PATH = "/JSSResource/advancedcomputersearches/id/{search_id}"
SEARCH_LIST_PATH = "/JSSResource/advancedcomputersearches"


class InventoryFetcher:
    def __init__(
        self, client: BackendClient, auth: AuthManager, cache: CacheStore
    ) -> None:
        self._client = client
        self._auth = auth
        self._cache = cache

    def fetch(
        self, session: FleetSession, search_id: str | None = None
    ) -> list[DeviceRecord]:
        """Devices of a saved search, sorted by id.

        Serves a fresh cache entry when there is one; otherwise fetches live,
        validates and caches the payload.
        """
        search_id = search_id or session.search_id
        key = search_cache_key(search_id)

        cached = self._cache.get(key)
        if cached is not None:
            logger.info("Using cached data for search %s", search_id)
            return self._records(cached, search_id)

        logger.info("Fetching search %s from %s", search_id, self._client.base_url)
        payload = self._fetch_live(session, search_id)
        devices = self._records(payload, search_id)
        self._cache.put(key, payload)
        return devices

    def fetch_with_retry(
        self, session: FleetSession, search_id: str | None = None
    ) -> list[DeviceRecord]:
        """``fetch``, refreshing the token and retrying once on failure."""
        try:
            return self.fetch(session, search_id)
        except FetchError as exc:
            logger.warning("%s; refreshing token and retrying", exc)

        self._auth.ensure_valid(session)
        return self.fetch(session, search_id)

    def list_searches(self, session: FleetSession) -> list[SearchSummary]:
        token = self._auth.ensure_valid(session)
        payload = self._get_json(SEARCH_LIST_PATH, token, "search list")

        try:
            entries = payload["advanced_computer_searches"]
            searches = [SearchSummary.model_validate(entry) for entry in entries]
        except (KeyError, TypeError, ValidationError) as exc:
            raise FetchError(
                FetchErrorKind.INVALID_SCHEMA,
                "Advanced Computer Search listing has an unexpected shape",
            ) from exc
        return sorted(searches, key=lambda search: search.id)

    def invalidate(self, search_id: str) -> None:
        if self._cache.delete(search_cache_key(search_id)):
            logger.debug("Dropped cached search %s", search_id)

    def _fetch_live(self, session: FleetSession, search_id: str) -> Any:
        if session.token is None:
            try:
                self._auth.refresh(session)
            except AuthError as exc:
                kind = (
                    FetchErrorKind.CONNECTION_FAILED
                    if exc.kind is AuthErrorKind.CONNECTION_FAILED
                    else FetchErrorKind.UNAUTHORIZED
                )
                raise FetchError(kind, str(exc)) from exc
        path = SEARCH_PATH.format(search_id=search_id)
        return self._get_json(path, session.token, f"search {search_id}")

    def _get_json(self, path: str, token: Token | None, what: str) -> Any:
        try:
            response = self._client.get(path, token=token)
        except requests.RequestException as exc:
            raise FetchError(
                FetchErrorKind.CONNECTION_FAILED, f"Failed to fetch {what}: {exc}"
            ) from exc

        if response.status_code in (401, 403):
            raise FetchError(
                FetchErrorKind.UNAUTHORIZED,
                f"Not authorized to fetch {what} (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        if response.status_code != 200:
            raise FetchError(
                FetchErrorKind.CONNECTION_FAILED,
                f"Failed to fetch {what} (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(
                FetchErrorKind.INVALID_SCHEMA, f"Response for {what} is not JSON"
            ) from exc

    @staticmethod
    def _records(payload: Any, search_id: str) -> list[DeviceRecord]:
        try:
            response = parse_search_payload(payload)
        except ValidationError as exc:
            logger.debug("Search %s payload rejected: %s", search_id, exc)
            raise FetchError(
                FetchErrorKind.INVALID_SCHEMA,
                f"Search {search_id} response has no computer list",
            ) from exc
        return sorted(response.devices, key=lambda device: device.id)
