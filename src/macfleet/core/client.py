from __future__ import annotations

import logging
import time
from typing import Any

import requests

from macfleet.models import Token

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class BackendClient:
    """Thin wrapper over a ``requests`` session bound to one Jamf Pro URL.

    Transport errors are raised as ``requests.RequestException``; status codes
    are left for callers to interpret.
    """

    def __init__(
        self,
        base_url: str,
        http: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http or requests.Session()
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        token: Token | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> requests.Response:
        url = self.url(path)
        merged = {"Accept": "application/json"}
        if token is not None:
            merged["Authorization"] = f"Bearer {token.value}"
        if headers:
            merged.update(headers)

        started = time.monotonic()
        response = self._http.request(
            method, url, headers=merged, timeout=self._timeout, **kwargs
        )
        logger.debug(
            "%s %s -> HTTP %s (%.2fs, %d bytes)",
            method,
            url,
            response.status_code,
            time.monotonic() - started,
            len(response.content or b""),
        )
        return response

    def get(
        self, path: str, token: Token | None = None, **kwargs: Any
    ) -> requests.Response:
        return self.request("GET", path, token=token, **kwargs)

    def post(
        self, path: str, token: Token | None = None, **kwargs: Any
    ) -> requests.Response:
        return self.request("POST", path, token=token, **kwargs)

    def close(self) -> None:
        self._http.close()
