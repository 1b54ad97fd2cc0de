from __future__ import annotations

import logging

import requests

from macfleet.config import InventoryConfig

logger = logging.getLogger(__name__)


class LatestVersionFeed:
    """Latest public macOS release from the SOFA feed."""

    def __init__(
        self,
        config: InventoryConfig,
        http: requests.Session | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._config = config
        self._http = http or requests.Session()
        self._timeout = timeout

    def latest_version(self) -> str:
        url = self._config.latest_feed_url
        try:
            response = self._http.get(url, timeout=self._timeout)
            response.raise_for_status()
            latest = response.json()["OSVersions"][0]["Latest"]
            version = str(latest["ProductVersion"])
        except (
            requests.RequestException,
            ValueError,
            KeyError,
            IndexError,
            TypeError,
        ) as exc:
            logger.warning(
                "Could not read latest macOS version from %s (%s), using %s",
                url,
                exc,
                self._config.fallback_version,
            )
            return self._config.fallback_version

        logger.debug(
            "Latest macOS: %s (build %s, posted %s)",
            version,
            latest.get("Build"),
            latest.get("PostingDate"),
        )
        return version
