from __future__ import annotations

import json
import logging
import os
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from macfleet.models import is_valid_search_payload

logger = logging.getLogger(__name__)

CACHE_SUFFIX = ".cache"
DEFAULT_TTL_SECONDS = 300.0

Clock = Callable[[], float]
PayloadValidator = Callable[[Any], bool]


def search_cache_key(search_id: str) -> str:
    return f"search_{search_id}"


class CacheStore:
    """File cache of raw search payloads, one file per key.

    The file mtime is the write timestamp. An entry is served only while it is
    younger than ``ttl_seconds`` and still passes ``validator``; anything else
    is removed on read.
    """

    def __init__(
        self,
        cache_dir: Path,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        validator: PayloadValidator = is_valid_search_payload,
        clock: Clock = time.time,
    ) -> None:
        self._cache_dir = cache_dir
        self._ttl = ttl_seconds
        self._validator = validator
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._cache_dir

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def path_for(self, key: str) -> Path:
        return self._cache_dir / f"{key}{CACHE_SUFFIX}"

    def get(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            logger.debug("Cache miss for %s: no entry", key)
            return None

        age = self._clock() - path.stat().st_mtime
        if age >= self._ttl:
            logger.debug("Cache miss for %s: entry is %.0fs old", key, age)
            path.unlink(missing_ok=True)
            return None

        try:
            payload = json.loads(path.read_text())
        except (OSError, ValueError) as exc:
            logger.warning("Discarding unreadable cache entry %s: %s", path, exc)
            path.unlink(missing_ok=True)
            return None

        if not self._validator(payload):
            logger.warning("Discarding cache entry %s: unexpected payload shape", path)
            path.unlink(missing_ok=True)
            return None

        logger.debug("Cache hit for %s (%.0fs old)", key, age)
        return payload

    def put(self, key: str, payload: Any) -> None:
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        path.write_text(json.dumps(payload))
        now = self._clock()
        os.utime(path, (now, now))

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def entries(self) -> list[Path]:
        if not self._cache_dir.exists():
            return []
        return sorted(self._cache_dir.glob(f"*{CACHE_SUFFIX}"))

    def clear(self) -> int:
        removed = 0
        for path in self.entries():
            path.unlink(missing_ok=True)
            removed += 1
        return removed
