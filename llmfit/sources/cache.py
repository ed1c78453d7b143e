"""Time-to-live caches for catalog and model metadata.

Caches are passed explicitly to the source functions that use them; the
estimation engine never touches a cache.
"""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from llmfit.config import CACHE_DIR

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    ttl: float  # seconds

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


class TTLCache:
    """In-memory key -> value mapping whose entries expire after a TTL.

    Expired entries are evicted lazily on lookup. *clock* returns seconds and
    is injectable so tests can move time forward.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            logger.debug("Cache entry expired: %s", key)
            self.delete(key)
            return None
        return entry.data

    def set(self, key: str, data: Any, ttl: float | None = None) -> None:
        self._entries[key] = CacheEntry(
            data=data,
            timestamp=self._clock(),
            ttl=self.ttl_seconds if ttl is None else ttl,
        )
        self._persist()

    def delete(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            self._persist()

    def clear(self) -> None:
        self._entries.clear()
        self._persist()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def _persist(self) -> None:
        """Hook for subclasses that keep entries outside the process."""


class FileCache(TTLCache):
    """TTL cache persisted as a single JSON file.

    Values must be JSON-serializable. A missing or unreadable file starts an
    empty cache; failed writes are logged and otherwise ignored.
    """

    def __init__(
        self,
        path: Path,
        ttl_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(ttl_seconds, clock)
        self.path = path
        self._entries = self._load()

    def _load(self) -> dict[str, CacheEntry]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text())
            return {key: CacheEntry(**value) for key, value in raw.items()}
        except (json.JSONDecodeError, OSError, TypeError, AttributeError):
            logger.warning("Ignoring unreadable cache file %s", self.path)
            return {}

    def _persist(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = {key: asdict(entry) for key, entry in self._entries.items()}
            self.path.write_text(json.dumps(payload, indent=2) + "\n")
        except (OSError, TypeError):
            logger.warning("Failed to write cache file %s", self.path, exc_info=True)


def default_cache(name: str, ttl_seconds: float) -> FileCache:
    """File cache named *name* under the configured cache directory."""
    return FileCache(CACHE_DIR / f"{name}.json", ttl_seconds)
