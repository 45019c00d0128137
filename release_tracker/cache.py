"""Versioned, TTL-bounded dataset cache on top of a pluggable key/value store.

All cache failures are non-fatal: a corrupt, stale or unwritable entry
behaves like a cache miss.
"""

import json
import logging
import time
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from release_tracker.config import CACHE_DIR, CACHE_TTL_MINUTES
from release_tracker.errors import CacheError
from release_tracker.models import Dataset

logger = logging.getLogger(__name__)

CACHE_VERSION = 2  # bump to invalidate old caches
CACHE_KEY = f"hf_model_cache_v{CACHE_VERSION}"
LEGACY_CACHE_KEY = "hf_model_cache"
DEFAULT_TTL = timedelta(minutes=CACHE_TTL_MINUTES)


class CacheStore(Protocol):
    """Minimal string key/value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryCacheStore:
    """Dict-backed store, mostly for tests and one-shot runs."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class FileCacheStore:
    """One ``<key>.json`` file per key under *root*."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root if root is not None else CACHE_DIR

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(value, encoding="utf-8")

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def __contains__(self, key: str) -> bool:
        return self._path(key).exists()


class DatasetCache:
    """Stores one Dataset as ``{"timestamp", "data"}`` JSON under a versioned key."""

    def __init__(
        self,
        store: CacheStore,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.ttl = ttl
        self.clock = clock

    def _decode(self, raw: str) -> tuple[float, Dataset]:
        try:
            entry = json.loads(raw)
            timestamp = float(entry["timestamp"])
            dataset = Dataset.model_validate(entry["data"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, ValidationError) as e:
            raise CacheError(f"Unreadable cache entry: {e}") from e
        return timestamp, dataset

    def get(self) -> Dataset | None:
        """Return the cached dataset, or None when absent, corrupt or expired."""
        try:
            self.store.delete(LEGACY_CACHE_KEY)
            raw = self.store.get(CACHE_KEY)
        except UnicodeDecodeError as e:
            logger.warning("Cache entry is not valid UTF-8 (%s); discarding", e)
            self._discard()
            return None
        except OSError:
            logger.warning("Could not read dataset cache", exc_info=True)
            return None

        if raw is None:
            logger.debug("Dataset cache miss")
            return None

        try:
            timestamp, dataset = self._decode(raw)
        except CacheError as e:
            logger.warning("%s; discarding", e)
            self._discard()
            return None

        age = self.clock() - timestamp
        if age >= self.ttl.total_seconds():
            logger.info("Dataset cache expired (%.0fs old)", age)
            self._discard()
            return None

        logger.info("Dataset cache hit (%.0fs old, %d models)", age, len(dataset.model_releases))
        return dataset

    def set(self, dataset: Dataset) -> None:
        """Store *dataset* stamped with the current time. Failures are swallowed."""
        try:
            payload = json.dumps(
                {"timestamp": self.clock(), "data": dataset.model_dump(mode="json")}
            )
            self.store.set(CACHE_KEY, payload)
        except (OSError, TypeError, ValueError):
            logger.warning("Could not write dataset cache", exc_info=True)
            return
        logger.info("Cached dataset under %s", CACHE_KEY)

    def clear(self) -> None:
        """Remove the current and the legacy cache entries."""
        self._discard()
        try:
            self.store.delete(LEGACY_CACHE_KEY)
        except OSError:
            logger.warning("Could not delete legacy cache key", exc_info=True)

    def _discard(self) -> None:
        try:
            self.store.delete(CACHE_KEY)
        except OSError:
            logger.warning("Could not delete dataset cache", exc_info=True)
