"""Last-result cache with a time-to-live.

Keeps the most recent successful record in a single key-value slot so
a restarted client can restore it. Expired or corrupt entries are
deleted on read, and storage failures are logged and treated as a miss.
"""

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ValidationError

from idscan.models import ExtractedRecord
from idscan.utils.config import CacheConfig
from idscan.utils.logger import get_logger

logger = get_logger(__name__)

_MS_PER_HOUR = 60 * 60 * 1000


def now_millis() -> int:
    return int(time.time() * 1000)


class KeyValueStore(Protocol):
    """Minimal string key-value storage used by the cache."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, mainly for tests and the API's default wiring."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Stores each key as ``<directory>/<key>.json``.

    Args:
        directory: Directory holding the entries; created on first write.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class CachedResult(BaseModel):
    """Stored envelope: the serialized record and when it was saved."""

    record: dict[str, Any]
    saved_at: int


class ResultCache:
    """Single-slot cache for the last extracted record.

    Args:
        store: Backing key-value store.
        key: Slot name.
        ttl_hours: Age after which an entry is expired.
        clock: Returns the current time in epoch milliseconds.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = "idscan_last",
        ttl_hours: float = 24.0,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self.store = store
        self.key = key
        self.ttl_ms = int(ttl_hours * _MS_PER_HOUR)
        self.clock = clock

    def save(self, record: ExtractedRecord) -> None:
        """Persist ``record``, replacing any previous entry."""
        envelope = CachedResult(record=record.to_dict(), saved_at=self.clock())
        try:
            self.store.set(self.key, envelope.model_dump_json())
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Could not cache result: %s", exc)
            return
        logger.debug("Cached %s result at %d", record.doc_type, envelope.saved_at)

    def load(self) -> ExtractedRecord | None:
        """Return the cached record, or ``None`` if absent, expired, or corrupt."""
        try:
            raw = self.store.get(self.key)
        except UnicodeDecodeError as exc:
            logger.warning("Discarding undecodable cached result: %s", exc)
            self.clear()
            return None
        except OSError as exc:
            logger.warning("Could not read cached result: %s", exc)
            return None
        if raw is None:
            return None

        try:
            envelope = CachedResult.model_validate_json(raw)
            record = ExtractedRecord.from_dict(envelope.record)
        except (ValidationError, ValueError) as exc:
            logger.warning("Discarding corrupt cached result: %s", exc)
            self.clear()
            return None

        age_ms = self.clock() - envelope.saved_at
        if age_ms > self.ttl_ms:
            logger.info("Cached result expired (%.1f h old)", age_ms / _MS_PER_HOUR)
            self.clear()
            return None
        return record

    def clear(self) -> None:
        """Delete the cached entry, ignoring storage failures."""
        try:
            self.store.delete(self.key)
        except OSError as exc:
            logger.warning("Could not delete cached result: %s", exc)


def build_cache(config: CacheConfig) -> ResultCache | None:
    """Create the file-backed cache described by ``config``, if enabled."""
    if not config.enabled:
        return None
    return ResultCache(
        JsonFileStore(Path(config.directory)),
        key=config.key,
        ttl_hours=config.ttl_hours,
    )
