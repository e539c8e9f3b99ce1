"""Time-boxed per-region snapshots of merged SKU records."""
from __future__ import annotations

import json
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from .errors import CacheStorageError
from .schema import CacheEntry, SkuRecord
from .util import epoch_ms, from_epoch_ms, log, write_json_atomic

DEFAULT_TTL = timedelta(hours=24)
KEY_PREFIX = "az_skus_cache_"

_KEY_SANITIZE = re.compile(r"[^A-Za-z0-9_.-]+")


class CacheStore:
    """Key-value persistence used by :class:`SkuCache`.

    Implementations raise :class:`CacheStorageError` when they cannot read or
    write; a missing key reads as ``None``.
    """

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def write(self, key: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError


class MemoryCacheStore(CacheStore):
    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self._entries.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def write(self, key: str, payload: Dict[str, Any]) -> None:
        self._entries[key] = json.dumps(payload, ensure_ascii=False)

    def raw(self, key: str) -> Optional[str]:
        return self._entries.get(key)


class FileCacheStore(CacheStore):
    """One JSON file per key under ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_KEY_SANITIZE.sub('_', key)}.json"

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            raise CacheStorageError(f"failed to read {path} ({exc})") from exc

    def write(self, key: str, payload: Dict[str, Any]) -> None:
        path = self.path_for(key)
        try:
            write_json_atomic(path, payload)
        except OSError as exc:
            raise CacheStorageError(f"failed to write {path} ({exc})") from exc


class SkuCache:
    """Region-keyed cache of merged records with a fixed time-to-live."""

    def __init__(
        self,
        store: CacheStore,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        self.store = store
        self.ttl = ttl
        self.clock = clock

    @staticmethod
    def key(region: str) -> str:
        return f"{KEY_PREFIX}{region}"

    def entry(self, region: str) -> Optional[CacheEntry]:
        try:
            payload = self.store.read(self.key(region))
        except Exception as exc:
            log("WARN", f"cache: read failed for {region} ({exc})")
            return None
        if payload is None:
            return None
        try:
            return CacheEntry.model_validate(payload)
        except ValidationError as exc:
            log("WARN", f"cache: discarding malformed entry for {region} ({exc.error_count()} errors)")
            return None

    def is_expired(self, entry: CacheEntry) -> bool:
        age_ms = self.clock() - entry.timestamp
        return age_ms >= self.ttl.total_seconds() * 1000

    def fresh_entry(self, region: str) -> Optional[CacheEntry]:
        """Return the stored entry for ``region`` unless it is missing or expired."""
        entry = self.entry(region)
        if entry is None:
            return None
        if self.is_expired(entry):
            log("DEBUG", f"cache: entry for {region} expired")
            return None
        log("INFO", f"cache: hit for {region} ({len(entry.data)} records)")
        return entry

    def get(self, region: str) -> Optional[List[SkuRecord]]:
        entry = self.fresh_entry(region)
        if entry is None:
            return None
        return list(entry.data)

    def put(self, region: str, records: List[SkuRecord], degraded: bool = False) -> bool:
        """Store ``records``; returns ``False`` instead of raising on failure."""
        entry = CacheEntry(timestamp=self.clock(), data=list(records), degraded=degraded)
        try:
            self.store.write(self.key(region), entry.model_dump(mode="json"))
        except Exception as exc:
            log("WARN", f"cache: write failed for {region}, continuing without cache ({exc})")
            return False
        return True

    def last_updated(self, region: str) -> Optional[datetime]:
        entry = self.entry(region)
        if entry is None:
            return None
        return from_epoch_ms(entry.timestamp)


__all__ = [
    "CacheStore",
    "MemoryCacheStore",
    "FileCacheStore",
    "SkuCache",
    "DEFAULT_TTL",
]
