"""Stateful browsing session over a region's SKU catalog."""
from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from .catalog import SkuCatalog
from .query import Filters, QueryResult, SortConfig, query
from .schema import SkuRecord
from .util import log

LOAD_ERROR_MESSAGE = "Failed to load SKUs for this region."


class SkuBrowser:
    """Holds region, filters, sort order, current page and the loaded records.

    Loads commit with a single assignment of the record list, and only when
    the browser is still open and no newer load was started meanwhile.
    """

    def __init__(self, catalog: SkuCatalog, region: Optional[str] = None) -> None:
        self.catalog = catalog
        self.region = region or catalog.settings.run.default_region
        self.filters = Filters()
        self.sort = SortConfig()
        self.page = 1
        self.records: List[SkuRecord] = []
        self.loading = False
        self.error: Optional[str] = None
        self.degraded = False
        self.last_updated: Optional[datetime] = None
        self._alive = True
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return not self._alive

    def load(self, force: bool = False) -> bool:
        """Fetch the current region. Returns ``False`` when the result was discarded."""
        with self._lock:
            self._generation += 1
            generation = self._generation
            region = self.region
            self.loading = True
            self.error = None
        try:
            result = self.catalog.fetch_skus(region, force_refresh=force)
        except Exception as exc:
            log("ERROR", f"{region}: load failed ({exc})")
            return self._commit(generation, [], error=LOAD_ERROR_MESSAGE)
        return self._commit(
            generation,
            result.records,
            degraded=result.degraded,
            last_updated=result.fetched_at,
        )

    def refresh(self) -> bool:
        return self.load(force=True)

    def select_region(self, region: str) -> bool:
        self.region = region
        return self.load()

    def close(self) -> None:
        with self._lock:
            self._alive = False

    def _commit(
        self,
        generation: int,
        records: List[SkuRecord],
        error: Optional[str] = None,
        degraded: bool = False,
        last_updated: Optional[datetime] = None,
    ) -> bool:
        with self._lock:
            if not self._alive or generation != self._generation:
                log("DEBUG", f"discarding stale load #{generation}")
                return False
            self.records = records
            self.error = error
            self.degraded = degraded
            self.last_updated = last_updated
            self.loading = False
            self.page = 1
        return True

    def replace_records(self, records: Iterable[SkuRecord]) -> None:
        self.records = list(records)
        self.page = 1

    def update_filter(self, **changes) -> None:
        self.filters = replace(self.filters, **changes)
        self.page = 1

    def handle_sort(self, key: str) -> None:
        self.sort = self.sort.toggled(key)
        self.page = 1

    def set_page(self, page: int) -> int:
        self.page = self.view(page).page
        return self.page

    def view(self, page: Optional[int] = None) -> QueryResult:
        return query(self.records, self.filters, self.sort, self.page if page is None else page)


__all__ = ["SkuBrowser", "LOAD_ERROR_MESSAGE"]
