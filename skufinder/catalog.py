"""Fetch, reconcile and cache the SKU catalog for one region."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from .auth import acquire_token
from .cache import SkuCache
from .config import Credentials, Settings, load_credentials, load_settings
from .errors import AuthenticationError, PriceFeedError
from .feeds import FeedResult
from .feeds.resource_skus import fetch_capability_map
from .feeds.retail import fetch_price_items
from .merge import merge_records
from .schema import SkuRecord
from .util import from_epoch_ms, log, make_session, utc_now


@dataclass
class CatalogResult:
    region: str
    records: List[SkuRecord]
    from_cache: bool
    degraded: bool
    fetched_at: Optional[datetime]


class SkuCatalog:
    """Runs one fetch cycle: cache check, both feeds, merge, cache write.

    ``cache`` may be ``None`` to always fetch. ``credentials`` default to the
    environment; without them the catalog is built from heuristics only.
    Each feed gets its own session per cycle unless ``session`` is given, in
    which case both feeds share it.
    """

    def __init__(
        self,
        session=None,
        cache: Optional[SkuCache] = None,
        settings: Optional[Settings] = None,
        credentials: Optional[Credentials] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.session = session
        self.cache = cache
        self.credentials = credentials if credentials is not None else load_credentials()

    def fetch_skus(self, region: str, force_refresh: bool = False) -> CatalogResult:
        if self.cache is not None and not force_refresh:
            entry = self.cache.fresh_entry(region)
            if entry is not None:
                return CatalogResult(
                    region=region,
                    records=list(entry.data),
                    from_cache=True,
                    degraded=entry.degraded,
                    fetched_at=from_epoch_ms(entry.timestamp),
                )

        price_session = self._open_session()
        capability_session = self._open_session()
        try:
            # Each feed pages sequentially; the two feeds run side by side.
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="skufinder-feed") as pool:
                price_future = pool.submit(fetch_price_items, price_session, region, self.settings.feeds)
                capability_future = pool.submit(self._fetch_capabilities, capability_session, region)
                prices = price_future.result()
                capabilities = capability_future.result()
        finally:
            if self.session is None:
                price_session.close()
                capability_session.close()

        if prices.error is not None and not prices.items:
            log("ERROR", f"{region}: retail price feed failed ({prices.error})")
            raise PriceFeedError(f"no price rows for {region} ({prices.error})")
        if prices.error is not None:
            log("WARN", f"{region}: using {len(prices.items)} price rows from a partial fetch")

        capability_map = capabilities.items if capabilities is not None else {}
        degraded = not prices.complete or capabilities is None or not capabilities.complete
        if capabilities is not None and not capabilities.complete:
            log("WARN", f"{region}: capability feed incomplete, {len(capability_map)} SKUs kept")

        records = merge_records(prices.items, capability_map)
        log("INFO", f"{region}: merged {len(records)} SKUs from {len(prices.items)} price rows")

        # Only a complete price list is cached.
        if self.cache is not None and prices.complete:
            self.cache.put(region, records, degraded=degraded)
        elif self.cache is not None:
            log("WARN", f"{region}: price feed incomplete, result not cached")
        return CatalogResult(
            region=region,
            records=records,
            from_cache=False,
            degraded=degraded,
            fetched_at=utc_now(),
        )

    def _open_session(self):
        if self.session is not None:
            return self.session
        return make_session(self.settings.http)

    def _fetch_capabilities(self, session, region: str) -> Optional[FeedResult]:
        subscription_id = self.credentials.subscription_id
        if not subscription_id:
            log("WARN", "no subscription configured, capabilities will be inferred from SKU names")
            return None
        try:
            token = acquire_token(session, self.credentials, self.settings.feeds)
        except AuthenticationError as exc:
            log("WARN", f"authentication failed, capabilities will be inferred ({exc})")
            return None
        if token is None:
            log("WARN", "missing credentials, capabilities will be inferred from SKU names")
            return None
        return fetch_capability_map(session, token, subscription_id, region, self.settings.feeds)


__all__ = ["SkuCatalog", "CatalogResult"]
