"""Public retail price feed for virtual machines."""
from __future__ import annotations

from typing import Any, List

from pydantic import ValidationError

from ..config import FeedSettings
from ..schema import RawPriceItem
from ..util import log
from . import FeedResult, follow_pages

FEED_ID = "retail_prices"
MAX_PAGE_SIZE = 1000


def build_filter(region: str) -> str:
    return (
        "serviceName eq 'Virtual Machines' "
        f"and armRegionName eq '{region}' "
        "and priceType eq 'Consumption'"
    )


def fetch_price_items(session, region: str, settings: FeedSettings) -> FeedResult:
    """Collect every consumption price row for ``region``.

    Returns a :class:`FeedResult` whose ``items`` is a list of
    :class:`RawPriceItem`. Rows without a SKU name or price are skipped.
    """
    items: List[RawPriceItem] = []
    skipped = 0

    def collect(rows: List[Any]) -> None:
        nonlocal skipped
        for row in rows:
            if not isinstance(row, dict):
                skipped += 1
                continue
            try:
                items.append(RawPriceItem.from_feed(row))
            except ValidationError:
                skipped += 1

    params = {
        "$filter": build_filter(region),
        "$top": min(settings.page_size, MAX_PAGE_SIZE),
    }
    pages, error = follow_pages(
        session,
        settings.retail_url,
        feed=FEED_ID,
        items_key="Items",
        next_key="NextPageLink",
        on_page=collect,
        params=params,
    )
    if skipped:
        log("WARN", f"{FEED_ID}: skipped {skipped} malformed rows")
    log("INFO", f"{FEED_ID}: fetched {len(items)} price rows for {region} in {pages} pages")
    return FeedResult(items=items, pages=pages, skipped=skipped, error=error)


__all__ = ["fetch_price_items", "build_filter", "FEED_ID", "MAX_PAGE_SIZE"]
