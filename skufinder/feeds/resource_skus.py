"""Authenticated resource SKU feed (hardware capabilities per size)."""
from __future__ import annotations

from typing import Any, Dict, List

from pydantic import ValidationError

from ..config import FeedSettings
from ..schema import RawCapabilitySku
from ..util import log
from . import FeedResult, follow_pages

FEED_ID = "resource_skus"
VIRTUAL_MACHINES = "virtualMachines"


def build_url(settings: FeedSettings, subscription_id: str) -> str:
    return (
        f"{settings.management_url}/subscriptions/{subscription_id}"
        "/providers/Microsoft.Compute/skus"
    )


def fetch_capability_map(
    session,
    token: str,
    subscription_id: str,
    region: str,
    settings: FeedSettings,
) -> FeedResult:
    """Collect virtual machine SKUs for ``region`` keyed by SKU name.

    A name seen twice keeps the entry from the later row.
    """
    mapping: Dict[str, RawCapabilitySku] = {}
    skipped = 0

    def collect(rows: List[Any]) -> None:
        nonlocal skipped
        for row in rows:
            if not isinstance(row, dict) or row.get("resourceType") != VIRTUAL_MACHINES:
                continue
            try:
                sku = RawCapabilitySku.from_feed(row)
            except ValidationError:
                skipped += 1
                continue
            mapping[sku.name] = sku

    params = {
        "api-version": settings.compute_api_version,
        "$filter": f"location eq '{region}'",
    }
    pages, error = follow_pages(
        session,
        build_url(settings, subscription_id),
        feed=FEED_ID,
        items_key="value",
        next_key="nextLink",
        on_page=collect,
        params=params,
        headers={"Authorization": f"Bearer {token}"},
    )
    if skipped:
        log("WARN", f"{FEED_ID}: skipped {skipped} malformed entries")
    log("INFO", f"{FEED_ID}: fetched {len(mapping)} VM SKUs for {region} in {pages} pages")
    return FeedResult(items=mapping, pages=pages, skipped=skipped, error=error)


__all__ = ["fetch_capability_map", "build_url", "FEED_ID", "VIRTUAL_MACHINES"]
