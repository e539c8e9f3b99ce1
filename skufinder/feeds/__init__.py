"""Cursor-following fetch loops for the retail price and resource SKU feeds."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import FeedError
from ..util import log

PageHandler = Callable[[List[Any]], None]


@dataclass
class FeedResult:
    """Everything a feed accumulated, plus the error that stopped it early."""

    items: Any
    pages: int = 0
    skipped: int = 0
    error: Optional[FeedError] = None

    @property
    def complete(self) -> bool:
        return self.error is None


def follow_pages(
    session,
    url: Optional[str],
    *,
    feed: str,
    items_key: str,
    next_key: str,
    on_page: PageHandler,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[int, Optional[FeedError]]:
    """Request pages until the feed stops returning a next link.

    Each page is handed to ``on_page`` as soon as it is decoded. A failed or
    malformed page ends the loop; the pages already handed over stay with the
    caller and the failure is returned instead of raised.
    """
    pages = 0
    seen: set[str] = set()
    while url:
        if url in seen:
            log("WARN", f"{feed}: next link repeated after page {pages}, stopping")
            break
        seen.add(url)
        try:
            response = session.get(url, params=params, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except Exception as exc:
            log("WARN", f"{feed}: page {pages + 1} failed ({exc})")
            return pages, FeedError(feed, f"page {pages + 1} failed: {exc}")

        rows = payload.get(items_key) if isinstance(payload, dict) else None
        if isinstance(payload, dict) and rows is None:
            rows = []
        if not isinstance(rows, list):
            log("WARN", f"{feed}: page {pages + 1} has no '{items_key}' list")
            return pages, FeedError(feed, f"page {pages + 1} is malformed")

        pages += 1
        on_page(rows)
        log("DEBUG", f"{feed}: page {pages} returned {len(rows)} rows")
        url = payload.get(next_key)
        # Next links already carry the query string.
        params = None
    return pages, None


__all__ = ["FeedResult", "follow_pages"]
