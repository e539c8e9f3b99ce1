"""Reconcile retail price rows with resource SKU capabilities."""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .heuristics import classify_family, is_spot, split_tier
from .resolvers import DEFAULT_RESOLVERS, Resolver, resolve
from .schema import IS_SPOT, PRICE_PER_HOUR, RawCapabilitySku, RawPriceItem, SkuRecord, known


def dedupe_cheapest(items: Iterable[RawPriceItem]) -> List[RawPriceItem]:
    """Keep one row per SKU name: the cheapest, or the first seen on a tie.

    Names keep the position of their first appearance.
    """
    cheapest: Dict[str, RawPriceItem] = {}
    for item in items:
        existing = cheapest.get(item.sku_name)
        if existing is None or item.retail_price < existing.retail_price:
            cheapest[item.sku_name] = item
    return list(cheapest.values())


def build_record(
    item: RawPriceItem,
    capability_map: Mapping[str, RawCapabilitySku],
    resolvers: Sequence[Resolver] = DEFAULT_RESOLVERS,
) -> SkuRecord:
    specs = resolve(item.sku_name, capability_map, resolvers)
    capabilities = dict(specs.capabilities)
    capabilities[PRICE_PER_HOUR] = known(item.retail_price, "price_feed")
    capabilities[IS_SPOT] = known(is_spot(item.sku_name), "price_feed")
    tier, _ = split_tier(item.sku_name)
    return SkuRecord(
        name=item.sku_name,
        family=specs.family or classify_family(item.sku_name),
        size=item.size,
        tier=tier or "Standard",
        capabilities=capabilities,
        locations=[item.region],
    )


def merge_records(
    price_items: Iterable[RawPriceItem],
    capability_map: Optional[Mapping[str, RawCapabilitySku]] = None,
    resolvers: Sequence[Resolver] = DEFAULT_RESOLVERS,
) -> List[SkuRecord]:
    """Merge price rows and capability data into one record per SKU name."""
    capability_map = capability_map or {}
    return [build_record(item, capability_map, resolvers) for item in dedupe_cheapest(price_items)]


__all__ = ["dedupe_cheapest", "build_record", "merge_records"]
