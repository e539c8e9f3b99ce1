"""Filter, sort and paginate merged SKU records in memory."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from .schema import (
    FEATURE_CAPABILITIES,
    MAX_DATA_DISKS,
    MAX_NICS,
    MEMORY_GB,
    PRICE_PER_HOUR,
    VCPUS,
    SkuRecord,
)

PAGE_SIZE = 25

ASC = "asc"
DESC = "desc"

# sort key -> capability it reads, None for string keys
SORT_KEYS = {
    "name": None,
    "family": None,
    "vCPUs": VCPUS,
    "MemoryGB": MEMORY_GB,
    "MaxDataDisks": MAX_DATA_DISKS,
    "MaxNICs": MAX_NICS,
    "PricePerHour": PRICE_PER_HOUR,
}

_RANGE_FILTERS = (
    ("min_cpu", VCPUS),
    ("min_ram", MEMORY_GB),
    ("min_disks", MAX_DATA_DISKS),
    ("min_nics", MAX_NICS),
)


@dataclass(frozen=True)
class Filters:
    """Conjunctive filters. A zero minimum disables that range check."""

    min_cpu: float = 0
    min_ram: float = 0
    min_disks: float = 0
    min_nics: float = 0
    family: Optional[str] = None
    features: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        features = frozenset(self.features)
        unknown = features - set(FEATURE_CAPABILITIES)
        if unknown:
            raise ValueError(f"unknown feature filter(s): {', '.join(sorted(unknown))}")
        object.__setattr__(self, "features", features)


@dataclass(frozen=True)
class SortConfig:
    key: str = "vCPUs"
    direction: str = ASC

    def __post_init__(self) -> None:
        if self.key not in SORT_KEYS:
            raise ValueError(f"unknown sort key: {self.key}")
        if self.direction not in (ASC, DESC):
            raise ValueError(f"unknown sort direction: {self.direction}")

    def toggled(self, key: str) -> "SortConfig":
        """Flip direction when ``key`` is already selected, else sort ascending by ``key``."""
        if key == self.key:
            return SortConfig(key=key, direction=DESC if self.direction == ASC else ASC)
        return SortConfig(key=key, direction=ASC)


@dataclass(frozen=True)
class QueryResult:
    items: List[SkuRecord]
    page: int
    total_pages: int
    total_count: int


def matches(record: SkuRecord, filters: Filters) -> bool:
    for attr, capability in _RANGE_FILTERS:
        threshold = getattr(filters, attr)
        if threshold and threshold > 0:
            value = record.numeric(capability)
            if value is None or value < threshold:
                return False
    if filters.family and record.family.lower() != filters.family.lower():
        return False
    return all(record.flag(feature) for feature in filters.features)


def filter_records(records: Iterable[SkuRecord], filters: Filters) -> List[SkuRecord]:
    return [record for record in records if matches(record, filters)]


def sort_value(record: SkuRecord, key: str) -> Union[str, Tuple[int, float]]:
    if key == "name":
        return record.name
    if key == "family":
        return record.family or ""
    value = record.numeric(SORT_KEYS[key])
    # Unavailable ranks below every real value, zero included.
    if value is None:
        return (0, 0.0)
    return (1, value)


def sort_records(records: Iterable[SkuRecord], sort: SortConfig) -> List[SkuRecord]:
    # sorted() keeps equal keys in input order in both directions.
    return sorted(records, key=lambda r: sort_value(r, sort.key), reverse=sort.direction == DESC)


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, pages: int) -> int:
    return min(max(1, page), pages)


def paginate(records: Sequence[SkuRecord], page: int, page_size: int = PAGE_SIZE) -> QueryResult:
    pages = total_pages(len(records), page_size)
    current = clamp_page(page, pages)
    start = (current - 1) * page_size
    return QueryResult(
        items=list(records[start : start + page_size]),
        page=current,
        total_pages=pages,
        total_count=len(records),
    )


def query(
    records: Iterable[SkuRecord],
    filters: Optional[Filters] = None,
    sort: Optional[SortConfig] = None,
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> QueryResult:
    filtered = filter_records(records, filters or Filters())
    ordered = sort_records(filtered, sort or SortConfig())
    return paginate(ordered, page, page_size)


__all__ = [
    "PAGE_SIZE",
    "ASC",
    "DESC",
    "SORT_KEYS",
    "Filters",
    "SortConfig",
    "QueryResult",
    "matches",
    "filter_records",
    "sort_value",
    "sort_records",
    "total_pages",
    "clamp_page",
    "paginate",
    "query",
]
