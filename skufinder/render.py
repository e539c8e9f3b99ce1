"""Rendering helpers for the catalog artifact, markdown report and result pages."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List

import pandas as pd

from .query import QueryResult
from .schema import (
    CAPABILITY_ORDER,
    MAX_DATA_DISKS,
    MAX_NICS,
    MEMORY_GB,
    PRICE_PER_HOUR,
    VCPUS,
    SkuRecord,
)
from .util import iso_now

_PAGE_COLUMNS = (VCPUS, MEMORY_GB, MAX_DATA_DISKS, MAX_NICS, PRICE_PER_HOUR)


def records_to_json(records: Iterable[SkuRecord]) -> List[Dict[str, Any]]:
    return [r.model_dump(mode="json") for r in records]


def flatten_record(record: SkuRecord) -> Dict[str, Any]:
    """One flat row per record; unavailable values render as ``N/A``."""
    row: Dict[str, Any] = {
        "name": record.name,
        "family": record.family,
        "size": record.size,
        "tier": record.tier,
        "region": ",".join(record.locations),
        "inferred": record.inferred,
    }
    for name in CAPABILITY_ORDER:
        row[name] = record.display(name)
    return row


def generate_report(records: Iterable[SkuRecord], region: str, degraded: bool = False) -> str:
    records = list(records)
    df = pd.DataFrame([flatten_record(r) for r in records])
    lines = ["# Azure VM SKU Catalog", ""]
    lines.append(f"Generated at: `{iso_now()}`\n")
    lines.append(f"Region: **{region}**")
    lines.append(f"Total SKUs: **{len(df)}**")
    if degraded:
        lines.append("\n> Capability data was unavailable or incomplete; some values are inferred from SKU names.")
    lines.append("")

    if not df.empty:
        df["price"] = [r.price for r in records]
        inferred = int(df["inferred"].sum())
        lines.append(f"Inferred (unverified) SKUs: **{inferred}**\n")

        families = df.groupby("family").size().reset_index(name="skus").sort_values("skus", ascending=False)
        lines.append("## SKUs per Family\n")
        lines.append(families.to_markdown(index=False))
        lines.append("")

        cheapest = df.sort_values("price", kind="stable").groupby("family", as_index=False).first()
        lines.append("## Cheapest per Family\n")
        lines.append(cheapest[["family", "name", VCPUS, MEMORY_GB, PRICE_PER_HOUR]].to_markdown(index=False))
        lines.append("")

    return "\n".join(lines).strip() + "\n"


def render_page(result: QueryResult) -> str:
    if not result.items:
        return f"No SKUs found matching your criteria.\n\npage {result.page} / {result.total_pages}\n"
    rows = []
    for record in result.items:
        row = {"name": record.name, "family": record.family}
        for name in _PAGE_COLUMNS:
            row[name] = record.display(name)
        row["inferred"] = "yes" if record.inferred else ""
        rows.append(row)
    table = pd.DataFrame(rows).to_markdown(index=False)
    return f"{table}\n\npage {result.page} / {result.total_pages} ({result.total_count} SKUs)\n"


__all__ = ["records_to_json", "flatten_record", "generate_report", "render_page"]
