"""CLI entry point for the Azure SKU finder."""
from __future__ import annotations

import argparse
import json
from datetime import timedelta
from typing import List, Optional

from .browser import SkuBrowser
from .cache import FileCacheStore, SkuCache
from .catalog import SkuCatalog
from .config import POPULAR_REGIONS, Settings, load_settings
from .errors import PriceFeedError
from .query import ASC, DESC, SORT_KEYS, SortConfig
from .render import flatten_record, generate_report, records_to_json, render_page
from .schema import FEATURE_CAPABILITIES
from .util import log, write_csv_atomic, write_json_atomic, write_text_atomic


def _parse_args(argv: Optional[List[str]], settings: Settings) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="skufinder",
        description="Browse Azure VM SKUs with retail prices and hardware capabilities.",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    def add_common(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--region",
            default=settings.run.default_region,
            help=f"ARM region name (default: {settings.run.default_region}; e.g. {', '.join(POPULAR_REGIONS[:3])})",
        )
        parser.add_argument(
            "--force-refresh",
            action="store_true",
            help="Ignore a cached catalog and fetch both feeds again.",
        )

    build = sub.add_parser("build", help="Fetch, merge and write the catalog artifacts.")
    add_common(build)

    browse = sub.add_parser("browse", help="Print one page of filtered, sorted SKUs.")
    add_common(browse)
    browse.add_argument("--min-cpu", type=float, default=0)
    browse.add_argument("--min-ram", type=float, default=0, help="Minimum memory in GB.")
    browse.add_argument("--min-disks", type=float, default=0)
    browse.add_argument("--min-nics", type=float, default=0)
    browse.add_argument("--family", help="Exact family label, case-insensitive.")
    browse.add_argument(
        "--feature",
        action="append",
        default=[],
        choices=FEATURE_CAPABILITIES,
        help="Require a feature; repeat for several.",
    )
    browse.add_argument("--sort", default="vCPUs", choices=sorted(SORT_KEYS))
    browse.add_argument("--desc", action="store_true", help="Sort descending.")
    browse.add_argument("--page", type=int, default=1)
    return ap.parse_args(argv)


def _make_catalog(settings: Settings) -> SkuCatalog:
    cache = SkuCache(
        FileCacheStore(settings.cache.directory),
        ttl=timedelta(hours=settings.cache.ttl_hours),
    )
    return SkuCatalog(cache=cache, settings=settings)


def build(args: argparse.Namespace, settings: Settings) -> int:
    catalog = _make_catalog(settings)
    try:
        result = catalog.fetch_skus(args.region, force_refresh=args.force_refresh)
    except PriceFeedError as exc:
        log("ERROR", f"build failed: {exc}")
        return 1

    payload = records_to_json(result.records)
    changed_json = write_json_atomic(settings.run.json_path, payload)
    changed_csv = write_csv_atomic(settings.run.csv_path, [flatten_record(r) for r in result.records])
    report = generate_report(result.records, args.region, degraded=result.degraded)
    changed_report = write_text_atomic(settings.run.report_path, report)

    changed = changed_json or changed_csv or changed_report
    log("INFO", f"changed: {changed}")
    print(
        json.dumps(
            {
                "changed": changed,
                "records": len(result.records),
                "from_cache": result.from_cache,
                "degraded": result.degraded,
            }
        )
    )
    return 0


def browse(args: argparse.Namespace, settings: Settings) -> int:
    browser = SkuBrowser(_make_catalog(settings), region=args.region)
    try:
        browser.load(force=args.force_refresh)
        if browser.error:
            print(browser.error)
            return 1
        browser.update_filter(
            min_cpu=args.min_cpu,
            min_ram=args.min_ram,
            min_disks=args.min_disks,
            min_nics=args.min_nics,
            family=args.family,
            features=frozenset(args.feature),
        )
        browser.sort = SortConfig(key=args.sort, direction=DESC if args.desc else ASC)
        browser.set_page(args.page)
        print(render_page(browser.view()), end="")
    finally:
        browser.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = load_settings()
    args = _parse_args(argv, settings)
    if args.command == "build":
        return build(args, settings)
    return browse(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
