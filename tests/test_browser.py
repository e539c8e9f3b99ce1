from types import SimpleNamespace

from skufinder.browser import LOAD_ERROR_MESSAGE, SkuBrowser
from skufinder.catalog import CatalogResult
from skufinder.errors import PriceFeedError
from skufinder.query import ASC, DESC, SortConfig


class FakeCatalog:
    """Returns canned records per region; ``hooks`` run inside a fetch."""

    def __init__(self, records_by_region, degraded=False):
        self.settings = SimpleNamespace(run=SimpleNamespace(default_region="westeurope"))
        self.records_by_region = records_by_region
        self.degraded = degraded
        self.hooks = []
        self.calls = []

    def fetch_skus(self, region, force_refresh=False):
        self.calls.append((region, force_refresh))
        if self.hooks:
            self.hooks.pop(0)()
        records = self.records_by_region[region]
        if isinstance(records, Exception):
            raise records
        return CatalogResult(region, list(records), from_cache=False, degraded=self.degraded, fetched_at=None)


def _many(make_record, count, prefix="Standard_D"):
    return [make_record(f"{prefix}{i}s_v3", vcpus=str(i)) for i in range(1, count + 1)]


def test_load_commits_records_and_resets_page(make_record):
    catalog = FakeCatalog({"westeurope": _many(make_record, 60)}, degraded=True)
    browser = SkuBrowser(catalog)
    browser.page = 3

    assert browser.load()
    assert len(browser.records) == 60
    assert browser.page == 1
    assert browser.degraded
    assert not browser.loading
    assert browser.error is None


def test_close_during_load_discards_result(make_record):
    catalog = FakeCatalog({"westeurope": _many(make_record, 3)})
    browser = SkuBrowser(catalog)
    catalog.hooks.append(browser.close)

    assert browser.load() is False
    assert browser.closed
    assert browser.records == []


def test_newer_load_wins_over_stale_one(make_record):
    catalog = FakeCatalog(
        {
            "westeurope": _many(make_record, 3),
            "eastus": _many(make_record, 5, prefix="Standard_E"),
        }
    )
    browser = SkuBrowser(catalog)
    # A region switch lands while the first fetch is still in flight.
    catalog.hooks.append(lambda: browser.select_region("eastus"))

    assert browser.load() is False
    assert browser.region == "eastus"
    assert [r.name for r in browser.records][0] == "Standard_E1s_v3"
    assert len(browser.records) == 5


def test_failed_load_sets_error_and_clears_records(make_record):
    catalog = FakeCatalog({"westeurope": _many(make_record, 2), "eastus": PriceFeedError("503")})
    browser = SkuBrowser(catalog)
    browser.load()
    assert browser.records

    assert browser.select_region("eastus")
    assert browser.error == LOAD_ERROR_MESSAGE
    assert browser.records == []
    assert not browser.loading


def test_refresh_forces_fetch(make_record):
    catalog = FakeCatalog({"westeurope": _many(make_record, 1)})
    browser = SkuBrowser(catalog)
    browser.refresh()
    assert catalog.calls == [("westeurope", True)]


def test_filter_sort_and_record_changes_reset_page(make_record):
    browser = SkuBrowser(FakeCatalog({"westeurope": []}))
    browser.replace_records(_many(make_record, 60))

    assert browser.set_page(2) == 2
    browser.update_filter(min_cpu=4)
    assert browser.page == 1
    assert browser.filters.min_cpu == 4

    browser.set_page(2)
    browser.handle_sort("PricePerHour")
    assert browser.page == 1

    browser.set_page(2)
    browser.replace_records(_many(make_record, 30))
    assert browser.page == 1


def test_handle_sort_toggles_direction():
    browser = SkuBrowser(FakeCatalog({"westeurope": []}))
    assert browser.sort == SortConfig("vCPUs", ASC)
    browser.handle_sort("vCPUs")
    assert browser.sort == SortConfig("vCPUs", DESC)
    browser.handle_sort("MemoryGB")
    assert browser.sort == SortConfig("MemoryGB", ASC)


def test_set_page_clamps_to_available_pages(make_record):
    browser = SkuBrowser(FakeCatalog({"westeurope": []}))
    browser.replace_records(_many(make_record, 60))
    assert browser.set_page(9) == 3
    assert browser.set_page(0) == 1

    view = browser.view()
    assert view.total_pages == 3
    assert [r.name for r in view.items][:2] == ["Standard_D1s_v3", "Standard_D2s_v3"]
