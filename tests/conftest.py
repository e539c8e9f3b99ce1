from __future__ import annotations

from pathlib import Path

import pytest
import requests

from skufinder.config import (
    CacheSettings,
    Credentials,
    FeedSettings,
    HttpSettings,
    RunSettings,
    Settings,
)
from skufinder.schema import UNAVAILABLE, SkuRecord, known

RETAIL_URL = "https://prices.example/api/retail/prices"
MGMT_URL = "https://mgmt.example"


class DummyResponse:
    def __init__(self, data, status_code=200):
        self._data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")
        return None

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data


class ScriptedSession:
    """Answers GETs by exact URL; values are payloads, responses or exceptions."""

    def __init__(self, pages=None, token_response=None):
        self.pages = dict(pages or {})
        self.token_response = token_response
        self.calls = []
        self.posts = []
        self.closed = False

    def get(self, url, params=None, headers=None, **kwargs):
        self.calls.append({"url": url, "params": params, "headers": headers})
        if url not in self.pages:
            raise requests.ConnectionError(f"no scripted page for {url}")
        value = self.pages[url]
        if isinstance(value, Exception):
            raise value
        if isinstance(value, DummyResponse):
            return value
        return DummyResponse(value)

    def close(self):
        self.closed = True

    def post(self, url, data=None, **kwargs):
        self.posts.append({"url": url, "data": data})
        if isinstance(self.token_response, Exception):
            raise self.token_response
        return self.token_response or DummyResponse({"access_token": "tok", "expires_in": 3599, "token_type": "Bearer"})


@pytest.fixture
def feed_settings() -> FeedSettings:
    return FeedSettings(
        retail_url=RETAIL_URL,
        page_size=1000,
        management_url=MGMT_URL,
        compute_api_version="2021-07-01",
        identity_url="https://login.example",
        scope="https://mgmt.example/.default",
    )


@pytest.fixture
def settings(feed_settings, tmp_path: Path) -> Settings:
    return Settings(
        http=HttpSettings(timeout_s=5, max_retries=0, backoff_s=0, user_agent="test"),
        feeds=feed_settings,
        cache=CacheSettings(directory=tmp_path / "cache", ttl_hours=24),
        run=RunSettings(
            default_region="westeurope",
            json_path=tmp_path / "data" / "skus.json",
            csv_path=tmp_path / "data" / "skus.csv",
            report_path=tmp_path / "reports" / "README.md",
        ),
    )


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        tenant_id="tenant",
        client_id="client",
        client_secret="secret",
        subscription_id="sub-1",
    )


@pytest.fixture
def make_record():
    def _make(name, vcpus="2", memory="8", price="0.1", family="General Purpose", **caps):
        capabilities = {
            "vCPUs": UNAVAILABLE if vcpus is None else known(vcpus, "api"),
            "MemoryGB": UNAVAILABLE if memory is None else known(memory, "api"),
            "PricePerHour": UNAVAILABLE if price is None else known(price, "price_feed"),
        }
        for cap_name, value in caps.items():
            capabilities[cap_name] = UNAVAILABLE if value is None else known(value, "api")
        return SkuRecord(name=name, family=family, capabilities=capabilities, locations=["westeurope"])

    return _make


def price_row(name, price, region="westeurope", size=None):
    return {
        "armSkuName": name,
        "armRegionName": region,
        "skuName": size or name.replace("Standard_", "").replace("_", " "),
        "meterName": size or name,
        "retailPrice": price,
    }


def capability_sku(name, family="standardDSv3Family", resource_type="virtualMachines", **caps):
    return {
        "name": name,
        "resourceType": resource_type,
        "family": family,
        "tier": "Standard",
        "size": name.replace("Standard_", ""),
        "capabilities": [{"name": k, "value": v} for k, v in caps.items()],
    }
