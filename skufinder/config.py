"""Configuration loading utilities for the SKU finder."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


ROOT = Path(__file__).resolve().parent.parent
CONFIG_DIR = ROOT / "config"

ENV_PREFIX = "SKUFINDER_"

POPULAR_REGIONS = sorted(
    [
        "eastus",
        "eastus2",
        "westus",
        "westus2",
        "centralus",
        "southcentralus",
        "northeurope",
        "westeurope",
        "uksouth",
        "ukwest",
        "southeastasia",
        "eastasia",
        "japaneast",
        "japanwest",
        "australiaeast",
        "australiasoutheast",
    ]
)


@dataclass
class HttpSettings:
    timeout_s: int
    max_retries: int
    backoff_s: float
    user_agent: str


@dataclass
class FeedSettings:
    retail_url: str
    page_size: int
    management_url: str
    compute_api_version: str
    identity_url: str
    scope: str


@dataclass
class CacheSettings:
    directory: Path
    ttl_hours: float


@dataclass
class RunSettings:
    default_region: str
    json_path: Path
    csv_path: Path
    report_path: Path


@dataclass
class Settings:
    http: HttpSettings
    feeds: FeedSettings
    cache: CacheSettings
    run: RunSettings


@dataclass
class Credentials:
    tenant_id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    subscription_id: Optional[str] = None
    access_token: Optional[str] = None

    @property
    def can_exchange(self) -> bool:
        return bool(self.tenant_id and self.client_id and self.client_secret)


_CREDENTIAL_ENV: Dict[str, tuple[str, ...]] = {
    "tenant_id": ("SKUFINDER_TENANT_ID", "AZURE_TENANT_ID", "VITE_AZURE_TENANT_ID"),
    "client_id": ("SKUFINDER_CLIENT_ID", "AZURE_CLIENT_ID", "VITE_AZURE_CLIENT_ID"),
    "client_secret": ("SKUFINDER_CLIENT_SECRET", "AZURE_CLIENT_SECRET", "VITE_AZURE_CLIENT_SECRET"),
    "subscription_id": (
        "SKUFINDER_SUBSCRIPTION_ID",
        "AZURE_SUBSCRIPTION_ID",
        "VITE_AZURE_SUBSCRIPTION_ID",
    ),
    "access_token": ("SKUFINDER_ACCESS_TOKEN", "AZURE_ACCESS_TOKEN"),
}

_ENV_SANITIZE = re.compile(r"[^A-Z0-9]+")


@lru_cache(maxsize=1)
def load_settings(path: Optional[Path] = None) -> Settings:
    """Load HTTP, feed, cache and run settings from YAML plus env overrides."""
    cfg_path = path or CONFIG_DIR / "settings.yaml"
    data = _load_yaml(cfg_path)
    http = _section(data, "http")
    feeds = _section(data, "feeds")
    cache = _section(data, "cache")
    run = _section(data, "run")
    http_settings = HttpSettings(
        timeout_s=int(http.get("timeout_s", 60)),
        max_retries=int(http.get("max_retries", 0)),
        backoff_s=float(http.get("backoff_s", 0)),
        user_agent=str(http.get("user_agent", "az-sku-finder/1.0")),
    )
    feed_settings = FeedSettings(
        retail_url=str(feeds.get("retail_url", "https://prices.azure.com/api/retail/prices")),
        page_size=int(feeds.get("page_size", 1000)),
        management_url=str(feeds.get("management_url", "https://management.azure.com")).rstrip("/"),
        compute_api_version=str(feeds.get("compute_api_version", "2021-07-01")),
        identity_url=str(feeds.get("identity_url", "https://login.microsoftonline.com")).rstrip("/"),
        scope=str(feeds.get("scope", "https://management.azure.com/.default")),
    )
    cache_settings = CacheSettings(
        directory=_resolve(cache.get("dir", ".cache/skus")),
        ttl_hours=float(cache.get("ttl_hours", 24)),
    )
    run_settings = RunSettings(
        default_region=str(run.get("default_region", "westeurope")),
        json_path=_resolve(run.get("json_path", "data/skus.json")),
        csv_path=_resolve(run.get("csv_path", "data/skus.csv")),
        report_path=_resolve(run.get("report_path", "reports/README.md")),
    )
    return Settings(http=http_settings, feeds=feed_settings, cache=cache_settings, run=run_settings)


def load_credentials(env: Optional[Dict[str, str]] = None) -> Credentials:
    """Read Azure credentials from the environment, first matching variable wins."""
    source = os.environ if env is None else env
    values: Dict[str, Optional[str]] = {}
    for field_name, candidates in _CREDENTIAL_ENV.items():
        values[field_name] = None
        for env_name in candidates:
            value = source.get(env_name)
            if value:
                values[field_name] = value
                break
    return Credentials(**values)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    merged = dict(data.get(name) or {})
    prefix = f"{ENV_PREFIX}{_normalize_env_component(name)}_"
    for env_name, env_value in os.environ.items():
        if env_name.startswith(prefix):
            key = _normalize_env_component(env_name[len(prefix) :]).lower()
            if key:
                merged[key] = env_value
    return merged


def _resolve(value: Any) -> Path:
    path = Path(str(value))
    return path if path.is_absolute() else ROOT / path


def _normalize_env_component(value: str) -> str:
    return _ENV_SANITIZE.sub("_", value.upper()).strip("_")


__all__ = [
    "load_settings",
    "load_credentials",
    "Settings",
    "HttpSettings",
    "FeedSettings",
    "CacheSettings",
    "RunSettings",
    "Credentials",
    "POPULAR_REGIONS",
]
