"""Data schema definitions for raw feed rows and merged SKU records."""
from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .util import format_number, parse_float

VCPUS = "vCPUs"
MEMORY_GB = "MemoryGB"
PRICE_PER_HOUR = "PricePerHour"
IS_SPOT = "IsSpot"
MAX_DATA_DISKS = "MaxDataDiskCount"
MAX_NICS = "MaxNetworkInterfaces"
ACCELERATED_NETWORKING = "AcceleratedNetworking"
PREMIUM_IO = "PremiumIO"
EPHEMERAL_OS = "EphemeralOS"
NESTED_VIRTUALIZATION = "NestedVirtualization"
ENCRYPTION_AT_HOST = "EncryptionAtHost"

CAPABILITY_ORDER = (
    VCPUS,
    MEMORY_GB,
    PRICE_PER_HOUR,
    IS_SPOT,
    MAX_DATA_DISKS,
    MAX_NICS,
    ACCELERATED_NETWORKING,
    PREMIUM_IO,
    EPHEMERAL_OS,
    NESTED_VIRTUALIZATION,
    ENCRYPTION_AT_HOST,
)

FEATURE_CAPABILITIES = (
    PREMIUM_IO,
    EPHEMERAL_OS,
    ACCELERATED_NETWORKING,
    NESTED_VIRTUALIZATION,
    ENCRYPTION_AT_HOST,
)

UNAVAILABLE_DISPLAY = "N/A"

CapabilitySource = Literal["api", "known_table", "heuristic", "price_feed"]


class Known(BaseModel):
    """A capability value that was resolved, tagged with where it came from."""

    kind: Literal["known"] = "known"
    value: str
    source: CapabilitySource = "api"

    model_config = {"frozen": True}

    @property
    def inferred(self) -> bool:
        return self.source == "heuristic"


class Unavailable(BaseModel):
    """A capability that could not be determined. Distinct from a real zero."""

    kind: Literal["unavailable"] = "unavailable"

    model_config = {"frozen": True}


Capability = Annotated[Union[Known, Unavailable], Field(discriminator="kind")]

UNAVAILABLE = Unavailable()


def known(value: Any, source: CapabilitySource) -> Known:
    if isinstance(value, bool):
        value = "True" if value else "False"
    elif isinstance(value, (int, float)):
        value = format_number(value)
    return Known(value=str(value), source=source)


class RawPriceItem(BaseModel):
    """One row of the public retail price feed."""

    sku_name: str = Field(min_length=1)
    region: str
    size: Optional[str] = None
    meter_name: Optional[str] = None
    retail_price: float = Field(ge=0)

    @classmethod
    def from_feed(cls, item: Dict[str, Any]) -> "RawPriceItem":
        return cls(
            sku_name=item.get("armSkuName"),
            region=item.get("armRegionName") or "",
            size=item.get("skuName"),
            meter_name=item.get("meterName"),
            retail_price=item.get("retailPrice"),
        )


class CapabilityPair(BaseModel):
    name: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return str(value)


class RawCapabilitySku(BaseModel):
    """One entry of the authenticated resource SKU feed."""

    name: str = Field(min_length=1)
    resource_type: str
    family: Optional[str] = None
    tier: Optional[str] = None
    size: Optional[str] = None
    capabilities: List[CapabilityPair] = Field(default_factory=list)

    @classmethod
    def from_feed(cls, item: Dict[str, Any]) -> "RawCapabilitySku":
        return cls(
            name=item.get("name"),
            resource_type=item.get("resourceType") or "",
            family=item.get("family"),
            tier=item.get("tier"),
            size=item.get("size"),
            capabilities=item.get("capabilities") or [],
        )

    def capability(self, name: str) -> Optional[str]:
        for pair in self.capabilities:
            if pair.name == name:
                return pair.value
        return None


class SkuRecord(BaseModel):
    """Merged SKU record: price row reconciled with capability data."""

    name: str
    family: str = "Unknown"
    size: Optional[str] = None
    tier: Optional[str] = None
    capabilities: Dict[str, Capability]
    locations: List[str]

    model_config = {"frozen": True}

    @field_validator("capabilities")
    @classmethod
    def _ordered(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        ordered = {name: value.get(name, UNAVAILABLE) for name in CAPABILITY_ORDER}
        for name, cap in value.items():
            ordered.setdefault(name, cap)
        return ordered

    def capability(self, name: str) -> Union[Known, Unavailable]:
        return self.capabilities.get(name, UNAVAILABLE)

    def numeric(self, name: str) -> Optional[float]:
        cap = self.capability(name)
        if isinstance(cap, Known):
            return parse_float(cap.value)
        return None

    def flag(self, name: str) -> bool:
        cap = self.capability(name)
        return isinstance(cap, Known) and cap.value.strip().lower() == "true"

    def display(self, name: str) -> str:
        cap = self.capability(name)
        if isinstance(cap, Known):
            return cap.value
        return UNAVAILABLE_DISPLAY

    @property
    def price(self) -> Optional[float]:
        return self.numeric(PRICE_PER_HOUR)

    @property
    def inferred(self) -> bool:
        return any(isinstance(cap, Known) and cap.inferred for cap in self.capabilities.values())


class CacheEntry(BaseModel):
    """Persisted snapshot of one region's merged records."""

    timestamp: int
    data: List[SkuRecord]
    degraded: bool = False


__all__ = [
    "VCPUS",
    "MEMORY_GB",
    "PRICE_PER_HOUR",
    "IS_SPOT",
    "MAX_DATA_DISKS",
    "MAX_NICS",
    "ACCELERATED_NETWORKING",
    "PREMIUM_IO",
    "EPHEMERAL_OS",
    "NESTED_VIRTUALIZATION",
    "ENCRYPTION_AT_HOST",
    "CAPABILITY_ORDER",
    "FEATURE_CAPABILITIES",
    "UNAVAILABLE",
    "UNAVAILABLE_DISPLAY",
    "Known",
    "Unavailable",
    "Capability",
    "known",
    "RawPriceItem",
    "RawCapabilitySku",
    "CapabilityPair",
    "SkuRecord",
    "CacheEntry",
]
