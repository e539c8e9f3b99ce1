"""Capability resolvers tried in order for each priced SKU.

A resolver takes the SKU name and the resource SKU map and returns
:class:`ResolvedSpecs` or ``None`` to let the next resolver try.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional, Sequence, Union

from . import heuristics
from .known_skus import lookup
from .schema import (
    ACCELERATED_NETWORKING,
    ENCRYPTION_AT_HOST,
    EPHEMERAL_OS,
    MAX_DATA_DISKS,
    MAX_NICS,
    MEMORY_GB,
    NESTED_VIRTUALIZATION,
    PREMIUM_IO,
    UNAVAILABLE,
    VCPUS,
    CapabilitySource,
    Known,
    RawCapabilitySku,
    Unavailable,
    known,
)


@dataclass(frozen=True)
class ResolvedSpecs:
    family: Optional[str] = None
    capabilities: Dict[str, Union[Known, Unavailable]] = field(default_factory=dict)


CapabilityMap = Mapping[str, RawCapabilitySku]
Resolver = Callable[[str, CapabilityMap], Optional[ResolvedSpecs]]

# record capability name -> (resource SKU capability name, default when absent)
_AUTHORITATIVE_FIELDS = (
    (VCPUS, "vCPUs", "0"),
    (MEMORY_GB, "MemoryGB", "0"),
    (MAX_DATA_DISKS, "MaxDataDiskCount", "0"),
    (MAX_NICS, "MaxNetworkInterfaces", "0"),
    (ACCELERATED_NETWORKING, "AcceleratedNetworkingEnabled", "False"),
    (PREMIUM_IO, "PremiumIO", "False"),
    (EPHEMERAL_OS, "EphemeralOSDiskSupported", "False"),
    (NESTED_VIRTUALIZATION, "NestedVirtualizationSupport", "False"),
    (ENCRYPTION_AT_HOST, "EncryptionAtHostSupported", "False"),
)


def _maybe(value, source: CapabilitySource) -> Union[Known, Unavailable]:
    if value is None:
        return UNAVAILABLE
    return known(value, source)


def resolve_from_api(sku_name: str, capability_map: CapabilityMap) -> Optional[ResolvedSpecs]:
    sku = capability_map.get(sku_name)
    if sku is None:
        return None
    capabilities: Dict[str, Union[Known, Unavailable]] = {}
    for target, source_name, default in _AUTHORITATIVE_FIELDS:
        value = sku.capability(source_name)
        capabilities[target] = known(default if value is None else value, "api")
    return ResolvedSpecs(family=sku.family or None, capabilities=capabilities)


def _inferred_specs(
    sku_name: str,
    vcpus: Optional[int],
    memory_gb: Optional[float],
    family: Optional[str],
    source: CapabilitySource,
) -> ResolvedSpecs:
    features = heuristics.infer_features(sku_name, vcpus, heuristics.classify_family(sku_name))
    capabilities = {
        VCPUS: _maybe(vcpus, source),
        MEMORY_GB: _maybe(memory_gb, source),
        MAX_DATA_DISKS: _maybe(features.max_data_disks, "heuristic"),
        MAX_NICS: _maybe(features.max_nics, "heuristic"),
        ACCELERATED_NETWORKING: _maybe(features.accelerated_networking, "heuristic"),
        PREMIUM_IO: _maybe(features.premium_io, "heuristic"),
        EPHEMERAL_OS: _maybe(features.ephemeral_os, "heuristic"),
        NESTED_VIRTUALIZATION: _maybe(features.nested_virtualization, "heuristic"),
        ENCRYPTION_AT_HOST: UNAVAILABLE,
    }
    return ResolvedSpecs(family=family, capabilities=capabilities)


def resolve_from_known_table(sku_name: str, capability_map: CapabilityMap) -> Optional[ResolvedSpecs]:
    spec = lookup(sku_name)
    if spec is None:
        return None
    return _inferred_specs(sku_name, spec.vcpus, spec.memory_gb, spec.family, "known_table")


def resolve_from_heuristics(sku_name: str, capability_map: CapabilityMap) -> Optional[ResolvedSpecs]:
    vcpus = heuristics.infer_vcpus(sku_name)
    family = heuristics.classify_family(sku_name)
    memory_gb = heuristics.infer_memory(sku_name, vcpus, family)
    return _inferred_specs(sku_name, vcpus, memory_gb, family, "heuristic")


DEFAULT_RESOLVERS: Sequence[Resolver] = (
    resolve_from_api,
    resolve_from_known_table,
    resolve_from_heuristics,
)


def resolve(
    sku_name: str,
    capability_map: CapabilityMap,
    resolvers: Sequence[Resolver] = DEFAULT_RESOLVERS,
) -> ResolvedSpecs:
    for resolver in resolvers:
        specs = resolver(sku_name, capability_map)
        if specs is not None:
            return specs
    return ResolvedSpecs()


__all__ = [
    "ResolvedSpecs",
    "Resolver",
    "CapabilityMap",
    "resolve_from_api",
    "resolve_from_known_table",
    "resolve_from_heuristics",
    "DEFAULT_RESOLVERS",
    "resolve",
]
