"""Best-effort inference of VM specs from an ARM SKU name.

Used only when neither the resource SKU feed nor the known-SKU table has an
entry. Every value produced here is tagged as inferred downstream; the
feature rules are guesses with no accuracy guarantee against the platform.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

GENERAL_PURPOSE = "General Purpose"
MEMORY_OPTIMIZED = "Memory Optimized"
COMPUTE_OPTIMIZED = "Compute Optimized"
ENTRY_LEVEL = "Entry Level"
BURSTABLE = "Burstable"
STORAGE_OPTIMIZED = "Storage Optimized"
HIGH_MEMORY = "High Memory"
GPU = "GPU"
UNKNOWN_FAMILY = "Unknown"

# First match wins.
_FAMILY_MARKERS = (
    ("_d", GENERAL_PURPOSE),
    ("_e", MEMORY_OPTIMIZED),
    ("_f", COMPUTE_OPTIMIZED),
    ("_a", ENTRY_LEVEL),
    ("_b", BURSTABLE),
    ("_l", STORAGE_OPTIMIZED),
    ("_m", HIGH_MEMORY),
    ("_n", GPU),
)

# GB of memory per vCPU.
_MEMORY_RATIOS = {
    GENERAL_PURPOSE: 4,
    MEMORY_OPTIMIZED: 8,
    STORAGE_OPTIMIZED: 8,
    COMPUTE_OPTIMIZED: 2,
    HIGH_MEMORY: 28,
    BURSTABLE: 4,
}

_BURSTABLE_OVERRIDES = {1: 1.0, 2: 4.0}

_ACCELERATED_VERSIONS = (3, 4, 5)

_CPU_PATTERN = re.compile(r"[A-Za-z]+(\d+)")
_PREMIUM_PATTERN = re.compile(r"[a-z]\d+s")
_VERSION_PATTERN = re.compile(r"_v(\d+)")
_TIER_PATTERN = re.compile(r"^(Standard|Basic)_", re.IGNORECASE)


@dataclass(frozen=True)
class InferredFeatures:
    premium_io: Optional[bool]
    ephemeral_os: Optional[bool]
    accelerated_networking: Optional[bool]
    nested_virtualization: Optional[bool]
    max_data_disks: Optional[int]
    max_nics: Optional[int]


@dataclass(frozen=True)
class InferredSpecs:
    vcpus: Optional[int]
    memory_gb: Optional[float]
    family: str
    spot: bool
    features: InferredFeatures


def split_tier(sku_name: str) -> Tuple[Optional[str], str]:
    """Split ``Standard_D2s_v3`` into ``("Standard", "D2s_v3")``."""
    match = _TIER_PATTERN.match(sku_name)
    if not match:
        return None, sku_name
    return match.group(1).capitalize(), sku_name[match.end() :]


def is_spot(sku_name: str) -> bool:
    return "spot" in sku_name.lower()


def infer_vcpus(sku_name: str) -> Optional[int]:
    match = _CPU_PATTERN.search(sku_name)
    if not match:
        return None
    return int(match.group(1))


def classify_family(sku_name: str) -> str:
    lower = sku_name.lower()
    for marker, family in _FAMILY_MARKERS:
        if marker in lower:
            return family
    return UNKNOWN_FAMILY


def sku_version(sku_name: str) -> Optional[int]:
    match = _VERSION_PATTERN.search(sku_name.lower())
    if not match:
        return None
    return int(match.group(1))


def infer_memory(sku_name: str, vcpus: Optional[int], family: str) -> Optional[float]:
    if vcpus is None:
        return None
    if family == BURSTABLE and vcpus in _BURSTABLE_OVERRIDES:
        return _BURSTABLE_OVERRIDES[vcpus]
    if family == ENTRY_LEVEL:
        ratio = 2 if sku_version(sku_name) == 2 else 1
    else:
        ratio = _MEMORY_RATIOS.get(family)
        if ratio is None:
            return None
    return float(vcpus * ratio)


def infer_features(sku_name: str, vcpus: Optional[int], family: str) -> InferredFeatures:
    lower = sku_name.lower()
    _, size = split_tier(lower)
    premium = bool(_PREMIUM_PATTERN.search(lower)) or lower.endswith("s")

    version = sku_version(sku_name)
    v3_plus = version is not None and version >= 3
    # Accelerated networking is only assumed for the v3 to v5 generations.
    accelerated_generation = version in _ACCELERATED_VERSIONS

    accelerated: Optional[bool]
    if family == COMPUTE_OPTIMIZED and "s" in size:
        accelerated = True
    elif vcpus is None or family == UNKNOWN_FAMILY:
        accelerated = None
    else:
        accelerated = accelerated_generation and vcpus >= 2 and family not in (BURSTABLE, ENTRY_LEVEL)

    nested: Optional[bool] = None
    if family != UNKNOWN_FAMILY:
        nested = v3_plus and family in (GENERAL_PURPOSE, MEMORY_OPTIMIZED)

    max_disks: Optional[int] = None
    max_nics: Optional[int] = None
    if vcpus is not None:
        max_disks = min(vcpus * 2, 64)
        if vcpus >= 16:
            max_nics = 8
        elif vcpus >= 4:
            max_nics = 4
        else:
            max_nics = 2

    return InferredFeatures(
        premium_io=premium,
        ephemeral_os=premium,
        accelerated_networking=accelerated,
        nested_virtualization=nested,
        max_data_disks=max_disks,
        max_nics=max_nics,
    )


def infer(sku_name: str) -> InferredSpecs:
    vcpus = infer_vcpus(sku_name)
    family = classify_family(sku_name)
    return InferredSpecs(
        vcpus=vcpus,
        memory_gb=infer_memory(sku_name, vcpus, family),
        family=family,
        spot=is_spot(sku_name),
        features=infer_features(sku_name, vcpus, family),
    )


__all__ = [
    "InferredFeatures",
    "InferredSpecs",
    "split_tier",
    "is_spot",
    "infer_vcpus",
    "classify_family",
    "sku_version",
    "infer_memory",
    "infer_features",
    "infer",
    "GENERAL_PURPOSE",
    "MEMORY_OPTIMIZED",
    "COMPUTE_OPTIMIZED",
    "ENTRY_LEVEL",
    "BURSTABLE",
    "STORAGE_OPTIMIZED",
    "HIGH_MEMORY",
    "GPU",
    "UNKNOWN_FAMILY",
]
