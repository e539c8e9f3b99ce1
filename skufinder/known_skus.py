"""Static specs for common VM sizes, consulted before name heuristics."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class KnownSpec:
    vcpus: int
    memory_gb: float
    family: str


def _spec(vcpus: int, memory_gb: float, family: str) -> KnownSpec:
    return KnownSpec(vcpus=vcpus, memory_gb=memory_gb, family=family)


KNOWN_SKUS: Dict[str, KnownSpec] = {
    # General purpose, D v5
    "Standard_D2s_v5": _spec(2, 8, "D v5 Series"),
    "Standard_D4s_v5": _spec(4, 16, "D v5 Series"),
    "Standard_D8s_v5": _spec(8, 32, "D v5 Series"),
    "Standard_D16s_v5": _spec(16, 64, "D v5 Series"),
    "Standard_D32s_v5": _spec(32, 128, "D v5 Series"),
    "Standard_D2ds_v5": _spec(2, 8, "D v5 Series"),
    "Standard_D4ds_v5": _spec(4, 16, "D v5 Series"),
    # D v4
    "Standard_D2s_v4": _spec(2, 8, "D v4 Series"),
    "Standard_D4s_v4": _spec(4, 16, "D v4 Series"),
    "Standard_D8s_v4": _spec(8, 32, "D v4 Series"),
    # D v3
    "Standard_D2s_v3": _spec(2, 8, "D v3 Series"),
    "Standard_D4s_v3": _spec(4, 16, "D v3 Series"),
    "Standard_D8s_v3": _spec(8, 32, "D v3 Series"),
    "Standard_D2_v3": _spec(2, 8, "D v3 Series"),
    "Standard_D4_v3": _spec(4, 16, "D v3 Series"),
    # Memory optimized, E v5
    "Standard_E2s_v5": _spec(2, 16, "E v5 Series"),
    "Standard_E4s_v5": _spec(4, 32, "E v5 Series"),
    "Standard_E8s_v5": _spec(8, 64, "E v5 Series"),
    "Standard_E16s_v5": _spec(16, 128, "E v5 Series"),
    "Standard_E32s_v5": _spec(32, 256, "E v5 Series"),
    # E v4
    "Standard_E2s_v4": _spec(2, 16, "E v4 Series"),
    "Standard_E4s_v4": _spec(4, 32, "E v4 Series"),
    # E v3
    "Standard_E2s_v3": _spec(2, 16, "E v3 Series"),
    "Standard_E4s_v3": _spec(4, 32, "E v3 Series"),
    # Compute optimized, F v2
    "Standard_F2s_v2": _spec(2, 4, "F v2 Series"),
    "Standard_F4s_v2": _spec(4, 8, "F v2 Series"),
    "Standard_F8s_v2": _spec(8, 16, "F v2 Series"),
    "Standard_F16s_v2": _spec(16, 32, "F v2 Series"),
    "Standard_F32s_v2": _spec(32, 64, "F v2 Series"),
    # Burstable
    "Standard_B1ls": _spec(1, 0.5, "B Series"),
    "Standard_B1s": _spec(1, 1, "B Series"),
    "Standard_B1ms": _spec(1, 2, "B Series"),
    "Standard_B2s": _spec(2, 4, "B Series"),
    "Standard_B2ms": _spec(2, 8, "B Series"),
    "Standard_B4ms": _spec(4, 16, "B Series"),
    "Standard_B8ms": _spec(8, 32, "B Series"),
    # Storage optimized, L v3
    "Standard_L8s_v3": _spec(8, 64, "L v3 Series"),
    "Standard_L16s_v3": _spec(16, 128, "L v3 Series"),
    "Standard_L32s_v3": _spec(32, 256, "L v3 Series"),
    # Entry level, A v2
    "Standard_A1_v2": _spec(1, 2, "A v2 Series"),
    "Standard_A2_v2": _spec(2, 4, "A v2 Series"),
    "Standard_A4_v2": _spec(4, 8, "A v2 Series"),
    "Standard_A2m_v2": _spec(2, 16, "A v2 Series"),
}


def lookup(sku_name: str) -> Optional[KnownSpec]:
    """Exact, case-sensitive lookup."""
    return KNOWN_SKUS.get(sku_name)


__all__ = ["KnownSpec", "KNOWN_SKUS", "lookup"]
