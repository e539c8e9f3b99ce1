from conftest import capability_sku, price_row

from skufinder.merge import dedupe_cheapest, merge_records
from skufinder.resolvers import resolve_from_heuristics
from skufinder.schema import Known, RawCapabilitySku, RawPriceItem, Unavailable


def _items(*rows):
    return [RawPriceItem.from_feed(row) for row in rows]


def _cap_map(*skus):
    parsed = [RawCapabilitySku.from_feed(s) for s in skus]
    return {s.name: s for s in parsed}


def test_merge_keeps_cheapest_duplicate():
    items = _items(
        price_row("Standard_D2s_v3", 0.05),
        price_row("Standard_D2s_v3", 0.03),
    )
    merged = merge_records(items, {})
    assert len(merged) == 1
    assert merged[0].price == 0.03
    assert merged[0].display("PricePerHour") == "0.03"


def test_price_ties_keep_first_row():
    items = _items(
        price_row("Standard_D2s_v3", 0.05, size="first"),
        price_row("Standard_D2s_v3", 0.05, size="second"),
    )
    assert [i.size for i in dedupe_cheapest(items)] == ["first"]


def test_names_unique_and_in_first_seen_order():
    items = _items(
        price_row("Standard_E2s_v5", 0.2),
        price_row("Standard_D2s_v3", 0.1),
        price_row("Standard_E2s_v5", 0.15),
        price_row("Standard_B1s", 0.01),
    )
    merged = merge_records(items, {})
    names = [r.name for r in merged]
    assert names == ["Standard_E2s_v5", "Standard_D2s_v3", "Standard_B1s"]
    assert len(set(names)) == len(names)


def test_authoritative_capabilities_are_used_verbatim():
    items = _items(price_row("Standard_D2s_v3", 0.1))
    cap_map = _cap_map(
        capability_sku(
            "Standard_D2s_v3",
            vCPUs="2",
            MemoryGB="8",
            MaxDataDiskCount="4",
            MaxNetworkInterfaces="2",
            PremiumIO="True",
            EncryptionAtHostSupported="True",
        )
    )
    record = merge_records(items, cap_map)[0]
    assert record.capability("vCPUs") == Known(value="2", source="api")
    assert record.display("MaxDataDiskCount") == "4"
    assert record.flag("PremiumIO")
    assert record.flag("EncryptionAtHost")
    assert record.family == "standardDSv3Family"
    assert not record.inferred


def test_missing_fields_on_present_sku_default_to_false_or_zero():
    items = _items(price_row("Standard_D2s_v3", 0.1))
    cap_map = _cap_map(capability_sku("Standard_D2s_v3", vCPUs="2"))
    record = merge_records(items, cap_map)[0]
    assert record.capability("MaxNetworkInterfaces") == Known(value="0", source="api")
    assert record.capability("NestedVirtualization") == Known(value="False", source="api")
    assert record.capability("EncryptionAtHost") == Known(value="False", source="api")


def test_heuristic_fallback_for_unknown_sku():
    items = _items(price_row("Standard_F48ams_v6", 2.1))
    record = merge_records(items, {})[0]
    assert record.display("vCPUs") == "48"
    assert record.capability("vCPUs").source == "heuristic"
    assert record.display("MemoryGB") == "96"
    assert record.family == "Compute Optimized"
    assert isinstance(record.capability("EncryptionAtHost"), Unavailable)
    assert record.inferred


def test_known_table_wins_over_heuristics():
    items = _items(price_row("Standard_B1s", 0.01))
    record = merge_records(items, {})[0]
    assert record.capability("MemoryGB") == Known(value="1", source="known_table")
    assert record.family == "B Series"


def test_unresolvable_fields_are_unavailable_not_zero():
    items = _items(price_row("Standard_Xyz", 0.5))
    record = merge_records(items, {})[0]
    assert isinstance(record.capability("vCPUs"), Unavailable)
    assert isinstance(record.capability("MemoryGB"), Unavailable)
    assert isinstance(record.capability("MaxDataDiskCount"), Unavailable)
    assert record.display("vCPUs") == "N/A"
    assert record.family == "Unknown"


def test_price_spot_and_region_come_from_price_row():
    items = _items(price_row("Standard_D2s_v3_Spot", 0.02, region="eastus"))
    cap_map = _cap_map(capability_sku("Standard_D2s_v3_Spot", vCPUs="2"))
    record = merge_records(items, cap_map)[0]
    assert record.flag("IsSpot")
    assert record.capability("PricePerHour").source == "price_feed"
    assert record.locations == ["eastus"]
    assert record.tier == "Standard"


def test_sku_without_family_falls_back_to_inferred_family():
    items = _items(price_row("Standard_E4s_v5", 0.3))
    cap_map = _cap_map(capability_sku("Standard_E4s_v5", family=None, vCPUs="4"))
    assert merge_records(items, cap_map)[0].family == "Memory Optimized"


def test_custom_resolver_chain():
    items = _items(price_row("Standard_D2s_v3", 0.1))
    cap_map = _cap_map(capability_sku("Standard_D2s_v3", vCPUs="64"))
    record = merge_records(items, cap_map, resolvers=(resolve_from_heuristics,))[0]
    assert record.capability("vCPUs") == Known(value="2", source="heuristic")
    assert list(record.capabilities)[:4] == ["vCPUs", "MemoryGB", "PricePerHour", "IsSpot"]
