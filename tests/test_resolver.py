"""
Unit tests for classification lookups.
"""

from resolver import (
    triple_of,
    find_products,
    find_product_by_name,
    find_pricing,
    resolve_pricing,
    pricing_options,
    resolve_bom,
    resolve_warranty,
    resolve_terms,
    filter_by_triple
)

ONGRID_TRIPLE = ("Ongrid Subsidy", "2 Meter Flat Roof Structure", "TOPCON G12R")

HYBRID_TRIPLE = ("Hybrid Subsidy", "Without Structure", "TOPCON HJT")


def _with_triple(record, triple):
    return {**record, "project_type": triple[0], "structure_type": triple[1], "panel_type": triple[2]}


class TestPricingLookup:

    def test_first_match_wins(self, state):
        state["product_pricing"].insert(0, _with_triple({"id": "first", "name": "First"}, ONGRID_TRIPLE))
        assert resolve_pricing(state, ONGRID_TRIPLE)["id"] == "first"

    def test_no_match_returns_none(self, state):
        assert resolve_pricing(state, HYBRID_TRIPLE) is None

    def test_find_pricing_by_id(self, state):
        assert find_pricing(state, "p5kw")["actual_plant_cost"] == 295000
        assert find_pricing(state, "missing") is None
        assert find_pricing(state, "") is None

    def test_pricing_options_filtered_by_triple(self, state):
        state["product_pricing"].append(_with_triple({"id": "hy", "name": "Hybrid"}, HYBRID_TRIPLE))
        assert [p["id"] for p in pricing_options(state, HYBRID_TRIPLE)] == ["hy"]
        assert [p["id"] for p in pricing_options(state, ONGRID_TRIPLE)] == ["p3kw", "p5kw"]


class TestProductLookup:

    def test_find_products_for_triple(self, state):
        names = [p["name"] for p in find_products(state, ONGRID_TRIPLE)]
        assert len(names) == 2
        assert find_products(state, HYBRID_TRIPLE) == []

    def test_find_by_name(self, state):
        product = find_product_by_name(state, "5kW ON-GRID SOLAR POWER GENERATING SYSTEM")
        assert product["default_pricing_id"] == "p5kw"
        assert find_product_by_name(state, "Unknown") is None

    def test_resolve_bom(self, state):
        assert len(resolve_bom(state, "3kw-std")["items"]) == 6
        assert resolve_bom(state, "") is None


class TestWarrantyLookup:

    def test_exact_match(self, state):
        state["warranty_packages"].append(
            _with_triple({"id": "w-hybrid", "battery_warranty": "10 Years"}, HYBRID_TRIPLE)
        )
        assert resolve_warranty(state, HYBRID_TRIPLE)["id"] == "w-hybrid"

    def test_falls_back_to_first_record(self, state):
        state["warranty_packages"].append(_with_triple({"id": "w-other"}, ONGRID_TRIPLE))
        assert resolve_warranty(state, HYBRID_TRIPLE)["id"] == "w-default"

    def test_empty_collection_returns_none(self, state):
        state["warranty_packages"] = []
        assert resolve_warranty(state, ONGRID_TRIPLE) is None

    def test_repeat_lookups_return_same_record(self, state):
        assert resolve_warranty(state, HYBRID_TRIPLE) is resolve_warranty(state, HYBRID_TRIPLE)


class TestTermsLookup:

    def test_only_enabled_matching_terms_in_order(self, state):
        state["terms"] = [
            _with_triple({"id": "c", "text": "C", "enabled": True, "order": 3}, ONGRID_TRIPLE),
            _with_triple({"id": "a", "text": "A", "enabled": True, "order": 1}, ONGRID_TRIPLE),
            _with_triple({"id": "off", "text": "Off", "enabled": False, "order": 2}, ONGRID_TRIPLE),
            _with_triple({"id": "other", "text": "Other", "enabled": True, "order": 0}, HYBRID_TRIPLE),
        ]
        assert [t["id"] for t in resolve_terms(state, ONGRID_TRIPLE)] == ["a", "c"]

    def test_no_terms_for_triple(self, state):
        assert resolve_terms(state, HYBRID_TRIPLE) == []

    def test_default_terms_sorted(self, state):
        orders = [t["order"] for t in resolve_terms(state, ONGRID_TRIPLE)]
        assert orders == [1, 2, 3, 4, 5, 6]


class TestFilterByTriple:

    def test_all_leaves_axis_open(self, state):
        records = state["product_pricing"] + [_with_triple({"id": "hy"}, HYBRID_TRIPLE)]
        assert len(filter_by_triple(records)) == 3
        assert [r["id"] for r in filter_by_triple(records, "Hybrid Subsidy")] == ["hy"]
        assert filter_by_triple(records, "All", "Without Structure", "TOPCON G12R") == []

    def test_triple_of(self, state):
        assert triple_of(state["terms"][0]) == ONGRID_TRIPLE
