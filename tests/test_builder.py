"""
Unit tests for quotation forms and the quotation builder.
"""

from datetime import date

import pytest

from builder import (
    generate_quote_id,
    parse_sequence,
    next_sequence,
    new_form,
    change_classification,
    apply_product,
    build_quotation
)
from resolver import find_product_by_name
from config import Config
from exceptions import ValidationError

TODAY = date(2025, 3, 5)
PRODUCT_3KW = "3kW ON-GRID SOLAR POWER GENERATING SYSTEM"


def _filled_form(state, user, product_name=PRODUCT_3KW):
    form = new_form(user, today=TODAY)
    form = change_classification(
        form,
        project_type="Ongrid Subsidy",
        structure_type="2 Meter Flat Roof Structure",
        panel_type="TOPCON G12R",
    )
    form = apply_product(form, find_product_by_name(state, product_name), state)
    form["customer_name"] = "Mary Thomas"
    return form


class TestQuoteIds:

    def test_generate_format(self):
        assert generate_quote_id(1001, "KLMNRE", TODAY) == "KLMNRE-1001/05-25"

    @pytest.mark.parametrize("quote_id, expected", [
        ("KLMNRE-1001/05-25", 1001),
        ("KAPL-1500/12-24", 1500),
        ("Q-77", None),
        ("", None),
    ])
    def test_parse_sequence(self, quote_id, expected):
        assert parse_sequence(quote_id) == expected

    def test_next_sequence_defaults_past_floor(self):
        assert next_sequence([]) == 1001

    def test_next_sequence_uses_highest(self):
        quotations = [{"id": "KLMNRE-1004/01-25"}, {"id": "KAPL-1010/02-24"}, {"id": "junk"}]
        assert next_sequence(quotations) == 1011

    def test_configured_prefix_is_recognised(self, monkeypatch):
        monkeypatch.setattr(Config, "QUOTE_ID_PREFIX", "SOLAR")
        assert parse_sequence("SOLAR-1007/19-26") == 1007
        assert parse_sequence("KAPL-1500/12-24") == 1500
        assert next_sequence([{"id": "SOLAR-1007/19-26"}, {"id": "KLMNRE-1003/01-25"}]) == 1008


class TestFormChanges:

    def test_new_form_defaults(self, admin_user):
        form = new_form(admin_user, today=TODAY)
        assert form["id"] is None
        assert form["date"] == "2025-03-05"
        assert form["status"] == "Site Survey Completed"
        assert form["bom_items"] == []
        assert all(value == 0 for value in form["pricing"].values())

    def test_classification_change_resets_description_only(self, state, admin_user):
        form = _filled_form(state, admin_user)
        changed = change_classification(form, structure_type="Without Structure")
        assert changed["system_description"] == ""
        assert changed["pricing"] == form["pricing"]
        assert changed["bom_items"] == form["bom_items"]
        assert changed["customer_name"] == "Mary Thomas"

    def test_unknown_classification_field(self, admin_user):
        with pytest.raises(ValueError):
            change_classification(new_form(admin_user), customer_name="x")

    def test_apply_product_copies_pricing_and_bom(self, state, admin_user):
        form = _filled_form(state, admin_user)
        assert form["system_description"] == PRODUCT_3KW
        assert form["pricing"]["actual_plant_cost"] == 185000
        assert form["pricing"]["subsidy_amount"] == 78000
        assert "name" not in form["pricing"]
        assert [item["product"] for item in form["bom_items"]][0] == "Solar Panels"

    def test_product_without_bom_keeps_existing_items(self, state, admin_user):
        form = _filled_form(state, admin_user)
        switched = apply_product(form, find_product_by_name(state, "5kW ON-GRID SOLAR POWER GENERATING SYSTEM"), state)
        assert switched["pricing"]["actual_plant_cost"] == 295000
        assert switched["bom_items"] == form["bom_items"]
        assert switched["customer_name"] == "Mary Thomas"

    def test_bom_clone_has_fresh_ids(self, state, admin_user):
        first = _filled_form(state, admin_user)["bom_items"]
        second = _filled_form(state, admin_user)["bom_items"]
        template_ids = {item["id"] for item in state["bom_templates"][0]["items"]}
        strip = [{k: v for k, v in item.items() if k != "id"} for item in first]
        assert strip == [{k: v for k, v in item.items() if k != "id"} for item in second]
        assert not {i["id"] for i in first} & {i["id"] for i in second}
        assert not {i["id"] for i in first} & template_ids


class TestBuildQuotation:

    def test_requires_classification(self, state, admin_user):
        form = new_form(admin_user)
        with pytest.raises(ValidationError, match="Project, Structure and Panel"):
            build_quotation(form, None, admin_user, state)

    def test_requires_product(self, state, admin_user):
        form = change_classification(
            new_form(admin_user),
            project_type="Ongrid Subsidy",
            structure_type="2 Meter Flat Roof Structure",
            panel_type="TOPCON G12R",
        )
        with pytest.raises(ValidationError, match="Product Description"):
            build_quotation(form, None, admin_user, state)

    def test_requires_customer_name(self, state, admin_user):
        form = _filled_form(state, admin_user)
        form["customer_name"] = "  "
        with pytest.raises(ValidationError):
            build_quotation(form, None, admin_user, state)

    def test_new_quotation_gets_id_and_creator(self, state, sales_user):
        product = find_product_by_name(state, PRODUCT_3KW)
        form = _filled_form(state, sales_user)
        quotation = build_quotation(form, product, sales_user, state, today=TODAY)
        assert quotation["id"] == f"KLMNRE-{state['next_id']}/05-25"
        assert quotation["created_by"] == "u-sales"
        assert quotation["created_by_name"] == "Anu Joseph"
        assert quotation["sales_person_mobile"] == "9000000001"

    def test_manual_overrides_survive_build(self, state, admin_user):
        product = find_product_by_name(state, PRODUCT_3KW)
        form = _filled_form(state, admin_user)
        form["pricing"]["discount"] = 7500
        quotation = build_quotation(form, product, admin_user, state, today=TODAY)
        assert quotation["pricing"]["discount"] == 7500

    def test_unapplied_product_is_snapshotted(self, state, admin_user):
        product = find_product_by_name(state, PRODUCT_3KW)
        form = change_classification(
            new_form(admin_user),
            project_type="Ongrid Subsidy",
            structure_type="2 Meter Flat Roof Structure",
            panel_type="TOPCON G12R",
        )
        form["system_description"] = PRODUCT_3KW
        form["customer_name"] = "Mary Thomas"
        quotation = build_quotation(form, product, admin_user, state, today=TODAY)
        assert quotation["pricing"]["actual_plant_cost"] == 185000
        assert len(quotation["bom_items"]) == 6

    def test_snapshot_is_independent_of_source(self, state, admin_user):
        product = find_product_by_name(state, PRODUCT_3KW)
        quotation = build_quotation(_filled_form(state, admin_user), product, admin_user, state, today=TODAY)
        state["product_pricing"][0]["actual_plant_cost"] = 1
        state["bom_templates"][0]["items"][0]["product"] = "Changed"
        assert quotation["pricing"]["actual_plant_cost"] == 185000
        assert quotation["bom_items"][0]["product"] == "Solar Panels"

    def test_edit_keeps_id_and_creator(self, state, admin_user, quotation):
        form = new_form(admin_user, quotation)
        form = change_classification(form, project_type="Hybrid Subsidy", structure_type="Without Structure")
        form["system_description"] = "Custom Hybrid"
        edited = build_quotation(form, None, admin_user, state, today=date(2026, 1, 1))
        assert edited["id"] == quotation["id"]
        assert edited["created_by"] == quotation["created_by"]
        assert edited["created_by_name"] == quotation["created_by_name"]
        assert edited["project_type"] == "Hybrid Subsidy"
        assert edited["date"] == quotation["date"]
