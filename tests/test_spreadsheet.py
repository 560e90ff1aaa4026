"""
Tests for spreadsheet import and export.
"""

import io
from datetime import date

import pandas as pd
import pytest

from spreadsheet import (
    IMPORT_SCHEMAS,
    SAMPLE_WORKBOOKS,
    MASTER_REPORT_COLUMNS,
    parse_rows,
    rows_to_records,
    write_rows,
    sample_workbook,
    export_quotation,
    export_master_report
)
from exceptions import ImportFormatError


class TestParseRows:

    def test_reads_xlsx_with_blank_cells(self):
        data = write_rows({"Sheet1": [
            {"Term Text": "Civil works extra", "Enabled": "TRUE", "Project Type": None},
            {"Term Text": "Cabling extra", "Enabled": "false", "Project Type": "Hybrid Subsidy"},
        ]})
        rows = parse_rows(data, "terms.xlsx")
        assert len(rows) == 2
        assert rows[0]["Term Text"] == "Civil works extra"
        assert rows[0]["Project Type"] is None
        assert rows[1]["Enabled"] == "false"

    def test_reads_csv(self):
        rows = parse_rows(b"Package Name,Actual Cost\nSmall,90000\n", "pricing.csv")
        assert rows == [{"Package Name": "Small", "Actual Cost": 90000}]

    def test_header_only_sheet_is_empty(self):
        with pytest.raises(ImportFormatError, match="Excel sheet is empty"):
            parse_rows(b"Term Text,Enabled\n", "terms.csv")

    def test_unreadable_file(self):
        with pytest.raises(ImportFormatError):
            parse_rows(b"definitely not a workbook", "broken.xlsx")


class TestRowsToRecords:

    def test_pricing_defaults_and_fixed_fields(self):
        records = rows_to_records("product_pricing", [
            {"Package Name": "4kW", "Actual Cost": 240000.0, "Subsidy Amount": "78,000"},
            {"Actual Cost": None},
        ])
        first, second = records
        assert first["name"] == "4kW"
        assert first["actual_plant_cost"] == 240000
        assert first["subsidy_amount"] == 78000
        assert first["project_type"] == "Ongrid Subsidy"
        assert first["additional_material_cost"] == 0
        assert first["customized_structure_cost"] == 0
        assert second["name"] == "Imported Package"
        assert second["actual_plant_cost"] == 0
        assert first["id"] != second["id"]

    def test_non_numeric_amount_names_the_row(self):
        with pytest.raises(ImportFormatError, match="Row 3: 'Discount'"):
            rows_to_records("product_pricing", [
                {"Package Name": "ok", "Discount": 0},
                {"Package Name": "bad", "Discount": "ten"},
            ])

    def test_terms_continue_ordering(self, state):
        records = rows_to_records("terms", [
            {"Term Text": "One", "Enabled": "TRUE"},
            {"Term Text": "Two", "Enabled": "False"},
            {"Term Text": None, "Enabled": None},
        ], state["terms"])
        assert [r["order"] for r in records] == [7, 8, 9]
        assert [r["enabled"] for r in records] == [True, False, True]
        assert records[2]["text"] == "New Term"

    def test_products_keep_links(self):
        [record] = rows_to_records("product_descriptions", [
            {"Heading/Name": "4kW SYSTEM", "Pricing ID Link": "p4kw", "BOM Template ID Link": None},
        ])
        assert record["default_pricing_id"] == "p4kw"
        assert record["default_bom_template_id"] == ""

    def test_warranty_columns(self):
        [record] = rows_to_records("warranty_packages", [
            {"Project Type": "Hybrid Subsidy", "Battery Warranty": "10 Years"},
        ])
        assert record["project_type"] == "Hybrid Subsidy"
        assert record["battery_warranty"] == "10 Years"
        assert record["panel_warranty"] == ""

    def test_bom_rows_grouped_by_template(self):
        templates = rows_to_records("bom_templates", [
            {"Template Name": "A", "Product Component": "Panels", "Qty": 8.0},
            {"Template Name": "B", "Product Component": "Inverter", "Qty": "1"},
            {"Template Name": "A", "Product Component": "Cable", "Qty": 30},
            {"Template Name": None, "Product Component": "Earthing"},
        ])
        assert [t["name"] for t in templates] == ["A", "B", "Imported BOM Template"]
        assert [i["product"] for i in templates[0]["items"]] == ["Panels", "Cable"]
        assert [i["quantity"] for i in templates[0]["items"]] == ["8", "30"]

    def test_unknown_collection(self):
        with pytest.raises(ImportFormatError):
            rows_to_records("users", [{"Name": "x"}])


class TestSamples:

    @pytest.mark.parametrize("collection", sorted(SAMPLE_WORKBOOKS))
    def test_sample_imports_cleanly(self, collection):
        filename, data = sample_workbook(collection)
        assert filename.endswith(".xlsx")
        records = rows_to_records(collection, parse_rows(data, filename))
        assert records

    def test_every_importable_collection_has_a_sample(self):
        assert set(SAMPLE_WORKBOOKS) == set(IMPORT_SCHEMAS)


class TestExports:

    def test_quotation_workbook(self, quotation):
        filename, data = export_quotation(quotation)
        assert filename == "KLMNRE-1001/05-25_Solar_Quotation.xlsx"

        sheets = pd.read_excel(io.BytesIO(data), sheet_name=None, header=None)
        assert list(sheets) == ["Pricing", "Bill of Materials"]
        pricing = dict(zip(sheets["Pricing"][0], sheets["Pricing"][1]))
        assert pricing["Final Net Investment"] == 103500
        assert pricing["Subsidy Amount"] == 78000

        bom = pd.read_excel(io.BytesIO(data), sheet_name="Bill of Materials")
        assert list(bom.columns) == ["SL No", "Product", "UOM", "Qty", "Spec", "Make"]
        assert bom["Product"].tolist() == ["Solar Panels", "On-Grid Inverter"]

    def test_master_report(self, quotation):
        non_subsidy = {**quotation, "id": "KLMNRE-1002/05-25", "project_type": "Ongrid Non Subsidy"}
        filename, data = export_master_report([quotation, non_subsidy], on=date(2025, 3, 5))
        assert filename == "Solar_Quotes_Master_Report_2025-03-05.xlsx"

        frame = pd.read_excel(io.BytesIO(data), sheet_name="Master Report")
        assert list(frame.columns) == MASTER_REPORT_COLUMNS
        assert frame["Subsidy (₹)"].tolist() == [78000, 0]
        assert frame["Net Investment (₹)"].tolist() == [103500, 181500]

    def test_empty_master_report_has_headers(self):
        _, data = export_master_report([], on=date(2025, 3, 5))
        frame = pd.read_excel(io.BytesIO(data), sheet_name="Master Report")
        assert list(frame.columns) == MASTER_REPORT_COLUMNS
        assert frame.empty
