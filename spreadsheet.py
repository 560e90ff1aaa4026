"""Spreadsheet import and export.

Imports read the first sheet of an uploaded workbook into row dicts and map
them onto reference records using the header contracts in IMPORT_SCHEMAS.
Exports write quotation details, the master report and import samples as
xlsx workbooks.
"""

import io
import logging
from datetime import date

import pandas as pd

from constants import DEFAULT_CLASSIFICATION
from catalog import new_id
from pricing import calculate_breakdown
from exceptions import ImportFormatError

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_TRIPLE_COLUMNS = [
    ("Project Type", "project_type", DEFAULT_CLASSIFICATION["project_type"], "text"),
    ("Structure Type", "structure_type", DEFAULT_CLASSIFICATION["structure_type"], "text"),
    ("Panel Type", "panel_type", DEFAULT_CLASSIFICATION["panel_type"], "text"),
]

# (header, record key, default, kind) per collection
IMPORT_SCHEMAS = {
    "product_pricing": {
        "columns": [
            ("Package Name", "name", "Imported Package", "text"),
            *_TRIPLE_COLUMNS,
            ("Actual Cost", "actual_plant_cost", 0, "number"),
            ("Discount", "discount", 0, "number"),
            ("Subsidy Amount", "subsidy_amount", 0, "number"),
            ("KSEB Charges", "kseb_charges", 0, "number"),
            ("Net Meter Cost", "net_meter_cost", 0, "number"),
        ],
        "fixed": {"additional_material_cost": 0, "customized_structure_cost": 0},
    },
    "product_descriptions": {
        "columns": [
            ("Heading/Name", "name", "Imported Product", "text"),
            *_TRIPLE_COLUMNS,
            ("Pricing ID Link", "default_pricing_id", "", "text"),
            ("BOM Template ID Link", "default_bom_template_id", "", "text"),
        ],
    },
    "terms": {
        "columns": [
            ("Term Text", "text", "New Term", "text"),
            *_TRIPLE_COLUMNS,
            ("Enabled", "enabled", True, "flag"),
        ],
    },
    "warranty_packages": {
        "columns": [
            *_TRIPLE_COLUMNS,
            ("Panel Warranty", "panel_warranty", "", "text"),
            ("Inverter Warranty", "inverter_warranty", "", "text"),
            ("Battery Warranty", "battery_warranty", "", "text"),
            ("System Warranty", "system_warranty", "", "text"),
            ("Monitoring System", "monitoring_system", "", "text"),
        ],
    },
    "bom_templates": {
        "group_by": ("Template Name", "Imported BOM Template"),
        "columns": [
            ("Product Component", "product", "", "text"),
            ("UOM", "uom", "", "text"),
            ("Qty", "quantity", "", "text"),
            ("Specification", "specification", "", "text"),
            ("Make / Brand", "make", "", "text"),
        ],
    },
}

SAMPLE_WORKBOOKS = {
    "product_pricing": ("Solar_Pricing_Import_Sample.xlsx", "Pricing_Template", [
        {"Package Name": "3kW Sample Package", "Project Type": "Ongrid Subsidy",
         "Structure Type": "2 Meter Flat Roof Structure", "Panel Type": "TOPCON G12R",
         "Actual Cost": 185000, "Discount": 5000, "Subsidy Amount": 78000,
         "KSEB Charges": 1500, "Net Meter Cost": 2000},
    ]),
    "product_descriptions": ("Solar_Products_Import_Sample.xlsx", "Products_Template", [
        {"Heading/Name": "3kW ON-GRID SOLAR POWER GENERATING SYSTEM",
         "Project Type": "Ongrid Subsidy", "Structure Type": "2 Meter Flat Roof Structure",
         "Panel Type": "TOPCON G12R", "Pricing ID Link": "p3kw",
         "BOM Template ID Link": "3kw-std"},
    ]),
    "terms": ("Solar_Terms_Import_Sample.xlsx", "Terms_Template", [
        {"Term Text": "Structure height will be 1 to 3 feet from floor level.",
         "Project Type": "Ongrid Subsidy", "Structure Type": "2 Meter Flat Roof Structure",
         "Panel Type": "TOPCON G12R", "Enabled": "TRUE"},
    ]),
    "bom_templates": ("Solar_BOM_Import_Sample.xlsx", "BOM_Template", [
        {"Template Name": "3kW Sample BOM", "Product Component": "Solar Panels",
         "UOM": "Nos", "Qty": "8", "Specification": "550Wp Mono PERC",
         "Make / Brand": "Adani"},
        {"Template Name": "3kW Sample BOM", "Product Component": "On-Grid Inverter",
         "UOM": "No", "Qty": "1", "Specification": "3kW String Inverter",
         "Make / Brand": "Growatt"},
    ]),
    "warranty_packages": ("Solar_Warranty_Import_Sample.xlsx", "Warranty_Template", [
        {"Project Type": "Ongrid Subsidy", "Structure Type": "2 Meter Flat Roof Structure",
         "Panel Type": "TOPCON G12R",
         "Panel Warranty": "25 Years Performance Warranty",
         "Inverter Warranty": "10 Years Product Warranty",
         "Battery Warranty": "",
         "System Warranty": "5 Years Free Service",
         "Monitoring System": "Online Monitoring (Wi-Fi Required)"},
    ]),
}


def parse_rows(data: bytes, filename: str = "") -> list:
    """Read the first sheet of an xlsx (or a csv) into a list of row dicts.

    Blank cells come back as None. Raises ImportFormatError for unreadable
    or empty sheets.
    """
    try:
        if filename.lower().endswith(".csv"):
            frame = pd.read_csv(io.BytesIO(data))
        else:
            frame = pd.read_excel(io.BytesIO(data), engine="openpyxl")
    except Exception as exc:  # pandas surfaces many parser-specific errors
        logger.warning("Could not parse spreadsheet %r: %s", filename, exc)
        raise ImportFormatError(f"Could not read spreadsheet: {exc}") from exc

    frame = frame.dropna(how="all")
    if frame.empty:
        raise ImportFormatError("Excel sheet is empty")

    frame.columns = [str(column).strip() for column in frame.columns]
    frame = frame.astype(object).where(pd.notnull(frame), None)
    return frame.to_dict(orient="records")


def _text(value, default):
    if value is None:
        return default
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text if text else default


def _number(value, default, header: str, row_number: int):
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise ImportFormatError(f"Row {row_number}: '{header}' must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).replace(",", "").strip())
        except ValueError:
            raise ImportFormatError(
                f"Row {row_number}: '{header}' must be a number, got {value!r}"
            ) from None
    return int(number) if number.is_integer() else number


def _flag(value, default):
    if value is None:
        return default
    return str(value).strip().lower() != "false"


def _map_row(columns: list, row: dict, row_number: int) -> dict:
    record = {}
    for header, key, default, kind in columns:
        value = row.get(header)
        if kind == "number":
            record[key] = _number(value, default, header, row_number)
        elif kind == "flag":
            record[key] = _flag(value, default)
        else:
            record[key] = _text(value, default)
    return record


def rows_to_records(collection: str, rows: list, existing: list = ()) -> list:
    """Map parsed rows onto new records for a reference collection.

    The result is meant to be appended; ``existing`` only feeds the term
    ordering, which continues after the terms already on file.
    """
    if collection not in IMPORT_SCHEMAS:
        raise ImportFormatError(f"Unsupported import target: {collection}")
    if not rows:
        raise ImportFormatError("Excel sheet is empty")

    schema = IMPORT_SCHEMAS[collection]

    if "group_by" in schema:
        group_header, group_default = schema["group_by"]
        templates = {}
        for row_number, row in enumerate(rows, start=2):
            name = _text(row.get(group_header), group_default)
            template = templates.setdefault(name, {"id": new_id(), "name": name, "items": []})
            item = _map_row(schema["columns"], row, row_number)
            template["items"].append({"id": new_id(), **item})
        return list(templates.values())

    records = []
    for index, row in enumerate(rows):
        record = {"id": new_id(), **_map_row(schema["columns"], row, index + 2)}
        record.update(schema.get("fixed", {}))
        if collection == "terms":
            record["order"] = len(existing) + index + 1
        records.append(record)
    return records


def write_rows(sheets: dict) -> bytes:
    """Write ``{sheet_name: rows}`` into an xlsx workbook.

    Rows may be a DataFrame, a list of dicts (keys become headers) or a
    list of lists (written without a header row).
    """
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            if isinstance(rows, pd.DataFrame):
                frame, header = rows, True
            else:
                header = bool(rows) and isinstance(rows[0], dict)
                frame = pd.DataFrame(rows)
            frame.to_excel(writer, sheet_name=sheet_name[:31], index=False, header=header)
    buffer.seek(0)
    return buffer.getvalue()


def sample_workbook(collection: str) -> tuple:
    """Downloadable import template for a collection as (filename, bytes)."""
    filename, sheet_name, rows = SAMPLE_WORKBOOKS[collection]
    return filename, write_rows({sheet_name: rows})


def export_quotation(quotation: dict) -> tuple:
    """Pricing and BOM sheets for one quotation as (filename, bytes)."""
    pricing = quotation.get("pricing") or {}
    breakdown = calculate_breakdown(pricing, quotation.get("project_type"))

    pricing_rows = [
        ["Quotation No", quotation.get("id")],
        ["Customer", quotation.get("customer_name")],
        ["Date", quotation.get("date")],
        ["Project Type", quotation.get("project_type")],
        ["Structure Type", quotation.get("structure_type")],
        ["Panel Type", quotation.get("panel_type")],
        [None, None],
        ["Description", "Rate (₹)"],
        ["Actual Plant Cost", pricing.get("actual_plant_cost", 0)],
        ["Discount Applied", pricing.get("discount", 0)],
        ["Cost After Discount", breakdown["after_discount"]],
        ["Subsidy Amount", breakdown["subsidy_applied"]],
        ["Plant Cost After Subsidy", breakdown["after_subsidy"]],
        ["KSEB Charges", pricing.get("kseb_charges", 0)],
        ["Customized Structure Cost", pricing.get("customized_structure_cost", 0)],
        ["Additional Material Cost", pricing.get("additional_material_cost", 0)],
        ["Net Meter Cost", pricing.get("net_meter_cost", 0)],
        ["Final Net Investment", breakdown["grand_total"]],
    ]

    bom = pd.DataFrame(
        [
            [index, item.get("product"), item.get("uom"), item.get("quantity"),
             item.get("specification"), item.get("make")]
            for index, item in enumerate(quotation.get("bom_items") or [], start=1)
        ],
        columns=["SL No", "Product", "UOM", "Qty", "Spec", "Make"]
    )

    data = write_rows({"Pricing": pricing_rows, "Bill of Materials": bom})
    return f"{quotation.get('id')}_Solar_Quotation.xlsx", data


MASTER_REPORT_COLUMNS = [
    "Quote ID", "Date", "Customer", "Project Type", "Structure Type", "Panel Type",
    "Actual Cost (₹)", "Discount (₹)", "Subsidy (₹)", "Net Investment (₹)", "Sales Person"
]


def master_report_rows(quotations: list) -> list:
    rows = []
    for quotation in quotations:
        pricing = quotation.get("pricing") or {}
        breakdown = calculate_breakdown(pricing, quotation.get("project_type"))
        rows.append(dict(zip(MASTER_REPORT_COLUMNS, [
            quotation.get("id"),
            quotation.get("date"),
            quotation.get("customer_name"),
            quotation.get("project_type"),
            quotation.get("structure_type"),
            quotation.get("panel_type"),
            pricing.get("actual_plant_cost", 0),
            pricing.get("discount", 0),
            breakdown["subsidy_applied"],
            breakdown["grand_total"],
            quotation.get("created_by_name"),
        ])))
    return rows


def export_master_report(quotations: list, on: date = None) -> tuple:
    """One row per quotation as (filename, bytes)."""
    on = on or date.today()
    frame = pd.DataFrame(master_report_rows(quotations), columns=MASTER_REPORT_COLUMNS)
    data = write_rows({"Master Report": frame})
    return f"Solar_Quotes_Master_Report_{on.isoformat()}.xlsx", data
