"""Quotation document model.

``assemble_document`` turns a quotation plus the reference data into a
fixed four-page model of typed sections. Renderers (PDF and print HTML)
only lay the sections out; every figure and lookup is settled here.
"""

from datetime import datetime

from config import Config
from constants import (
    HYBRID_PROJECT_TYPES,
    STATUS_PENDING,
    STRUCTURE_INCLUDED,
    TOTAL_PAGES,
    TOTAL_BANNER_HEADING,
    TOTAL_BANNER_NOTES,
    TERMS_HINT,
    PROJECT_ROADMAP,
    REQUIRED_DOCUMENTS,
    DATE_FORMAT_PRINT
)
from pricing import (
    calculate_breakdown,
    structure_disclaimer,
    structure_total_note,
    investment_label,
    format_inr
)
from resolver import triple_of, resolve_warranty, resolve_terms, find_by_id

NOT_AVAILABLE = "N/A"


def format_print_date(value: str) -> str:
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d").strftime(DATE_FORMAT_PRINT)
    except (TypeError, ValueError):
        return value or ""


def _or_na(value) -> str:
    return value if value else NOT_AVAILABLE


def _summary_page(quotation: dict, state: dict) -> list:
    company = state.get("company", {})
    pricing = quotation.get("pricing") or {}
    breakdown = calculate_breakdown(pricing, quotation.get("project_type"))
    description = quotation.get("system_description", "")
    structure_type = quotation.get("structure_type")

    creator = find_by_id(state.get("users", []), quotation.get("created_by")) or {}
    mobile = quotation.get("sales_person_mobile") or creator.get("sales_person_mobile")

    # grand_total includes this cost, so a non-zero amount is always shown
    if structure_type == STRUCTURE_INCLUDED and not pricing.get("customized_structure_cost"):
        structure_cost = "Included"
    else:
        structure_cost = format_inr(pricing.get("customized_structure_cost", 0))

    total_notes = list(TOTAL_BANNER_NOTES)
    extra_note = structure_total_note(structure_type, pricing)
    if extra_note:
        total_notes.append(extra_note)

    return [
        {
            "kind": "company_header",
            "name": company.get("name", ""),
            "tagline": Config.COMPANY_TAGLINE,
            "logo": company.get("logo", ""),
            "offices": [
                ("REGIONAL BRANCHE 1", company.get("regional_office_1", "")),
                ("REGIONAL BRANCHE 2", company.get("regional_office_2", "")),
                ("HEAD OFFICE", company.get("head_office", "")),
            ],
            "contact": (
                f"company website: {company.get('website', '')} | "
                f"mail id: {company.get('email', '')} | "
                f"Sales Support Contact: {company.get('phone', '')}"
            ),
            "gstin": company.get("gstin", ""),
        },
        {
            "kind": "reference",
            "quotation_no": quotation.get("id"),
            "date": format_print_date(quotation.get("date")),
            "status": quotation.get("status"),
            "draft": quotation.get("status") == STATUS_PENDING,
            "sales_line": (
                f"Sales Person: {quotation.get('created_by_name') or ''} | "
                f"Sales Person Mobile No : {_or_na(mobile)}"
            ),
        },
        {
            "kind": "key_values",
            "title": "CUSTOMER",
            "rows": [
                ("Customer", quotation.get("customer_name", "")),
                ("Consumer No", _or_na(quotation.get("discom_number"))),
                ("MOBILE", quotation.get("mobile", "")),
                ("ADDRESS", quotation.get("address", "")),
            ],
        },
        {
            "kind": "banner",
            "title": "PROPOSED SYSTEM",
            "text": description,
            "classification": " | ".join(triple_of(quotation)),
            "disclaimer": structure_disclaimer(structure_type, pricing),
        },
        {
            "kind": "table",
            "title": "PRICING",
            "columns": ["SL", "Description", "Amount (₹)"],
            "rows": [
                ["01", f"ACTUAL PLANT COST of {description}",
                 format_inr(pricing.get("actual_plant_cost", 0))],
                ["02", "Limited Period Discount", f"- {format_inr(pricing.get('discount', 0))}"],
                ["", f"Cost of {description} AFTER DISCOUNT",
                 format_inr(breakdown["after_discount"])],
                ["03", "Subsidy Amount as Per PM Surya Ghar Approved Guidelines",
                 f"- {format_inr(breakdown['subsidy_applied'])}"],
                ["", "Customer Effective Cost After Subsidy",
                 format_inr(breakdown["after_subsidy"])],
            ],
            "emphasis": [2, 4],
        },
        {
            "kind": "table",
            "title": "ADDITIONAL CHARGES / CUSTOMER SCOPE",
            "columns": ["SL", "Description", "Amount (₹)"],
            "rows": [
                ["04", "KSEB Charges", format_inr(pricing.get("kseb_charges", 0))],
                ["05", "Customized Structure Cost(Without GST)", structure_cost],
                ["06", "Additional Material Cost (If Applicable)",
                 format_inr(pricing.get("additional_material_cost", 0))],
                ["07", "Net Meter Cost", format_inr(pricing.get("net_meter_cost", 0))],
            ],
            "emphasis": [],
        },
        {
            "kind": "total",
            "heading": TOTAL_BANNER_HEADING,
            "label": investment_label(quotation.get("project_type")),
            "value": breakdown["grand_total"],
            "amount": format_inr(breakdown["grand_total"]),
            "notes": total_notes,
        },
        {"kind": "note", "text": TERMS_HINT},
    ]


def _bom_page(quotation: dict, state: dict) -> list:
    rows = [
        [str(index), item.get("product", ""), str(item.get("quantity", "")),
         item.get("uom", ""), item.get("specification", ""), item.get("make", "")]
        for index, item in enumerate(quotation.get("bom_items") or [], start=1)
    ]

    warranty = resolve_warranty(state, triple_of(quotation)) or {}
    cells = [
        ("Modules", _or_na(warranty.get("panel_warranty"))),
        ("Inverter", _or_na(warranty.get("inverter_warranty"))),
    ]
    if quotation.get("project_type") in HYBRID_PROJECT_TYPES:
        cells.append(("Battery", _or_na(warranty.get("battery_warranty"))))
    cells.extend([
        ("Service", _or_na(warranty.get("system_warranty"))),
        ("Monitor", _or_na(warranty.get("monitoring_system"))),
    ])

    return [
        {
            "kind": "table",
            "title": "Technical Specifications (BOM)",
            "columns": ["#", "Products", "Qty", "UOM", "Spec/Type", "Make"],
            "rows": rows,
            "emphasis": [],
        },
        {"kind": "grid", "title": "Quality Assurance", "cells": cells},
    ]


def _terms_page(quotation: dict, state: dict) -> list:
    terms = resolve_terms(state, triple_of(quotation))
    return [{
        "kind": "numbered_list",
        "title": "Terms and Conditions",
        "items": [term.get("text", "") for term in terms],
    }]


def _execution_page(quotation: dict, state: dict) -> list:
    bank = state.get("bank", {})
    company = state.get("company", {})
    return [
        {
            "kind": "key_values",
            "title": "Company Bank Account Details",
            "rows": [
                ("Account Holder", bank.get("company_name", "")),
                ("Bank Partner", bank.get("bank_name", "")),
                ("Account No.", bank.get("account_number", "")),
                ("IFSC Code", bank.get("ifsc", "")),
                ("UPI ID", bank.get("upi_id", "")),
            ],
        },
        {
            "kind": "roadmap",
            "title": "Project Roadmap",
            "steps": [dict(step) for step in PROJECT_ROADMAP],
        },
        {
            "kind": "checklist",
            "title": "Required Documents for Subsidy Claim",
            "items": list(REQUIRED_DOCUMENTS),
        },
        {
            "kind": "signature",
            "company": f"For {company.get('name', '')}",
            "label": "Authorized Signatory",
            "seal": company.get("seal", ""),
            "seal_placeholder": "Official Seal",
        },
    ]


_PAGES = [
    ("summary", "Quotation Summary", _summary_page),
    ("bom", "Technical Specifications", _bom_page),
    ("terms", "Terms and Conditions", _terms_page),
    ("execution", "Execution & Compliance", _execution_page),
]


def assemble_document(quotation: dict, state: dict) -> dict:
    """Build the four-page document model for a quotation."""
    company_name = state.get("company", {}).get("name", "")
    pages = []
    for number, (key, title, build) in enumerate(_PAGES, start=1):
        pages.append({
            "number": number,
            "key": key,
            "title": title,
            "sections": build(quotation, state),
            "footer": {
                "left": f"{company_name} // Ref: {quotation.get('id')}",
                "right": f"Page {number} of {TOTAL_PAGES}",
            },
        })
    return {"quotation_id": quotation.get("id"), "pages": pages}
