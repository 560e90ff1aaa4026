"""Reference data catalog.

Provides the built-in company profile, pricing packages, BOM templates,
warranty packages, terms, products and users that seed a fresh install,
plus the small record factories shared by the store, builder and importer.
"""

import copy
import uuid

from constants import PRICING_FIELDS, ROLE_ADMIN


def new_id() -> str:
    """Short random id for reference records and BOM items."""
    return uuid.uuid4().hex[:9]


def to_amount(value) -> float:
    """Coerce a stored or typed amount to a number, blanks become 0."""
    if value is None or value == "":
        return 0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (int, float)):
        return value
    text = str(value).replace(",", "").strip()
    if not text:
        return 0
    number = float(text)
    return int(number) if number.is_integer() else number


def make_pricing_config(values: dict = None) -> dict:
    """Copy only the numeric pricing fields, defaulting each to 0."""
    values = values or {}
    return {field: to_amount(values.get(field)) for field in PRICING_FIELDS}


def clone_bom_items(items: list) -> list:
    """Copy BOM items, giving every copy a fresh id."""
    return [{**item, "id": new_id()} for item in items or []]


def make_user(values: dict) -> dict:
    """Normalise a user record, filling sales person details from the name."""
    user = dict(values)
    user.setdefault("id", new_id())
    user.setdefault("role", "user")
    if not user.get("sales_person_name"):
        user["sales_person_name"] = user.get("name", "")
    user.setdefault("sales_person_mobile", "")
    return user


DEFAULT_COMPANY = {
    "name": "Kondaas Automation Pvt Ltd",
    "head_office": "123, Solar Plaza, Opp. KSEB, Kochi, Kerala",
    "regional_office_1": "Branch Office, Trivandrum, Kerala",
    "regional_office_2": "Service Center, Calicut, Kerala",
    "phone": "+91 9876543210",
    "email": "info@kondaas.com",
    "website": "www.kondaas.com",
    "logo": "",  # data:image/...;base64 string
    "seal": "",
    "gstin": "32AAAAA0000A1Z5"
}

DEFAULT_BANK = {
    "company_name": "Kondaas Automation Private Limited",
    "bank_name": "HDFC BANK",
    "account_number": "50200012345678",
    "branch": "Cochin Main",
    "ifsc": "HDFC0000123",
    "address": "M.G. Road, Cochin",
    "pan": "ABCDE1234F",
    "upi_id": "kondaas@hdfc",
    "gst_number": "32AAAAA0000A1Z5"
}

_ONGRID_3M = {
    "project_type": "Ongrid Subsidy",
    "structure_type": "2 Meter Flat Roof Structure",
    "panel_type": "TOPCON G12R"
}

DEFAULT_PRODUCT_PRICING = [
    {
        "id": "p3kw",
        "name": "3kW Standard Pricing",
        **_ONGRID_3M,
        "actual_plant_cost": 185000,
        "discount": 0,
        "subsidy_amount": 78000,
        "kseb_charges": 0,
        "additional_material_cost": 0,
        "customized_structure_cost": 0,
        "net_meter_cost": 0
    },
    {
        "id": "p5kw",
        "name": "5kW Standard Pricing",
        **_ONGRID_3M,
        "actual_plant_cost": 295000,
        "discount": 0,
        "subsidy_amount": 78000,
        "kseb_charges": 0,
        "additional_material_cost": 0,
        "customized_structure_cost": 0,
        "net_meter_cost": 0
    },
]

DEFAULT_BOM_TEMPLATES = [
    {
        "id": "3kw-std",
        "name": "3kW Standard On-Grid",
        "items": [
            {"id": "1", "product": "Solar Panels", "uom": "Nos", "quantity": "8",
             "specification": "550Wp Mono PERC", "make": "Adani/Waaree"},
            {"id": "2", "product": "On-Grid Inverter", "uom": "No", "quantity": "1",
             "specification": "3kW String Inverter", "make": "Growatt/Solis"},
            {"id": "3", "product": "DC SPD", "uom": "Nos", "quantity": "2",
             "specification": "Type II 600V", "make": "Citel/Suntree"},
            {"id": "4", "product": "DC Fuse", "uom": "Nos", "quantity": "2",
             "specification": "15A/1000V", "make": "Mersen"},
            {"id": "5", "product": "DC Cable", "uom": "Mtrs", "quantity": "30",
             "specification": "4sqmm multi strand", "make": "Polycab/Siechem"},
            {"id": "6", "product": "Lightning Arrester", "uom": "Set", "quantity": "1",
             "specification": "Solid Copper 1M", "make": "Standard"},
        ]
    }
]

DEFAULT_WARRANTY_PACKAGES = [
    {
        "id": "w-default",
        **_ONGRID_3M,
        "panel_warranty": "25 Years Performance Warranty (Adani Solar)",
        "inverter_warranty": "5 to 10 Years Product Warranty (On-Grid String)",
        "battery_warranty": "",
        "system_warranty": "5 Years Free Service (Kondaas Automation)",
        "monitoring_system": "Standard Online Monitoring (Wi-Fi Required)"
    }
]

_DEFAULT_TERM_TEXTS = [
    "Structure height will be 1 to 3 feet from floor level.",
    "KSEB application & registration charges are included in the above cost.",
    "The customer shall provide necessary space and shadow-free area for installation.",
    "Civil works like concrete foundation if needed will be extra.",
    "The subsidy will be credited to the customer account as per govt norms.",
    "Any additional cabling beyond 30 meters will be charged extra.",
]

DEFAULT_TERMS = [
    {"id": f"t{order}", "text": text, "enabled": True, "order": order, **_ONGRID_3M}
    for order, text in enumerate(_DEFAULT_TERM_TEXTS, start=1)
]

DEFAULT_PRODUCT_DESCRIPTIONS = [
    {
        "id": "pd3kw",
        "name": "3kW ON-GRID SOLAR POWER GENERATING SYSTEM",
        **_ONGRID_3M,
        "default_pricing_id": "p3kw",
        "default_bom_template_id": "3kw-std"
    },
    {
        "id": "pd5kw",
        "name": "5kW ON-GRID SOLAR POWER GENERATING SYSTEM",
        **_ONGRID_3M,
        "default_pricing_id": "p5kw",
        "default_bom_template_id": ""
    },
]

DEFAULT_USERS = [
    {
        "id": "admin-01",
        "name": "Administrator",
        "username": "admin",
        "password": "admin123",
        "role": ROLE_ADMIN,
        "sales_person_name": "Administrator",
        "sales_person_mobile": ""
    }
]

INITIAL_NEXT_ID = 1001  # one past the 1000 sequence floor


def default_state() -> dict:
    """Return a fresh, independent copy of the built-in application state."""
    return copy.deepcopy({
        "company": DEFAULT_COMPANY,
        "bank": DEFAULT_BANK,
        "product_pricing": DEFAULT_PRODUCT_PRICING,
        "warranty_packages": DEFAULT_WARRANTY_PACKAGES,
        "terms": DEFAULT_TERMS,
        "bom_templates": DEFAULT_BOM_TEMPLATES,
        "product_descriptions": DEFAULT_PRODUCT_DESCRIPTIONS,
        "users": DEFAULT_USERS,
        "quotations": [],
        "next_id": INITIAL_NEXT_ID
    })
