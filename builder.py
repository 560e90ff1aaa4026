"""Quotation form handling and aggregate building.

A form is a plain dict holding customer input, the classification triple,
a pricing snapshot and a BOM snapshot. ``build_quotation`` turns a valid
form into the quotation record that gets persisted and printed.
"""

import re
from datetime import date

from config import Config
from constants import CUSTOMER_FIELDS, STATUS_COMPLETED
from catalog import make_pricing_config, clone_bom_items
from exceptions import ValidationError
from resolver import TRIPLE_FIELDS, find_pricing, resolve_bom


def _known_prefixes() -> tuple:
    """The configured prefix plus the legacy ones found in older data."""
    return (Config.QUOTE_ID_PREFIX,) + tuple(
        p for p in Config.LEGACY_ID_PREFIXES if p != Config.QUOTE_ID_PREFIX
    )


QUOTATION_FIELDS = (
    ["id", "date"]
    + CUSTOMER_FIELDS
    + list(TRIPLE_FIELDS)
    + ["status", "pricing", "bom_items", "system_description", "product_id",
       "created_by", "created_by_name", "sales_person_mobile"]
)


def generate_quote_id(sequence: int, prefix: str = None, on: date = None) -> str:
    """Build an id such as KLMNRE-1001/05-25 (sequence/day-year)."""
    on = on or date.today()
    return f"{prefix or Config.QUOTE_ID_PREFIX}-{sequence}/{on.strftime('%d-%y')}"


def parse_sequence(quote_id: str):
    """Numeric sequence of a quotation id, or None if it has none."""
    pattern = r"(?:%s)-(\d+)" % "|".join(re.escape(p) for p in _known_prefixes())
    match = re.search(pattern, quote_id or "")
    return int(match.group(1)) if match else None


def next_sequence(quotations: list, floor: int = None) -> int:
    """One past the highest sequence on file (floor when there is none)."""
    floor = Config.SEQUENCE_FLOOR if floor is None else floor
    sequences = [parse_sequence(q.get("id")) for q in quotations]
    return max([floor] + [s for s in sequences if s is not None]) + 1


def new_form(current_user: dict, quotation: dict = None, today: date = None) -> dict:
    """Blank form for a new quotation, or an editable copy of an existing one."""
    if quotation is not None:
        form = {field: quotation.get(field) for field in QUOTATION_FIELDS}
        form["pricing"] = make_pricing_config(quotation.get("pricing"))
        form["bom_items"] = [dict(item) for item in quotation.get("bom_items") or []]
        return form

    form = {field: "" for field in CUSTOMER_FIELDS}
    form.update({field: "" for field in TRIPLE_FIELDS})
    form.update({
        "id": None,
        "date": (today or date.today()).isoformat(),
        "status": STATUS_COMPLETED,
        "pricing": make_pricing_config(),
        "bom_items": [],
        "system_description": "",
        "product_id": None,
        "created_by": current_user.get("id"),
        "created_by_name": current_user.get("name"),
        "sales_person_mobile": current_user.get("sales_person_mobile", "")
    })
    return form


def change_classification(form: dict, **updates) -> dict:
    """Apply triple changes; the chosen product must be picked again.

    Pricing and BOM snapshots stay as they are until a new product is applied.
    """
    changed = dict(form)
    for field, value in updates.items():
        if field not in TRIPLE_FIELDS:
            raise ValueError(f"Unknown classification field: {field}")
        changed[field] = value
    if any(form.get(field) != changed.get(field) for field in updates):
        changed["system_description"] = ""
        changed["product_id"] = None
    return changed


def apply_product(form: dict, product: dict, state: dict) -> dict:
    """Snapshot a product's linked pricing and BOM into the form.

    Customer fields are left untouched. Missing links leave the
    corresponding snapshot as it was.
    """
    applied = dict(form)
    applied["system_description"] = product.get("name", "")
    applied["product_id"] = product.get("id")

    pricing = find_pricing(state, product.get("default_pricing_id"))
    if pricing is not None:
        applied["pricing"] = make_pricing_config(pricing)

    template = resolve_bom(state, product.get("default_bom_template_id"))
    if template is not None:
        applied["bom_items"] = clone_bom_items(template.get("items"))

    return applied


def validate_form(form: dict) -> None:
    if not all(form.get(field) for field in TRIPLE_FIELDS):
        raise ValidationError("Please select Project, Structure and Panel types")
    if not form.get("system_description"):
        raise ValidationError("Please select a Product Description")
    if not (form.get("customer_name") or "").strip():
        raise ValidationError("Please enter the Customer Name")


def build_quotation(
    form: dict,
    product: dict,
    current_user: dict,
    state: dict,
    today: date = None,
    prefix: str = None
) -> dict:
    """Turn a submitted form into a quotation record.

    New quotations take their id from ``state["next_id"]`` and are stamped
    with the current user; edited ones keep their id and creator. Nothing
    is persisted here.
    """
    validate_form(form)

    if product is not None and product.get("id") != form.get("product_id"):
        form = apply_product(form, product, state)

    quotation = {field: form.get(field) for field in QUOTATION_FIELDS}
    quotation["pricing"] = make_pricing_config(form.get("pricing"))
    quotation["bom_items"] = [dict(item) for item in form.get("bom_items") or []]
    quotation["customer_name"] = form["customer_name"].strip()

    if form.get("id"):
        return quotation

    today = today or date.today()
    quotation["id"] = generate_quote_id(state["next_id"], prefix, today)
    quotation["date"] = form.get("date") or today.isoformat()
    quotation["created_by"] = current_user.get("id")
    quotation["created_by_name"] = current_user.get("name")
    quotation["sales_person_mobile"] = current_user.get("sales_person_mobile", "")
    return quotation
