"""Pricing calculations for solar quotations."""

from constants import (
    WITHOUT_STRUCTURE,
    DISCLAIMER_STRUCTURE_INCLUDED,
    DISCLAIMER_STRUCTURE_EXTRA,
    TOTAL_NOTE_STRUCTURE_EXTRA,
    LABEL_NET_INVESTMENT,
    LABEL_TOTAL_INVESTMENT
)
from catalog import make_pricing_config


def is_non_subsidy(project_type: str) -> bool:
    """True when the project type is one of the "Non Subsidy" variants."""
    return "non subsidy" in (project_type or "").lower()


def calculate_breakdown(pricing: dict, project_type: str) -> dict:
    """Calculate the staged cost breakdown for a pricing snapshot.

    Missing fields count as 0. Negative inputs are not rejected and
    simply flow through the arithmetic.

    Returns:
        Dict with after_discount, subsidy_applied, after_subsidy, grand_total
    """
    p = make_pricing_config(pricing)

    after_discount = p["actual_plant_cost"] - p["discount"]
    subsidy_applied = 0 if is_non_subsidy(project_type) else p["subsidy_amount"]
    after_subsidy = after_discount - subsidy_applied

    grand_total = (
        after_subsidy
        + p["kseb_charges"]
        + p["customized_structure_cost"]
        + p["additional_material_cost"]
        + p["net_meter_cost"]
    )

    return {
        "after_discount": after_discount,
        "subsidy_applied": subsidy_applied,
        "after_subsidy": after_subsidy,
        "grand_total": grand_total
    }


def structure_disclaimer(structure_type: str, pricing: dict):
    """Banner disclaimer for quotations without a standard structure, else None."""
    if structure_type != WITHOUT_STRUCTURE:
        return None
    if make_pricing_config(pricing)["customized_structure_cost"] > 0:
        return DISCLAIMER_STRUCTURE_INCLUDED
    return DISCLAIMER_STRUCTURE_EXTRA


def structure_total_note(structure_type: str, pricing: dict):
    """Longer wording shown under the total when structure cost is not quoted."""
    if structure_type != WITHOUT_STRUCTURE:
        return None
    if make_pricing_config(pricing)["customized_structure_cost"] > 0:
        return None
    return TOTAL_NOTE_STRUCTURE_EXTRA


def investment_label(project_type: str) -> str:
    return LABEL_TOTAL_INVESTMENT if is_non_subsidy(project_type) else LABEL_NET_INVESTMENT


def format_inr(amount) -> str:
    """Format an amount with Indian digit grouping, e.g. 1,85,000.

    Two decimals are shown only when the amount has a fractional part.
    """
    amount = amount or 0
    sign = "-" if amount < 0 else ""
    rupees, paise = divmod(round(abs(amount) * 100), 100)

    digits = str(int(rupees))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])

    if paise:
        return f"{sign}{digits}.{int(paise):02d}"
    return f"{sign}{digits}"
