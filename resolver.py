"""Classification lookups over the reference data.

Every record that carries a classification triple (pricing packages,
products, warranties, terms) is matched by exact equality on all three
fields. Where several records share a triple the first one in collection
order wins. Warranty lookups fall back to the first warranty on file.
"""

TRIPLE_FIELDS = ("project_type", "structure_type", "panel_type")
ALL = "All"


def triple_of(record: dict) -> tuple:
    """Return the (project, structure, panel) triple of a record or form."""
    return tuple(record.get(field, "") for field in TRIPLE_FIELDS)


def matches(record: dict, triple: tuple) -> bool:
    return triple_of(record) == tuple(triple)


def find_products(state: dict, triple: tuple) -> list:
    """Product descriptions offered for a classification."""
    return [p for p in state.get("product_descriptions", []) if matches(p, triple)]


def find_product_by_name(state: dict, name: str):
    for product in state.get("product_descriptions", []):
        if product.get("name") == name:
            return product
    return None


def find_by_id(records: list, record_id: str):
    if not record_id:
        return None
    for record in records:
        if record.get("id") == record_id:
            return record
    return None


def find_pricing(state: dict, pricing_id: str):
    """The pricing package explicitly linked from a product description."""
    return find_by_id(state.get("product_pricing", []), pricing_id)


def resolve_pricing(state: dict, triple: tuple):
    """First pricing package with this exact triple, or None."""
    for pricing in state.get("product_pricing", []):
        if matches(pricing, triple):
            return pricing
    return None


def pricing_options(state: dict, triple: tuple) -> list:
    """Pricing packages a product with this triple may link to."""
    return [p for p in state.get("product_pricing", []) if matches(p, triple)]


def resolve_bom(state: dict, template_id: str):
    return find_by_id(state.get("bom_templates", []), template_id)


def resolve_warranty(state: dict, triple: tuple):
    """Matching warranty package, else the first one on file, else None."""
    warranties = state.get("warranty_packages", [])
    for warranty in warranties:
        if matches(warranty, triple):
            return warranty
    return warranties[0] if warranties else None


def resolve_terms(state: dict, triple: tuple) -> list:
    """Enabled terms for this triple in print order."""
    selected = [
        term for term in state.get("terms", [])
        if term.get("enabled") and matches(term, triple)
    ]
    # sorted() is stable, so equal orders keep collection order
    return sorted(selected, key=lambda term: term.get("order") or 0)


def filter_by_triple(
    records: list,
    project_type: str = ALL,
    structure_type: str = ALL,
    panel_type: str = ALL
) -> list:
    """Settings-tab filter where "All" (or blank) leaves an axis unconstrained."""
    wanted = dict(zip(TRIPLE_FIELDS, (project_type, structure_type, panel_type)))
    return [
        record for record in records
        if all(
            value in (ALL, "", None) or record.get(field) == value
            for field, value in wanted.items()
        )
    ]
