# tests/conftest.py
import os
import sys

import pytest

# Project root holds the flat modules
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from catalog import default_state  # noqa: E402
from store import JsonStore  # noqa: E402
from controller import QuoteController  # noqa: E402


ONGRID_TRIPLE = ("Ongrid Subsidy", "2 Meter Flat Roof Structure", "TOPCON G12R")


@pytest.fixture
def state():
    """Fresh copy of the built-in reference data."""
    return default_state()


@pytest.fixture
def admin_user(state):
    return state["users"][0]


@pytest.fixture
def sales_user():
    return {
        "id": "u-sales",
        "name": "Anu Joseph",
        "username": "anu",
        "password": "secret",
        "role": "user",
        "sales_person_name": "Anu Joseph",
        "sales_person_mobile": "9000000001",
    }


@pytest.fixture
def team_lead():
    return {
        "id": "u-tl",
        "name": "Rahul Nair",
        "username": "rahul",
        "password": "lead",
        "role": "TL",
        "sales_person_name": "Rahul Nair",
        "sales_person_mobile": "",
    }


@pytest.fixture
def store(tmp_path):
    return JsonStore(str(tmp_path / "data"))


@pytest.fixture
def controller(store):
    controller = QuoteController(store)
    controller.load()
    return controller


@pytest.fixture
def quotation():
    """A saved-looking quotation for document and export tests."""
    return {
        "id": "KLMNRE-1001/05-25",
        "date": "2025-03-05",
        "customer_name": "Mary Thomas",
        "discom_number": "",
        "address": "Kakkanad, Kochi",
        "mobile": "9847000000",
        "email": "mary@example.com",
        "location": "Kochi",
        "project_type": ONGRID_TRIPLE[0],
        "structure_type": ONGRID_TRIPLE[1],
        "panel_type": ONGRID_TRIPLE[2],
        "status": "Site Survey Completed",
        "pricing": {
            "actual_plant_cost": 185000,
            "discount": 5000,
            "subsidy_amount": 78000,
            "kseb_charges": 1500,
            "additional_material_cost": 0,
            "customized_structure_cost": 0,
            "net_meter_cost": 0,
        },
        "bom_items": [
            {"id": "b1", "product": "Solar Panels", "uom": "Nos", "quantity": "8",
             "specification": "550Wp Mono PERC", "make": "Adani/Waaree"},
            {"id": "b2", "product": "On-Grid Inverter", "uom": "No", "quantity": "1",
             "specification": "3kW String Inverter", "make": "Growatt/Solis"},
        ],
        "system_description": "3kW ON-GRID SOLAR POWER GENERATING SYSTEM",
        "product_id": "pd3kw",
        "created_by": "admin-01",
        "created_by_name": "Administrator",
        "sales_person_mobile": "",
    }
