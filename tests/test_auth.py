"""
Tests for login and role permissions.
"""

import pytest

from auth import (
    PlaintextAuthenticator,
    is_admin,
    is_manager,
    can_access_settings,
    can_edit_base_pricing,
    can_change_status,
    can_modify_quotations,
    can_export_master_report,
    visible_quotations
)
from exceptions import AuthError


class TestAuthenticate:

    def test_valid_credentials(self, state):
        user = PlaintextAuthenticator(state["users"]).authenticate("admin", "admin123")
        assert user["id"] == "admin-01"

    @pytest.mark.parametrize("username, password", [
        ("admin", "wrong"),
        ("Admin", "admin123"),
        ("", ""),
    ])
    def test_invalid_credentials(self, state, username, password):
        with pytest.raises(AuthError) as excinfo:
            PlaintextAuthenticator(state["users"]).authenticate(username, password)
        assert excinfo.value.message == "Invalid credentials"


class TestRoles:

    def test_admin_permissions(self, admin_user):
        assert is_admin(admin_user)
        assert can_access_settings(admin_user)
        assert can_export_master_report(admin_user)
        assert can_edit_base_pricing(admin_user)

    def test_team_lead_permissions(self, team_lead):
        assert not is_admin(team_lead)
        assert is_manager(team_lead)
        assert can_change_status(team_lead)
        assert can_modify_quotations(team_lead)
        assert not can_access_settings(team_lead)
        assert not can_export_master_report(team_lead)

    def test_user_permissions(self, sales_user):
        assert not is_manager(sales_user)
        assert not can_edit_base_pricing(sales_user)
        assert not can_change_status(sales_user)
        assert not can_modify_quotations(sales_user)

    def test_no_user(self):
        assert not is_admin(None)
        assert not is_manager(None)


class TestVisibleQuotations:

    QUOTES = [
        {"id": "KLMNRE-1001/05-25", "customer_name": "Mary Thomas", "project_type": "Ongrid Subsidy",
         "created_by": "u-sales"},
        {"id": "KLMNRE-1002/05-25", "customer_name": "Joseph K", "project_type": "Hybrid Subsidy",
         "created_by": "admin-01"},
        {"id": "KLMNRE-1003/05-25", "customer_name": "Latha", "project_type": "Ongrid Non Subsidy",
         "created_by": "u-sales"},
    ]

    def test_user_sees_only_own(self, sales_user):
        ids = [q["id"] for q in visible_quotations(self.QUOTES, sales_user)]
        assert ids == ["KLMNRE-1003/05-25", "KLMNRE-1001/05-25"]

    def test_managers_see_all(self, admin_user, team_lead):
        assert len(visible_quotations(self.QUOTES, admin_user)) == 3
        assert len(visible_quotations(self.QUOTES, team_lead)) == 3

    def test_newest_first_by_sequence_number(self, admin_user):
        quotes = [
            {"id": "KAPL-998/01-24"},
            {"id": "KLMNRE-10000/03-26"},
            {"id": "imported"},
            {"id": "KLMNRE-9999/02-26"},
        ]
        ids = [q["id"] for q in visible_quotations(quotes, admin_user)]
        assert ids == ["KLMNRE-10000/03-26", "KLMNRE-9999/02-26", "KAPL-998/01-24", "imported"]

    def test_search_is_case_insensitive(self, admin_user):
        assert [q["id"] for q in visible_quotations(self.QUOTES, admin_user, "HYBRID")] == ["KLMNRE-1002/05-25"]
        assert [q["id"] for q in visible_quotations(self.QUOTES, admin_user, "mary")] == ["KLMNRE-1001/05-25"]
        assert len(visible_quotations(self.QUOTES, admin_user, "1003")) == 1
        assert len(visible_quotations(self.QUOTES, admin_user, "  ")) == 3
