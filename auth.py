"""Login and role permissions."""

import logging

from constants import ROLE_ADMIN, ROLE_TEAM_LEAD
from builder import parse_sequence
from exceptions import AuthError

logger = logging.getLogger(__name__)


class PlaintextAuthenticator:
    """Checks credentials by exact match against the stored user list.

    Passwords are stored and compared as plain text. A hashed verifier
    can replace this class as long as it keeps ``authenticate``.
    """

    def __init__(self, users: list):
        self.users = users

    def authenticate(self, username: str, password: str) -> dict:
        for user in self.users:
            if user.get("username") == username and user.get("password") == password:
                logger.info("User %s logged in", username)
                return user
        logger.warning("Rejected login for %r", username)
        raise AuthError()


def is_admin(user: dict) -> bool:
    return (user or {}).get("role") == ROLE_ADMIN


def is_manager(user: dict) -> bool:
    """Admins and team leads."""
    return (user or {}).get("role") in (ROLE_ADMIN, ROLE_TEAM_LEAD)


def can_access_settings(user: dict) -> bool:
    return is_admin(user)


def can_edit_base_pricing(user: dict) -> bool:
    return is_manager(user)


def can_change_status(user: dict) -> bool:
    return is_manager(user)


def can_view_all_quotations(user: dict) -> bool:
    return is_manager(user)


def can_modify_quotations(user: dict) -> bool:
    return is_manager(user)


def can_export_master_report(user: dict) -> bool:
    return is_admin(user)


def visible_quotations(quotations: list, user: dict, search: str = "") -> list:
    """Quotations this user may see, filtered by search and newest id first."""
    if can_view_all_quotations(user):
        rows = list(quotations)
    else:
        rows = [q for q in quotations if q.get("created_by") == (user or {}).get("id")]

    needle = (search or "").strip().lower()
    if needle:
        rows = [
            q for q in rows
            if any(needle in (q.get(field) or "").lower()
                   for field in ("id", "customer_name", "project_type"))
        ]

    def newest_first(quotation):
        sequence = parse_sequence(quotation.get("id"))
        return (sequence is not None, sequence or 0, quotation.get("id") or "")

    return sorted(rows, key=newest_first, reverse=True)
