"""Application controller owning the in-memory state."""

import copy
import logging
import threading

from constants import SETTINGS_KEYS
from catalog import new_id, clone_bom_items, make_user
from auth import PlaintextAuthenticator
from builder import build_quotation
from exceptions import ValidationError, ImportFormatError
from spreadsheet import parse_rows, rows_to_records

logger = logging.getLogger(__name__)

SAVE_IDLE = "idle"
SAVE_SAVING = "saving"
SAVE_SAVED = "saved"
SAVE_ERROR = "error"

RECORD_COLLECTIONS = [
    "product_pricing",
    "warranty_packages",
    "terms",
    "bom_templates",
    "product_descriptions",
    "users"
]


class QuoteController:
    """Holds the single AppState and routes every mutation through the store.

    A failed save is reported to the caller but the in-memory state is
    kept, so the screen and the files may differ until the next save.
    """

    def __init__(self, store):
        self.store = store
        self.state = None
        self.save_status = SAVE_IDLE
        # The Streamlit resource cache shares one controller across sessions
        self._lock = threading.RLock()

    def load(self) -> dict:
        self.state = self.store.load()
        return self.state

    @property
    def loaded(self) -> bool:
        return self.state is not None

    def login(self, username: str, password: str) -> dict:
        return PlaintextAuthenticator(self.state["users"]).authenticate(username, password)

    # Quotations

    def submit_quotation(self, form: dict, product: dict, user: dict) -> dict:
        """Build a quotation from a form and save it.

        Once a new quotation has its id, the id is written back into the
        form even if the save fails, so submitting the same form again
        updates that quotation instead of numbering a second one.
        """
        with self._lock:
            quotation = build_quotation(form, product, user, self.state)
            if not form.get("id"):
                form["id"] = quotation["id"]
                form["date"] = quotation["date"]
            self.save_quotation(quotation)
            return quotation

    def save_quotation(self, quotation: dict) -> None:
        """Upsert a quotation and persist it; PersistenceError propagates."""
        with self._lock:
            quotations = self.state["quotations"]
            for index, existing in enumerate(quotations):
                if existing.get("id") == quotation["id"]:
                    quotations[index] = quotation
                    break
            else:
                quotations.append(quotation)
                self.state["next_id"] += 1
            self.store.save_quotation(quotation)

    def delete_quotation(self, quotation_id: str) -> None:
        with self._lock:
            self.state["quotations"] = [
                q for q in self.state["quotations"] if q.get("id") != quotation_id
            ]
            self.store.delete_quotation(quotation_id)

    def find_quotation(self, quotation_id: str):
        for quotation in self.state["quotations"]:
            if quotation.get("id") == quotation_id:
                return quotation
        return None

    # Settings

    def update_settings(self, key: str, value) -> str:
        """Replace one settings entry and persist; returns the save status."""
        if key not in SETTINGS_KEYS:
            raise KeyError(key)
        self.state[key] = value
        self.save_status = SAVE_SAVING
        ok = self.store.save_settings(self.state)
        self.save_status = SAVE_SAVED if ok else SAVE_ERROR
        if not ok:
            logger.error("Settings update for %s was not persisted", key)
        return self.save_status

    def add_record(self, collection: str, record: dict) -> str:
        record = {**record, "id": record.get("id") or new_id()}
        return self.update_settings(collection, self.state[collection] + [record])

    def update_record(self, collection: str, record_id: str, changes: dict) -> str:
        records = [
            {**r, **changes, "id": r["id"]} if r.get("id") == record_id else r
            for r in self.state[collection]
        ]
        return self.update_settings(collection, records)

    def delete_record(self, collection: str, record_id: str) -> str:
        if collection == "users":
            return self.delete_user(record_id)
        records = [r for r in self.state[collection] if r.get("id") != record_id]
        return self.update_settings(collection, records)

    def copy_record(self, collection: str, record_id: str) -> str:
        """Append a copy of a record under a new id."""
        source = next(r for r in self.state[collection] if r.get("id") == record_id)
        duplicate = copy.deepcopy(source)
        duplicate["id"] = new_id()
        if "items" in duplicate:
            duplicate["items"] = clone_bom_items(duplicate["items"])
        if collection == "terms":
            duplicate["order"] = len(self.state["terms"]) + 1
        return self.update_settings(collection, self.state[collection] + [duplicate])

    def duplicate_bom_template(self, template_id: str) -> str:
        source = next(t for t in self.state["bom_templates"] if t.get("id") == template_id)
        duplicate = {
            "id": new_id(),
            "name": f"{source.get('name', '')} (Copy)",
            "items": clone_bom_items(source.get("items")),
        }
        return self.update_settings("bom_templates", self.state["bom_templates"] + [duplicate])

    def save_bom_as_template(self, name: str, items: list) -> str:
        """Store a quotation's BOM snapshot as a new reusable template."""
        if not (name or "").strip():
            raise ValidationError("Please enter a template name")
        template = {"id": new_id(), "name": name.strip(), "items": clone_bom_items(items)}
        return self.update_settings("bom_templates", self.state["bom_templates"] + [template])

    def upsert_user(self, values: dict) -> str:
        if not all((values.get(field) or "").strip() for field in ("name", "username", "password")):
            raise ValidationError("Please fill all required user fields")
        user = make_user(values)
        users = self.state["users"]
        if any(u.get("id") == user["id"] for u in users):
            users = [user if u.get("id") == user["id"] else u for u in users]
        else:
            users = users + [user]
        return self.update_settings("users", users)

    def delete_user(self, user_id: str) -> str:
        if len(self.state["users"]) <= 1:
            raise ValidationError("Cannot delete the last user")
        users = [u for u in self.state["users"] if u.get("id") != user_id]
        return self.update_settings("users", users)

    def import_records(self, collection: str, data: bytes, filename: str = "") -> int:
        """Append records parsed from an uploaded sheet; returns how many."""
        if collection not in RECORD_COLLECTIONS or collection == "users":
            raise ImportFormatError(f"Unsupported import target: {collection}")
        rows = parse_rows(data, filename)
        records = rows_to_records(collection, rows, self.state[collection])
        self.update_settings(collection, self.state[collection] + records)
        logger.info("Imported %d %s records from %s", len(records), collection, filename or "upload")
        return len(records)
