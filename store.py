"""JSON file store for settings and quotations."""

import json
import logging
import os
import tempfile

from config import Config
from constants import SETTINGS_KEYS
from catalog import default_state, make_pricing_config, make_user
from builder import next_sequence
from exceptions import PersistenceError

logger = logging.getLogger(__name__)

_PRICED_COLLECTIONS = ("product_pricing",)


def _normalise(key: str, value):
    """Fill defaults inside a loaded collection."""
    if key in _PRICED_COLLECTIONS:
        return [{**record, **make_pricing_config(record)} for record in value]
    if key == "users":
        return [make_user(user) for user in value]
    if key in ("company", "bank"):
        defaults = default_state()[key]
        return {**defaults, **value}
    return value


class JsonStore:
    """Keeps settings and quotations as two JSON documents in a directory."""

    def __init__(self, data_dir: str = None):
        self.data_dir = data_dir or Config.DATA_DIR
        self.settings_path = os.path.join(self.data_dir, Config.SETTINGS_FILE)
        self.quotations_path = os.path.join(self.data_dir, Config.QUOTATIONS_FILE)

    def _read(self, path: str, fallback):
        if not os.path.exists(path):
            return fallback
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write(self, path: str, payload) -> None:
        os.makedirs(self.data_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def load(self) -> dict:
        """Load the full application state, never raising.

        Missing (or null) collections take their built-in defaults while a
        stored empty list stays empty. Any read failure yields the
        built-in default state.
        """
        try:
            state = default_state()
            settings = self._read(self.settings_path, {}) or {}
            for key in SETTINGS_KEYS:
                if settings.get(key) is not None:
                    state[key] = _normalise(key, settings[key])

            quotations = self._read(self.quotations_path, []) or []
            for quotation in quotations:
                quotation["pricing"] = make_pricing_config(quotation.get("pricing"))
                quotation.setdefault("bom_items", [])
            state["quotations"] = quotations
            state["next_id"] = next_sequence(quotations)
            logger.info(
                "Loaded %d quotations from %s (next id %d)",
                len(quotations), self.data_dir, state["next_id"]
            )
            return state
        except Exception:
            logger.exception("Failed to load data from %s, using defaults", self.data_dir)
            return default_state()

    def save_settings(self, state: dict) -> bool:
        """Persist every settings collection; quotations are not touched."""
        payload = {key: state.get(key) for key in SETTINGS_KEYS}
        try:
            self._write(self.settings_path, payload)
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save settings to %s", self.settings_path)
            return False
        return True

    def _save_quotations(self, quotations: list) -> None:
        try:
            self._write(self.quotations_path, quotations)
        except (OSError, TypeError, ValueError) as exc:
            logger.exception("Failed to save quotations to %s", self.quotations_path)
            raise PersistenceError(f"Could not save quotations: {exc}") from exc

    def _load_quotations(self) -> list:
        try:
            return self._read(self.quotations_path, []) or []
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Could not read quotations: {exc}") from exc

    def save_quotation(self, quotation: dict) -> None:
        """Insert or replace a quotation by id."""
        quotations = self._load_quotations()
        for index, existing in enumerate(quotations):
            if existing.get("id") == quotation["id"]:
                quotations[index] = quotation
                break
        else:
            quotations.append(quotation)
        self._save_quotations(quotations)
        logger.info("Saved quotation %s", quotation["id"])

    def delete_quotation(self, quotation_id: str) -> None:
        quotations = [q for q in self._load_quotations() if q.get("id") != quotation_id]
        self._save_quotations(quotations)
        logger.info("Deleted quotation %s", quotation_id)
