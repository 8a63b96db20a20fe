"""Runtime settings shared by the web layer and the services.

Values come from the environment. ``$ZENSTORE_DATA_DIR/settings.json``,
written from the admin settings page, overrides the keys that can change
while the app is running.
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

from .utils.validators import is_valid_url


logger = logging.getLogger(__name__)

HOT_KEYS = ("CURRENCY", "STORE_BASE_URL")
RESTART_KEYS = frozenset({"DATABASE_URL", "LOG_LEVEL", "APP_ENV", "ZENSTORE_SECRET_KEY", "GEMINI_API_KEY", "RESEND_API_KEY"})


@dataclass(frozen=True)
class AppConfig:
    database_url: str
    log_level: str
    store_base_url: str
    currency: str
    app_env: str

    def get_product_url(self, laptop_id: int) -> str:
        return f"{self.store_base_url.rstrip('/')}/products/{laptop_id}"

    def hot_settings(self) -> Dict[str, str]:
        return {"CURRENCY": self.currency, "STORE_BASE_URL": self.store_base_url}


def validate_currency(value: Optional[str]) -> str:
    code = (value or "MNT").strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValueError(f"invalid currency code {value!r}: expected 3 letters (ISO 4217)")
    return code


def settings_path(data_dir: Optional[Path] = None) -> Path:
    return Path(data_dir or os.getenv("ZENSTORE_DATA_DIR", "data")) / "settings.json"


def read_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_path()
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning(f"Ignoring unreadable settings file {path}: {exc}")
        return {}
    return payload if isinstance(payload, dict) else {}


def write_settings(updates: Mapping[str, Any], path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_path()
    merged = read_settings(path)
    merged.update(updates)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(merged, indent=2, ensure_ascii=False), encoding="utf-8")
    return merged


def load_env() -> AppConfig:
    saved = read_settings()
    return AppConfig(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/zenstore.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        store_base_url=(saved.get("STORE_BASE_URL") or os.getenv("STORE_BASE_URL") or "http://127.0.0.1:5000").rstrip("/"),
        currency=validate_currency(saved.get("CURRENCY") or os.getenv("CURRENCY")),
        app_env=(os.getenv("APP_ENV") or "production").strip().lower(),
    )


def refresh_non_sensitive(overrides: Mapping[str, Any], current: AppConfig) -> AppConfig:
    """Apply the hot keys in ``overrides``; every other key is ignored."""
    updates = {k: str(v).strip() for k, v in (overrides or {}).items() if k in HOT_KEYS and v}
    if "STORE_BASE_URL" in updates and not is_valid_url(updates["STORE_BASE_URL"]):
        raise ValueError(f"invalid store URL: {updates['STORE_BASE_URL']!r}")
    return replace(
        current,
        currency=validate_currency(updates.get("CURRENCY", current.currency)),
        store_base_url=(updates.get("STORE_BASE_URL") or current.store_base_url).rstrip("/"),
    )


def requires_restart(changed_keys: Iterable[str]) -> bool:
    return any(k in RESTART_KEYS for k in changed_keys or ())
