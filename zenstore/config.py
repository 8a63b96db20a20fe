"""Zen Store application settings."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


@dataclass
class StoreConfig:
    """Settings for the storefront, the admin console and external services."""

    secret_key: str
    admin_username: str
    admin_password: str
    app_root: Path
    data_dir: Path
    upload_base_url: str
    gemini_api_key: Optional[str] = None
    gemini_llm: str = "gemini-2.5-flash"
    resend_api_key: Optional[str] = None
    mail_from: Optional[str] = None
    shop_name: str = "Zen Online Shop"

    @property
    def upload_dir(self) -> Path:
        return self.app_root / "static" / "uploads"

    @property
    def admin_credentials_file(self) -> Path:
        return self.data_dir / "admin.json"

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> "StoreConfig":
        """Build settings from the environment (and .env), creating data dirs."""

        load_dotenv()
        app_root = Path(__file__).resolve().parent
        data_dir = Path(data_dir or os.environ.get("ZENSTORE_DATA_DIR", "data")).resolve()

        admin_username = os.environ.get("ADMIN_USERNAME", "admin")
        admin_password = os.environ.get("ADMIN_PASSWORD", "admin")

        config = cls(
            secret_key=os.environ.get("ZENSTORE_SECRET_KEY", "zenstore-dev-secret"),
            admin_username=admin_username,
            admin_password=admin_password,
            app_root=app_root,
            data_dir=data_dir,
            upload_base_url=os.environ.get("UPLOAD_BASE_URL", "/static/uploads"),
            gemini_api_key=os.environ.get("GEMINI_API_KEY") or None,
            gemini_llm=os.environ.get("GEMINI_LLM", "gemini-2.5-flash"),
            resend_api_key=os.environ.get("RESEND_API_KEY") or None,
            mail_from=os.environ.get("MAIL_FROM") or None,
            shop_name=os.environ.get("SHOP_NAME", "Zen Online Shop"),
        )

        config.data_dir.mkdir(parents=True, exist_ok=True)
        config.upload_dir.mkdir(parents=True, exist_ok=True)

        # admin.json (written by the change-password form) wins over the environment
        if config.admin_credentials_file.exists():
            try:
                admin_data = json.loads(config.admin_credentials_file.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning(f"Failed to read {config.admin_credentials_file}: {exc}")
            else:
                if isinstance(admin_data, dict):
                    config.admin_username = admin_data.get("username", admin_username)
                    config.admin_password = admin_data.get("password", admin_password)
                    logger.info(f"Admin credentials loaded from {config.admin_credentials_file}")

        return config

    def save_admin_password(self, new_password: str) -> None:
        self.admin_credentials_file.write_text(
            json.dumps({"username": self.admin_username, "password": new_password}, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        self.admin_password = new_password
