"""Zen Store Flask application."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Optional

import click
from flask import Flask
from sqlalchemy import text

from .common.config import AppConfig, load_env
from .common.db import session as db
from .common.services import CatalogService, ImagePositionManager, LaptopService, OrderService
from .common.services.logging import configure_logging
from .config import StoreConfig
from .routes import admin, api, user
from .services import BlobStorage, ContentGenerator, Mailer


def create_app(
    config: Optional[StoreConfig] = None,
    *,
    app_config: Optional[AppConfig] = None,
    session_factory=None,
) -> Flask:
    config = config or StoreConfig.load()
    app_config = app_config or load_env()
    configure_logging(app_config.log_level)

    if session_factory is None:
        db.init_engine(app_config.database_url)
        db.create_all()
        session_factory = db.get_session

    app = Flask(
        __name__,
        template_folder=str(Path(__file__).parent / "templates"),
        static_folder=str(Path(__file__).parent / "static"),
    )
    app.config["SECRET_KEY"] = config.secret_key
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=1)
    app.config["MAX_CONTENT_LENGTH"] = 64 * 1024 * 1024
    app.config["ZENSTORE_CONFIG"] = config
    app.config["ZENSTORE_APP_CONFIG"] = app_config

    storage = BlobStorage(config.upload_dir, config.upload_base_url)
    catalog = CatalogService(session_factory, app_env=app_config.app_env)
    positions = ImagePositionManager(session_factory)
    components = {
        "storage": storage,
        "catalog": catalog,
        "positions": positions,
        "orders": OrderService(session_factory),
        "mailer": Mailer(config.resend_api_key, config.mail_from, shop_name=config.shop_name),
        "laptops": LaptopService(
            storage,
            session_factory=session_factory,
            positions=positions,
            catalog=catalog,
            content_generator=ContentGenerator(config.gemini_api_key, config.gemini_llm),
        ),
    }
    app.extensions["zenstore_components"] = components

    @app.context_processor
    def _inject_site():
        # settings can be changed at runtime, read them per request
        return {"shop_name": config.shop_name, "currency": app.config["ZENSTORE_APP_CONFIG"].currency}

    app.register_blueprint(user.user_bp)
    app.register_blueprint(admin.admin_bp)
    app.register_blueprint(api.api_bp)
    _register_cli(app)

    return app


def _register_cli(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db_command():
        """Create the database tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("reset-sequences")
    @click.option("--minimum", default=100, show_default=True, help="Lowest id the next row may get.")
    def reset_sequences_command(minimum: int):
        """Move the id sequences past ``minimum`` (PostgreSQL only)."""
        if db.engine.dialect.name != "postgresql":
            click.echo(f"Sequences are not used by {db.engine.dialect.name}; nothing to do.")
            return
        with db.engine.begin() as conn:
            for table in ("laptop", "image", "order"):
                current = conn.execute(text(f'SELECT COALESCE(MAX(id), 0) FROM "{table}"')).scalar()
                next_id = max(minimum, int(current) + 1)
                conn.execute(
                    text(f"SELECT setval(pg_get_serial_sequence('\"{table}\"', 'id'), :next_id, false)"),
                    {"next_id": next_id},
                )
                click.echo(f"{table}: next id {next_id}")


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=False)


if __name__ == "__main__":
    main()
