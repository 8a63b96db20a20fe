"""Shared test fixtures for Zen Store."""

import os
from contextlib import contextmanager
from datetime import datetime, timedelta
from io import BytesIO

import pytest

# keep the module-level engine in common.db.session off the filesystem
os.environ.setdefault("DATABASE_URL", "sqlite://")

from PIL import Image as PILImage
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from werkzeug.datastructures import FileStorage

from zenstore.app import create_app
from zenstore.common.config import AppConfig
from zenstore.common.models import Base, Image, Laptop
from zenstore.config import StoreConfig
from zenstore.services import BlobStorage


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_maker(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


@pytest.fixture
def session_factory(session_maker):
    """Same commit/rollback contract as zenstore.common.db.session.get_session."""

    @contextmanager
    def factory():
        session = session_maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


@pytest.fixture
def make_laptop(session_factory):
    """Insert a laptop with ``positions`` images; returns (laptop_id, [image_ids])."""

    counter = {"n": 0}

    def _make(positions=(0, 1, 2), *, published=True, title=None, price=2_500_000, days_ago=0):
        counter["n"] += 1
        with session_factory() as session:
            laptop = Laptop(
                title=title or f"ThinkPad X{counter['n']}",
                description="Business laptop with a great keyboard.",
                specs=["14 inch", "16GB RAM"],
                price=price,
                original_price=price * 1.1,
                published=published,
                date_published=datetime(2025, 1, 1) - timedelta(days=days_ago),
            )
            session.add(laptop)
            session.flush()
            ids = []
            for pos in positions:
                image = Image(url=f"https://cdn.test/{laptop.id}/{pos}.jpg", alt=None, position=pos, laptop_id=laptop.id)
                session.add(image)
                session.flush()
                ids.append(image.id)
            return laptop.id, ids

    return _make


def png_bytes(size=(4, 4), color=(200, 30, 30)) -> bytes:
    buf = BytesIO()
    PILImage.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def upload():
    def _upload(filename="photo.png", data=None, content_type="image/png"):
        return FileStorage(stream=BytesIO(png_bytes() if data is None else data), filename=filename, content_type=content_type)

    return _upload


@pytest.fixture
def storage(tmp_path):
    return BlobStorage(tmp_path / "uploads", "/static/uploads")


@pytest.fixture
def store_config(tmp_path):
    return StoreConfig(
        secret_key="test-secret",
        admin_username="admin",
        admin_password="s3cret",
        app_root=tmp_path,
        data_dir=tmp_path / "data",
        upload_base_url="/static/uploads",
        resend_api_key="re_test",
        mail_from="shop@zen.test",
    )


@pytest.fixture
def app(store_config, session_factory):
    store_config.data_dir.mkdir(parents=True, exist_ok=True)
    app_config = AppConfig(
        database_url="sqlite://",
        log_level="INFO",
        store_base_url="http://zen.test",
        currency="MNT",
        app_env="development",
    )
    application = create_app(store_config, app_config=app_config, session_factory=session_factory)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    c = app.test_client()
    with c.session_transaction() as sess:
        sess["zenstore_admin"] = True
    return c


@pytest.fixture
def png():
    return png_bytes()
