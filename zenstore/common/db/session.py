from contextlib import contextmanager
import os
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/zenstore.db")


def _ensure_sqlite_parent(url: str) -> None:
    # Ensure sqlite file parent directory exists to avoid 'unable to open database file'
    if url.startswith("sqlite:///") and ":memory:" not in url:
        db_path = url.split("sqlite:///")[-1]
        try:
            Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            # real error will surface on connect if still invalid
            pass


def _build_engine(url: str, **kwargs) -> Engine:
    _ensure_sqlite_parent(url)
    return create_engine(url, future=True, **kwargs)


engine = _build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


def init_engine(url: Optional[str] = None, **kwargs) -> Engine:
    """Rebind the module session factory to a new database URL."""
    global engine
    engine = _build_engine(url or DATABASE_URL, **kwargs)
    SessionLocal.configure(bind=engine)
    return engine


def create_all(bind: Optional[Engine] = None) -> None:
    from ..models import Base

    Base.metadata.create_all(bind or engine)


@contextmanager
def get_session():
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
