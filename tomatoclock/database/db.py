"""SQLite engine, session factory and schema bootstrap.

The engine is built on first use from :data:`DB_PATH`; tests swap it
for an in-memory database with :func:`configure_engine`.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from ..settings import APP_SUPPORT_DIR
from .models import Base, Counters

log = logging.getLogger(__name__)

DB_PATH = APP_SUPPORT_DIR / "tomatoclock.db"

_engine: Engine | None = None
_factory: sessionmaker | None = None


def _build(url: str) -> Engine:
    return create_engine(
        url,
        connect_args={"check_same_thread": False},
        echo=False,
    )


def _session_factory() -> sessionmaker:
    global _engine, _factory
    if _engine is None:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        _engine = _build(f"sqlite:///{DB_PATH}")
    if _factory is None:
        _factory = sessionmaker(bind=_engine, expire_on_commit=False)
    return _factory


def configure_engine(url: str) -> None:
    """Point all later sessions at *url* (``sqlite:///:memory:`` in tests)."""
    global _engine, _factory
    _engine = _build(url)
    _factory = None


def init_db() -> None:
    """Create missing tables and make sure the counters row exists."""
    factory = _session_factory()
    Base.metadata.create_all(_engine)
    with factory.begin() as session:
        if session.query(Counters).first() is None:
            session.add(Counters())
            log.info("Database initialised at %s", _engine.url)


@contextmanager
def get_session():
    """Session scope: commit when the block exits cleanly, else roll back."""
    session: Session = _session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
