"""Database package."""

from .db import get_session, init_db, configure_engine
from .models import SessionRow, Counters

__all__ = ["get_session", "init_db", "configure_engine", "SessionRow", "Counters"]
