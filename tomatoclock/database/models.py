"""SQLAlchemy ORM models for TomatoClock."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class SessionRow(Base):
    """One entry of the session log (work or break).

    Rows are only ever appended; ``id`` order is insertion order.
    """

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.now)
    mode = Column(String(20), nullable=False, default="work")  # work | short_break | long_break
    duration_minutes = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=True)
    calendar_date = Column(String(10), nullable=False)  # YYYY-MM-DD, local day at creation

    def __repr__(self) -> str:
        return (
            f"<SessionRow id={self.id} mode={self.mode} "
            f"date={self.calendar_date} completed={self.completed}>"
        )


class Counters(Base):
    """Single-row table of running totals kept next to the log."""

    __tablename__ = "counters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    total_count = Column(Integer, nullable=False, default=0)
    today_count = Column(Integer, nullable=False, default=0)
    today_minutes = Column(Integer, nullable=False, default=0)
    today_breaks = Column(Integer, nullable=False, default=0)
    last_seen_date = Column(String(10), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Counters total={self.total_count} today={self.today_count} "
            f"breaks={self.today_breaks} last_seen={self.last_seen_date}>"
        )
