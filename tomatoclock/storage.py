"""Session log and counters over SQLite, settings over JSON.

:class:`SessionStore` is the only thing the timer and the stats talk to
for persistence.  Database errors are logged and reported through the
return value; they never reach the caller as exceptions.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from .database.db import get_session
from .database.models import Counters, SessionRow
from .records import Mode, SessionRecord, date_key
from .settings import (
    Settings, load_settings, save_settings, settings_from_dict, validate_settings,
)

log = logging.getLogger(__name__)

EXPORT_VERSION = 1


def _row_to_record(row: SessionRow) -> SessionRecord:
    return SessionRecord(
        timestamp=row.timestamp,
        mode=Mode(row.mode),
        duration_minutes=row.duration_minutes,
        completed=row.completed,
        calendar_date=row.calendar_date,
    )


def _record_to_row(record: SessionRecord) -> SessionRow:
    return SessionRow(
        timestamp=record.timestamp,
        mode=record.mode.value,
        duration_minutes=record.duration_minutes,
        completed=record.completed,
        calendar_date=record.calendar_date,
    )


def _counters(db) -> Counters:
    counters = db.query(Counters).first()
    if counters is None:
        counters = Counters(
            total_count=0, today_count=0, today_minutes=0, today_breaks=0,
        )
        db.add(counters)
    return counters


def _bump(counters: Counters, record: SessionRecord) -> None:
    if record.is_completed_work:
        counters.total_count += 1
        counters.today_count += 1
        counters.today_minutes += record.duration_minutes
    elif record.is_completed_break:
        counters.today_breaks += 1


def _zero_today(counters: Counters) -> None:
    counters.today_count = 0
    counters.today_minutes = 0
    counters.today_breaks = 0


class SessionStore:
    """Persistence collaborator for the engine and the stats."""

    def __init__(self, settings_path: Path | None = None) -> None:
        self._settings_path = settings_path

    # ── session log ───────────────────────────────────────────────────

    def append_session(self, record: SessionRecord) -> bool:
        """Append *record* to the log and update the counters."""
        try:
            with get_session() as db:
                db.add(_record_to_row(record))
                _bump(_counters(db), record)
        except SQLAlchemyError:
            log.exception("Could not save session %s", record)
            return False
        return True

    def read_all_sessions(self) -> list[SessionRecord]:
        """The whole log in insertion order."""
        try:
            with get_session() as db:
                rows = db.query(SessionRow).order_by(SessionRow.id).all()
                return [_row_to_record(row) for row in rows]
        except SQLAlchemyError:
            log.exception("Could not read sessions")
            return []

    def clear_history(self) -> bool:
        """Drop every session and zero all counters."""
        try:
            with get_session() as db:
                db.query(SessionRow).delete()
                counters = _counters(db)
                counters.total_count = 0
                _zero_today(counters)
        except SQLAlchemyError:
            log.exception("Could not clear history")
            return False
        log.info("Session history cleared")
        return True

    # ── counters ──────────────────────────────────────────────────────

    def counters(self) -> dict:
        try:
            with get_session() as db:
                c = _counters(db)
                return {
                    "total_count": c.total_count,
                    "today_count": c.today_count,
                    "today_minutes": c.today_minutes,
                    "today_breaks": c.today_breaks,
                }
        except SQLAlchemyError:
            log.exception("Could not read counters")
            return {
                "total_count": 0,
                "today_count": 0,
                "today_minutes": 0,
                "today_breaks": 0,
            }

    def reset_today_counters(self) -> bool:
        try:
            with get_session() as db:
                _zero_today(_counters(db))
        except SQLAlchemyError:
            log.exception("Could not reset today's counters")
            return False
        return True

    def last_seen_date(self) -> str | None:
        try:
            with get_session() as db:
                return _counters(db).last_seen_date
        except SQLAlchemyError:
            log.exception("Could not read last seen date")
            return None

    def set_last_seen_date(self, day: date | str) -> bool:
        value = day if isinstance(day, str) else date_key(day)
        try:
            with get_session() as db:
                _counters(db).last_seen_date = value
        except SQLAlchemyError:
            log.exception("Could not store last seen date")
            return False
        return True

    # ── settings ──────────────────────────────────────────────────────

    def read_settings(self) -> Settings:
        return load_settings(self._settings_path)

    def write_settings(self, settings: Settings) -> bool:
        try:
            save_settings(settings, self._settings_path)
        except OSError:
            log.exception("Could not write settings")
            return False
        return True

    # ── export / import ───────────────────────────────────────────────

    def export_json(self) -> str:
        """Settings, log and counters as one pretty-printed JSON document."""
        data = {
            "version": EXPORT_VERSION,
            "exported_at": datetime.now().isoformat(),
            "settings": asdict(self.read_settings()),
            "sessions": [r.to_dict() for r in self.read_all_sessions()],
            "counters": self.counters(),
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def import_json(self, text: str) -> bool:
        """Replace settings, log and counters with an :meth:`export_json` dump.

        Returns False, leaving everything untouched, if *text* cannot be
        parsed or carries out-of-range settings.
        """
        try:
            data = json.loads(text)
            settings = settings_from_dict(data.get("settings", {}))
            validate_settings(settings)
            records = [SessionRecord.from_dict(s) for s in data.get("sessions", [])]
            counters = dict(data.get("counters", {}))
        except (ValueError, TypeError, KeyError, AttributeError):
            log.exception("Import failed: malformed data")
            return False

        try:
            with get_session() as db:
                db.query(SessionRow).delete()
                db.add_all(_record_to_row(r) for r in records)
                c = _counters(db)
                c.total_count = int(counters.get("total_count", 0))
                c.today_count = int(counters.get("today_count", 0))
                c.today_minutes = int(counters.get("today_minutes", 0))
                c.today_breaks = int(counters.get("today_breaks", 0))
        except (SQLAlchemyError, ValueError, TypeError):
            log.exception("Import failed while writing")
            return False

        if not self.write_settings(settings):
            return False
        log.info("Imported %d sessions", len(records))
        return True
