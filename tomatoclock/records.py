"""Plain value types shared by the timer, the stats and the store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from .errors import InvalidModeError


class Mode(Enum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def is_break(self) -> bool:
        return self is not Mode.WORK

    @classmethod
    def coerce(cls, value: Mode | str) -> Mode:
        """Return the Mode for *value* or raise :class:`InvalidModeError`."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        raise InvalidModeError(value)


# Default durations in minutes.
DEFAULT_DURATIONS: dict[Mode, int] = {
    Mode.WORK: 25,
    Mode.SHORT_BREAK: 5,
    Mode.LONG_BREAK: 15,
}


def date_key(day: date) -> str:
    """Calendar-date key used in the log: ``YYYY-MM-DD``."""
    return day.isoformat()


@dataclass(frozen=True)
class SessionRecord:
    """One finished (or abandoned) interval.

    ``calendar_date`` is fixed when the record is created, so a session
    stays on the day it was completed no matter when it is read back.
    """

    timestamp: datetime
    mode: Mode
    duration_minutes: int
    completed: bool
    calendar_date: str

    @classmethod
    def create(
        cls,
        mode: Mode,
        duration_minutes: int,
        completed: bool = True,
        now: datetime | None = None,
    ) -> SessionRecord:
        now = now or datetime.now()
        return cls(
            timestamp=now,
            mode=mode,
            duration_minutes=duration_minutes,
            completed=completed,
            calendar_date=date_key(now.date()),
        )

    @property
    def is_completed_work(self) -> bool:
        return self.completed and self.mode is Mode.WORK

    @property
    def is_completed_break(self) -> bool:
        return self.completed and self.mode.is_break

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "mode": self.mode.value,
            "duration_minutes": self.duration_minutes,
            "completed": self.completed,
            "calendar_date": self.calendar_date,
        }

    @classmethod
    def from_dict(cls, data: dict) -> SessionRecord:
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            mode=Mode.coerce(data["mode"]),
            duration_minutes=int(data["duration_minutes"]),
            completed=bool(data["completed"]),
            calendar_date=str(data["calendar_date"]),
        )
