"""Day and week statistics derived from the session log.

Two different notions of "this week" live here on purpose:

* :func:`week_data` / :func:`week_rollup` bucket by the calendar date
  stored on each record (``today - 6`` … ``today``);
* :func:`week_stats` counts everything whose timestamp falls in the
  168 hours before ``now``.

The module-level functions are pure.  :class:`StatsAggregator` binds
them to a store and owns the day-rollover check.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from ..records import Mode, SessionRecord, date_key

log = logging.getLogger(__name__)

ROLLOVER_INTERVAL_MS = 60_000
WEEK_DAYS = 7
ROLLING_WINDOW = timedelta(hours=7 * 24)

_CSV_HEADER = ("date", "time", "mode", "duration_minutes", "completed")
_MODE_LABELS = {
    Mode.WORK: "Work",
    Mode.SHORT_BREAK: "Short break",
    Mode.LONG_BREAK: "Long break",
}


# ═══════════════════════════════════════════════════════════════════════════
#  RESULT TYPES
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class TodayStats:
    count: int = 0
    minutes: int = 0
    breaks: int = 0


@dataclass(frozen=True)
class WeekStats:
    count: int = 0
    minutes: int = 0


@dataclass(frozen=True)
class DayRollup:
    date: str
    label: str
    work_sessions: int = 0
    work_minutes: int = 0
    break_sessions: int = 0
    is_today: bool = False


@dataclass(frozen=True)
class WeekRollup:
    days: list[DayRollup] = field(default_factory=list)
    total: int = 0
    total_minutes: int = 0
    average: float = 0.0
    best: int = 0


@dataclass(frozen=True)
class DetailedReport:
    total_sessions: int = 0
    total_completed: int = 0
    today_completed: int = 0
    week_completed: int = 0
    average_per_day: float = 0.0
    best_day: str | None = None
    best_day_count: int = 0
    total_work_hours: int = 0


@dataclass(frozen=True)
class StatsSnapshot:
    today: TodayStats
    week: WeekStats
    week_rollup: WeekRollup


# ═══════════════════════════════════════════════════════════════════════════
#  HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _key(day: date | str) -> str:
    return day if isinstance(day, str) else date_key(day)


def _as_date(day: date | str) -> date:
    return date.fromisoformat(day) if isinstance(day, str) else day


def round_half_up(value: float, places: int = 1) -> float:
    """2.25 → 2.3 (not banker's 2.2)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def day_rolled_over(last_seen: date | str | None, today: date | str) -> bool:
    """True when a previous date is known and it is not *today*."""
    if not last_seen:
        return False
    return _key(last_seen) != _key(today)


# ═══════════════════════════════════════════════════════════════════════════
#  AGGREGATES
# ═══════════════════════════════════════════════════════════════════════════


def today_stats(sessions: Iterable[SessionRecord], today: date | str) -> TodayStats:
    """Completed work count and minutes, plus completed breaks, for *today*."""
    key = _key(today)
    count = minutes = breaks = 0
    for record in sessions:
        if record.calendar_date != key:
            continue
        if record.is_completed_work:
            count += 1
            minutes += record.duration_minutes
        elif record.is_completed_break:
            breaks += 1
    return TodayStats(count=count, minutes=minutes, breaks=breaks)


def week_stats(sessions: Iterable[SessionRecord], now: datetime) -> WeekStats:
    """Completed work in the 168 hours ending at *now*."""
    start = now - ROLLING_WINDOW
    count = minutes = 0
    for record in sessions:
        if record.is_completed_work and start <= record.timestamp <= now:
            count += 1
            minutes += record.duration_minutes
    return WeekStats(count=count, minutes=minutes)


def day_stats(sessions: Iterable[SessionRecord], day: date | str) -> tuple[int, int]:
    """``(count, minutes)`` of completed work stamped with *day*."""
    key = _key(day)
    count = minutes = 0
    for record in sessions:
        if record.calendar_date == key and record.is_completed_work:
            count += 1
            minutes += record.duration_minutes
    return count, minutes


def week_data(sessions: Iterable[SessionRecord], today: date | str) -> list[DayRollup]:
    """Seven rollups, oldest first, ending with *today*."""
    today = _as_date(today)
    work: dict[str, list[int]] = {}
    breaks: dict[str, int] = {}
    for record in sessions:
        if record.is_completed_work:
            bucket = work.setdefault(record.calendar_date, [0, 0])
            bucket[0] += 1
            bucket[1] += record.duration_minutes
        elif record.is_completed_break:
            breaks[record.calendar_date] = breaks.get(record.calendar_date, 0) + 1

    days: list[DayRollup] = []
    for offset in range(WEEK_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        key = date_key(day)
        count, minutes = work.get(key, (0, 0))
        days.append(DayRollup(
            date=key,
            label=day.strftime("%a"),
            work_sessions=count,
            work_minutes=minutes,
            break_sessions=breaks.get(key, 0),
            is_today=offset == 0,
        ))
    return days


def week_rollup(sessions: Iterable[SessionRecord], today: date | str) -> WeekRollup:
    days = week_data(sessions, today)
    total = sum(d.work_sessions for d in days)
    return WeekRollup(
        days=days,
        total=total,
        total_minutes=sum(d.work_minutes for d in days),
        average=round_half_up(total / WEEK_DAYS),
        best=max(d.work_sessions for d in days),
    )


def detailed_report(
    sessions: Iterable[SessionRecord],
    today: date | str,
    now: datetime,
) -> DetailedReport:
    """All-time totals, per-active-day average and the most productive day.

    Active days are the distinct calendar dates of any record.  Ties for
    the best day go to the earliest date.
    """
    records = list(sessions)
    per_day: dict[str, int] = {}
    for record in records:
        if record.is_completed_work:
            per_day[record.calendar_date] = per_day.get(record.calendar_date, 0) + 1
    total_completed = sum(per_day.values())

    active_days = {r.calendar_date for r in records}
    average = (
        round_half_up(total_completed / len(active_days)) if active_days else 0.0
    )

    best_day = None
    best_count = 0
    for day in sorted(per_day):
        if per_day[day] > best_count:
            best_day, best_count = day, per_day[day]

    today_totals = today_stats(records, today)
    return DetailedReport(
        total_sessions=len(records),
        total_completed=total_completed,
        today_completed=today_totals.count,
        week_completed=week_stats(records, now).count,
        average_per_day=average,
        best_day=best_day,
        best_day_count=best_count,
        total_work_hours=today_totals.minutes // 60,
    )


def export_csv(sessions: Iterable[SessionRecord]) -> str:
    """The log as CSV, one row per record, header first."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(_CSV_HEADER)
    for record in sessions:
        writer.writerow((
            record.timestamp.date().isoformat(),
            record.timestamp.strftime("%H:%M:%S"),
            _MODE_LABELS[record.mode],
            record.duration_minutes,
            "yes" if record.completed else "no",
        ))
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  AGGREGATOR
# ═══════════════════════════════════════════════════════════════════════════


class StatsAggregator:
    """Reads the log from *store* and turns it into rollups.

    Holds no copy of the log; every call reads it fresh.
    """

    def __init__(self, store) -> None:
        self._store = store

    def sessions(self) -> list[SessionRecord]:
        return self._store.read_all_sessions()

    def refresh(
        self,
        today: date | None = None,
        now: datetime | None = None,
    ) -> StatsSnapshot:
        now = now or datetime.now()
        today = today or now.date()
        sessions = self.sessions()
        return StatsSnapshot(
            today=today_stats(sessions, today),
            week=week_stats(sessions, now),
            week_rollup=week_rollup(sessions, today),
        )

    def report(
        self,
        today: date | None = None,
        now: datetime | None = None,
    ) -> DetailedReport:
        now = now or datetime.now()
        return detailed_report(self.sessions(), today or now.date(), now)

    def export_csv(self) -> str:
        return export_csv(self.sessions())

    def check_day_rollover(self, today: date | str | None = None) -> bool:
        """Zero the store's "today" counters once the date has moved on.

        The log is never touched.  The stored date is always advanced to
        *today*.
        """
        today_key = _key(today or date.today())
        last_seen = self._store.last_seen_date()
        rolled = day_rolled_over(last_seen, today_key)
        if rolled:
            self._store.reset_today_counters()
            log.info("New day %s (was %s), today's counters reset", today_key, last_seen)
        self._store.set_last_seen_date(today_key)
        return rolled
