"""Tests for the stats aggregation engine.

Covers:
- today_stats / day_stats calendar-day bucketing
- week_stats rolling 168-hour window
- week_data / week_rollup seven-day series and summary scalars
- detailed_report averages and best day
- half-up rounding
- day rollover against the store
- CSV export
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from tomatoclock.records import Mode, SessionRecord
from tomatoclock.stats.aggregator import (
    StatsAggregator,
    day_rolled_over,
    day_stats,
    detailed_report,
    export_csv,
    round_half_up,
    today_stats,
    week_data,
    week_rollup,
    week_stats,
)

from helpers import make_record


D = date(2024, 3, 15)  # a Friday
END_OF_D = datetime.combine(D, time(23, 59, 59))


@pytest.fixture
def week_log():
    """Completed work per day for D-6 … D: 1, 0, 2, 3, 0, 4, 5."""
    counts = [1, 0, 2, 3, 0, 4, 5]
    records = []
    for i, n in enumerate(counts):
        day = D - timedelta(days=6 - i)
        for k in range(n):
            records.append(make_record(day, at=time(9 + k, 0)))
    return records


# ═══════════════════════════════════════════════════════════════════════
#  TODAY
# ═══════════════════════════════════════════════════════════════════════


class TestTodayStats:

    def test_empty_log(self):
        stats = today_stats([], D)
        assert (stats.count, stats.minutes, stats.breaks) == (0, 0, 0)

    def test_counts_work_and_breaks(self):
        log = [
            make_record(D, Mode.WORK, 25),
            make_record(D, Mode.WORK, 30),
            make_record(D, Mode.SHORT_BREAK, 5),
            make_record(D, Mode.LONG_BREAK, 15),
        ]
        stats = today_stats(log, D)
        assert stats.count == 2
        assert stats.minutes == 55
        assert stats.breaks == 2

    def test_ignores_other_days(self):
        log = [
            make_record(D - timedelta(days=1)),
            make_record(D + timedelta(days=1)),
        ]
        assert today_stats(log, D).count == 0

    def test_ignores_incomplete_sessions(self):
        log = [
            make_record(D, Mode.WORK, completed=False),
            make_record(D, Mode.SHORT_BREAK, completed=False),
        ]
        stats = today_stats(log, D)
        assert (stats.count, stats.minutes, stats.breaks) == (0, 0, 0)

    def test_accepts_date_string(self):
        assert today_stats([make_record(D)], "2024-03-15").count == 1

    def test_uses_stored_calendar_date_not_timestamp(self):
        # Completed just before midnight, stamped with that day.
        record = SessionRecord(
            timestamp=datetime.combine(D + timedelta(days=1), time(0, 0, 30)),
            mode=Mode.WORK,
            duration_minutes=25,
            completed=True,
            calendar_date="2024-03-15",
        )
        assert today_stats([record], D).count == 1
        assert today_stats([record], D + timedelta(days=1)).count == 0

    def test_day_stats(self):
        log = [make_record(D, minutes=25), make_record(D, minutes=50),
               make_record(D, Mode.SHORT_BREAK, 5)]
        assert day_stats(log, D) == (2, 75)


# ═══════════════════════════════════════════════════════════════════════
#  ROLLING WEEK
# ═══════════════════════════════════════════════════════════════════════


class TestWeekStats:

    def test_counts_within_168_hours(self):
        now = datetime(2024, 3, 15, 12, 0)
        log = [
            SessionRecord.create(Mode.WORK, 25, now=now - timedelta(hours=1)),
            SessionRecord.create(Mode.WORK, 25, now=now - timedelta(hours=167)),
        ]
        stats = week_stats(log, now)
        assert stats.count == 2
        assert stats.minutes == 50

    def test_excludes_older_than_168_hours(self):
        now = datetime(2024, 3, 15, 12, 0)
        log = [SessionRecord.create(Mode.WORK, 25, now=now - timedelta(hours=168, seconds=1))]
        assert week_stats(log, now).count == 0

    def test_boundary_is_inclusive(self):
        now = datetime(2024, 3, 15, 12, 0)
        log = [SessionRecord.create(Mode.WORK, 25, now=now - timedelta(hours=168))]
        assert week_stats(log, now).count == 1

    def test_excludes_future_records(self):
        now = datetime(2024, 3, 15, 12, 0)
        log = [SessionRecord.create(Mode.WORK, 25, now=now + timedelta(minutes=1))]
        assert week_stats(log, now).count == 0

    def test_only_completed_work(self):
        now = datetime(2024, 3, 15, 12, 0)
        log = [
            SessionRecord.create(Mode.SHORT_BREAK, 5, now=now),
            SessionRecord.create(Mode.WORK, 25, completed=False, now=now),
        ]
        assert week_stats(log, now).count == 0

    def test_rolling_window_differs_from_calendar_week(self):
        # D-7 at 23:00 is outside seven calendar days but inside 168h of D 12:00.
        now = datetime.combine(D, time(12, 0))
        log = [make_record(D - timedelta(days=7), at=time(23, 0))]
        assert week_stats(log, now).count == 1
        assert sum(d.work_sessions for d in week_data(log, D)) == 0


# ═══════════════════════════════════════════════════════════════════════
#  SEVEN-DAY SERIES
# ═══════════════════════════════════════════════════════════════════════


class TestWeekData:

    def test_empty_log_gives_seven_zero_days(self):
        days = week_data([], D)
        assert len(days) == 7
        assert all(d.work_sessions == 0 for d in days)

    def test_chronological_order_ending_today(self):
        days = week_data([], D)
        assert [d.date for d in days] == [
            (D - timedelta(days=offset)).isoformat() for offset in range(6, -1, -1)
        ]
        assert days[-1].is_today is True
        assert not any(d.is_today for d in days[:6])

    def test_weekday_labels(self):
        days = week_data([], D)
        assert [d.label for d in days] == [
            (D - timedelta(days=offset)).strftime("%a") for offset in range(6, -1, -1)
        ]

    def test_counts_match_log(self, week_log):
        days = week_data(week_log, D)
        assert [d.work_sessions for d in days] == [1, 0, 2, 3, 0, 4, 5]
        assert [d.work_minutes for d in days] == [25, 0, 50, 75, 0, 100, 125]

    def test_rolling_count_matches_at_end_of_day(self, week_log):
        days = week_data(week_log, D)
        assert week_stats(week_log, END_OF_D).count == sum(
            d.work_sessions for d in days
        )

    def test_break_sessions_counted_separately(self):
        log = [make_record(D, Mode.SHORT_BREAK, 5), make_record(D, Mode.WORK)]
        today = week_data(log, D)[-1]
        assert today.work_sessions == 1
        assert today.break_sessions == 1

    def test_rollup_scalars(self, week_log):
        rollup = week_rollup(week_log, D)
        assert rollup.total == 15
        assert rollup.total_minutes == 375
        assert rollup.average == 2.1  # 15 / 7 = 2.142…
        assert rollup.best == 5
        assert len(rollup.days) == 7

    def test_accepts_iso_date_string(self, week_log):
        assert week_data(week_log, D.isoformat()) == week_data(week_log, D)
        assert week_rollup(week_log, "2024-03-15").total == 15

    def test_rollup_of_empty_log(self):
        rollup = week_rollup([], D)
        assert (rollup.total, rollup.average, rollup.best) == (0, 0.0, 0)


# ═══════════════════════════════════════════════════════════════════════
#  DETAILED REPORT
# ═══════════════════════════════════════════════════════════════════════


class TestDetailedReport:

    def test_empty_log(self):
        report = detailed_report([], D, END_OF_D)
        assert report.total_sessions == 0
        assert report.total_completed == 0
        assert report.average_per_day == 0.0
        assert report.best_day is None
        assert report.best_day_count == 0

    def test_totals_and_average(self, week_log):
        report = detailed_report(week_log, D, END_OF_D)
        assert report.total_sessions == 15
        assert report.total_completed == 15
        assert report.today_completed == 5
        assert report.week_completed == 15
        # 15 completed over 5 active days
        assert report.average_per_day == 3.0
        assert report.best_day == "2024-03-15"
        assert report.best_day_count == 5

    def test_break_only_days_count_as_active(self):
        log = [
            make_record(D, Mode.WORK),
            make_record(D - timedelta(days=1), Mode.SHORT_BREAK, 5),
            make_record(D - timedelta(days=2), Mode.SHORT_BREAK, 5),
        ]
        report = detailed_report(log, D, END_OF_D)
        assert report.average_per_day == 0.3  # 1 / 3

    def test_average_rounds_half_up(self):
        # 5 completed over 4 days = 1.25 → 1.3
        log = [make_record(D)] * 2 + [make_record(D - timedelta(days=1))] * 1 \
            + [make_record(D - timedelta(days=2))] * 1 \
            + [make_record(D - timedelta(days=3))] * 1
        assert detailed_report(log, D, END_OF_D).average_per_day == 1.3

    def test_best_day_tie_goes_to_earliest_date(self):
        later = D
        earlier = D - timedelta(days=3)
        log = [make_record(later), make_record(later),
               make_record(earlier), make_record(earlier)]
        report = detailed_report(log, D, END_OF_D)
        assert report.best_day == earlier.isoformat()
        assert report.best_day_count == 2

    def test_total_work_hours_from_today_minutes(self):
        log = [make_record(D, minutes=50)] * 3
        assert detailed_report(log, D, END_OF_D).total_work_hours == 2


class TestRoundHalfUp:
    @pytest.mark.parametrize("value,expected", [
        (0.05, 0.1),
        (0.25, 0.3),
        (2.25, 2.3),
        (2.24, 2.2),
        (3.0, 3.0),
        (15 / 7, 2.1),
    ])
    def test_values(self, value, expected):
        assert round_half_up(value) == expected


# ═══════════════════════════════════════════════════════════════════════
#  DAY ROLLOVER
# ═══════════════════════════════════════════════════════════════════════


class TestDayRollover:

    def test_pure_check(self):
        assert day_rolled_over("2024-01-01", "2024-01-02") is True
        assert day_rolled_over("2024-01-02", "2024-01-02") is False
        assert day_rolled_over(None, "2024-01-02") is False
        assert day_rolled_over(date(2024, 1, 1), date(2024, 1, 2)) is True

    def test_first_run_only_records_date(self, store):
        agg = StatsAggregator(store)
        assert agg.check_day_rollover("2024-01-01") is False
        assert store.last_seen_date() == "2024-01-01"

    def test_new_day_resets_today_counters(self, store):
        store.append_session(make_record(date(2024, 1, 1)))
        store.append_session(make_record(date(2024, 1, 1), Mode.SHORT_BREAK, 5))
        store.set_last_seen_date("2024-01-01")

        agg = StatsAggregator(store)
        assert agg.check_day_rollover("2024-01-02") is True

        counters = store.counters()
        assert counters["today_count"] == 0
        assert counters["today_minutes"] == 0
        assert counters["today_breaks"] == 0
        assert counters["total_count"] == 1
        assert store.last_seen_date() == "2024-01-02"

    def test_same_day_is_noop(self, store):
        store.set_last_seen_date("2024-01-02")
        agg = StatsAggregator(store)
        assert agg.check_day_rollover("2024-01-02") is False
        store.append_session(make_record(date(2024, 1, 2)))
        assert agg.check_day_rollover("2024-01-02") is False
        assert store.counters()["today_count"] == 1

    def test_rollover_keeps_the_log(self, store):
        store.append_session(make_record(date(2024, 1, 1)))
        store.set_last_seen_date("2024-01-01")
        StatsAggregator(store).check_day_rollover(date(2024, 1, 2))
        assert len(store.read_all_sessions()) == 1


# ═══════════════════════════════════════════════════════════════════════
#  AGGREGATOR OVER A STORE
# ═══════════════════════════════════════════════════════════════════════


class TestStatsAggregator:

    def test_refresh_reads_store(self, store, week_log):
        for record in week_log:
            store.append_session(record)
        snap = StatsAggregator(store).refresh(today=D, now=END_OF_D)
        assert snap.today.count == 5
        assert snap.week.count == 15
        assert snap.week_rollup.total == 15

    def test_refresh_sees_new_sessions(self, store):
        agg = StatsAggregator(store)
        assert agg.refresh(today=D, now=END_OF_D).today.count == 0
        store.append_session(make_record(D))
        assert agg.refresh(today=D, now=END_OF_D).today.count == 1

    def test_report(self, store, week_log):
        for record in week_log:
            store.append_session(record)
        report = StatsAggregator(store).report(today=D, now=END_OF_D)
        assert report.best_day == "2024-03-15"


# ═══════════════════════════════════════════════════════════════════════
#  CSV
# ═══════════════════════════════════════════════════════════════════════


class TestExportCsv:

    def test_header_only_for_empty_log(self):
        assert export_csv([]) == "date,time,mode,duration_minutes,completed\n"

    def test_rows(self):
        log = [
            make_record(D, Mode.WORK, 25, at=time(9, 5, 0)),
            make_record(D, Mode.LONG_BREAK, 15, completed=False, at=time(14, 0, 7)),
        ]
        lines = export_csv(log).splitlines()
        assert lines[1] == "2024-03-15,09:05:00,Work,25,yes"
        assert lines[2] == "2024-03-15,14:00:07,Long break,15,no"
