"""Stats package."""

from .aggregator import (
    StatsAggregator,
    StatsSnapshot,
    TodayStats,
    WeekStats,
    DayRollup,
    WeekRollup,
    DetailedReport,
    today_stats,
    week_stats,
    day_stats,
    week_data,
    week_rollup,
    detailed_report,
    export_csv,
    day_rolled_over,
    round_half_up,
    ROLLOVER_INTERVAL_MS,
)

__all__ = [
    "StatsAggregator",
    "StatsSnapshot",
    "TodayStats",
    "WeekStats",
    "DayRollup",
    "WeekRollup",
    "DetailedReport",
    "today_stats",
    "week_stats",
    "day_stats",
    "week_data",
    "week_rollup",
    "detailed_report",
    "export_csv",
    "day_rolled_over",
    "round_half_up",
    "ROLLOVER_INTERVAL_MS",
]
