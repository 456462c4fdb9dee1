"""Timer package."""

from .engine import (
    TimerEngine,
    TimerState,
    TimerStatus,
    format_time,
    next_mode_after,
    AUTO_START_DELAY_MS,
    ROUNDS_PER_CYCLE,
)
from ..records import Mode, DEFAULT_DURATIONS

__all__ = [
    "TimerEngine",
    "TimerState",
    "TimerStatus",
    "Mode",
    "DEFAULT_DURATIONS",
    "format_time",
    "next_mode_after",
    "AUTO_START_DELAY_MS",
    "ROUNDS_PER_CYCLE",
]
