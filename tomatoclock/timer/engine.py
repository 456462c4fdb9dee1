"""Timer state machine for TomatoClock.

States
------
IDLE      Not running and not paused; full duration on the clock.
RUNNING   Counting down, one tick per second.
PAUSED    Frozen mid-session; ``start()`` picks up where it left off.

Transitions
-----------
IDLE → RUNNING              (start)
RUNNING → PAUSED            (pause)
PAUSED → RUNNING            (start)
Any → IDLE                  (reset / switch_mode)
RUNNING → IDLE, next mode   (clock reaches 0)

Auto-chain
----------
After a work session the next mode is a long break on every 4th
completed work session and a short break otherwise.  After any break the
next mode is work.  When the matching auto-start flag is set the next
session starts by itself after a one-second grace delay.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..log import ensure_excepthook
from ..notifications import NotificationKind
from ..records import DEFAULT_DURATIONS, Mode, SessionRecord

log = logging.getLogger(__name__)


# ── constants ─────────────────────────────────────────────────────────────

TICK_INTERVAL_MS = 1000
AUTO_START_DELAY_MS = 1000
ROUNDS_PER_CYCLE = 4
MIN_ADJUST_MINUTES = 1
MAX_ADJUST_MINUTES = 120

_COMPLETION_KIND: dict[Mode, NotificationKind] = {
    Mode.WORK: NotificationKind.WORK_COMPLETE,
    Mode.SHORT_BREAK: NotificationKind.SHORT_BREAK_COMPLETE,
    Mode.LONG_BREAK: NotificationKind.LONG_BREAK_COMPLETE,
}


class TimerStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class TimerState:
    """Read-only snapshot of the engine."""

    mode: Mode
    time_left: int
    total_seconds: int
    is_running: bool
    is_paused: bool
    completed_work_count: int

    @property
    def status(self) -> TimerStatus:
        if self.is_running:
            return TimerStatus.RUNNING
        if self.is_paused:
            return TimerStatus.PAUSED
        return TimerStatus.IDLE

    @property
    def progress(self) -> float:
        """Percent of the session elapsed, 0.0 → 100.0."""
        if self.total_seconds <= 0:
            return 0.0
        return (self.total_seconds - self.time_left) / self.total_seconds * 100


def format_time(seconds: int) -> str:
    """1500 → '25:00', 65 → '01:05'."""
    m, s = divmod(max(0, seconds), 60)
    return f"{m:02d}:{s:02d}"


def next_mode_after(mode: Mode, completed_work_count: int) -> Mode:
    """Where the cycle goes once *mode* finishes.

    *completed_work_count* is the count after the finished session has
    been counted.
    """
    if mode is Mode.WORK:
        if completed_work_count % ROUNDS_PER_CYCLE == 0:
            return Mode.LONG_BREAK
        return Mode.SHORT_BREAK
    return Mode.WORK


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Qt-based Pomodoro timer with work/break auto-chaining.

    The engine owns its countdown and cycle state.  Completed sessions
    go to the injected *store* (``append_session(record) -> bool``) and
    completion alerts to the injected *notifier*
    (``notify(kind, completed_work_count)``).  Either may be ``None``.

    Signals
    -------
    tick(time_left: int, total_seconds: int)
        Every second while running, and whenever the clock is reset or
        resized.
    completed(mode: Mode, completed_work_count: int)
        After a session runs out.
    mode_changed(mode: Mode)
        After every ``switch_mode``.
    status_changed(status: TimerStatus)
        After ``start`` and ``pause`` take effect.

    All state is updated before a signal is emitted, so slots always see
    a consistent engine.  A slot that raises is logged through the
    excepthook installed at construction and does not stop the engine.
    """

    tick = pyqtSignal(int, int)
    completed = pyqtSignal(object, int)
    mode_changed = pyqtSignal(object)
    status_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        store=None,
        notifier=None,
        durations: dict[Mode, int] | None = None,
        auto_start_breaks: bool = False,
        auto_start_pomodoros: bool = False,
    ) -> None:
        super().__init__(parent)
        ensure_excepthook()

        # ── collaborators ─────────────────────────────────────────────
        self._store = store
        self._notifier = notifier

        # ── configuration ─────────────────────────────────────────────
        self._durations: dict[Mode, int] = dict(DEFAULT_DURATIONS)
        if durations:
            self._durations.update(durations)
        self.auto_start_breaks: bool = auto_start_breaks
        self.auto_start_pomodoros: bool = auto_start_pomodoros

        # ── state ─────────────────────────────────────────────────────
        self._mode: Mode = Mode.WORK
        self._is_running: bool = False
        self._is_paused: bool = False
        self._completed_work_count: int = 0
        self._time_left: int = self._durations[Mode.WORK] * 60
        self._total_seconds: int = self._time_left

        # ── Qt timers ─────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_tick)

        self._auto_start_timer = QTimer(self)
        self._auto_start_timer.setSingleShot(True)
        self._auto_start_timer.setInterval(AUTO_START_DELAY_MS)
        self._auto_start_timer.timeout.connect(self._on_auto_start)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def time_left(self) -> int:
        """Seconds left on the clock."""
        return self._time_left

    @property
    def total_seconds(self) -> int:
        return self._total_seconds

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def status(self) -> TimerStatus:
        return self.snapshot().status

    @property
    def completed_work_count(self) -> int:
        return self._completed_work_count

    @property
    def progress(self) -> float:
        return self.snapshot().progress

    @property
    def auto_start_pending(self) -> bool:
        return self._auto_start_timer.isActive()

    def duration_for(self, mode: Mode) -> int:
        """Configured minutes for *mode*."""
        return self._durations[mode]

    def snapshot(self) -> TimerState:
        return TimerState(
            mode=self._mode,
            time_left=self._time_left,
            total_seconds=self._total_seconds,
            is_running=self._is_running,
            is_paused=self._is_paused,
            completed_work_count=self._completed_work_count,
        )

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start or resume the countdown.  No-op while running."""
        self._auto_start_timer.stop()
        if self._is_running:
            return
        self._is_running = True
        self._is_paused = False
        self._qt_timer.start()
        log.info("Timer started: %s", self._mode.value)
        self.status_changed.emit(TimerStatus.RUNNING)

    def pause(self) -> None:
        """Freeze the countdown.  No-op unless running."""
        self._auto_start_timer.stop()
        if not self._is_running:
            return
        self._qt_timer.stop()
        self._is_running = False
        self._is_paused = True
        log.info("Timer paused at %s", format_time(self._time_left))
        self.status_changed.emit(TimerStatus.PAUSED)

    def reset(self) -> None:
        """Back to IDLE with the full duration of the current mode."""
        self.pause()
        self._is_paused = False
        self._load_duration()
        log.info("Timer reset: %s", self._mode.value)
        self.tick.emit(self._time_left, self._total_seconds)

    def switch_mode(self, mode: Mode | str) -> None:
        """Enter *mode* in IDLE state.

        Raises :class:`InvalidModeError` (and changes nothing) if *mode*
        is not a known mode.
        """
        try:
            mode = Mode.coerce(mode)
        except ValueError:
            log.error("Invalid mode: %r", mode)
            raise

        self.pause()
        self._is_paused = False
        self._mode = mode
        self._load_duration()
        log.info("Switched to %s", mode.value)

        self.mode_changed.emit(mode)
        self.tick.emit(self._time_left, self._total_seconds)

    def set_duration(self, mode: Mode | str, minutes: int) -> None:
        """Change the duration table.

        An idle or paused clock showing *mode* is resized at once; a
        running one keeps its current session and the new value applies
        the next time *mode* is entered.
        """
        try:
            mode = Mode.coerce(mode)
        except ValueError:
            log.warning("Ignoring duration for invalid mode %r", mode)
            return
        self._durations[mode] = minutes
        if mode is self._mode and not self._is_running:
            self._load_duration()
            self.tick.emit(self._time_left, self._total_seconds)

    def adjust_active_duration(self, delta_minutes: int) -> None:
        """The ±1 / ±5 minute buttons.  Only while not running.

        The result is clamped to 1-120 minutes.
        """
        if self._is_running:
            return
        current = self._time_left // 60
        minutes = max(MIN_ADJUST_MINUTES, min(MAX_ADJUST_MINUTES, current + delta_minutes))
        self.set_duration(self._mode, minutes)

    def apply_settings(self, settings) -> None:
        """Push validated :class:`~tomatoclock.settings.Settings` in."""
        self.set_duration(Mode.WORK, settings.work_duration)
        self.set_duration(Mode.SHORT_BREAK, settings.short_break_duration)
        self.set_duration(Mode.LONG_BREAK, settings.long_break_duration)
        self.auto_start_breaks = settings.auto_start_breaks
        self.auto_start_pomodoros = settings.auto_start_pomodoros

    def reset_work_count(self) -> None:
        self._completed_work_count = 0

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _load_duration(self) -> None:
        self._time_left = self._durations[self._mode] * 60
        self._total_seconds = self._time_left

    def _on_tick(self) -> None:
        if self._time_left > 0:
            self._time_left -= 1
            self.tick.emit(self._time_left, self._total_seconds)
        if self._time_left == 0:
            self._finish_session()

    def _on_auto_start(self) -> None:
        log.debug("Auto-starting %s", self._mode.value)
        self.start()

    def _finish_session(self) -> None:
        self.pause()
        finished = self._mode

        # ── persist ───────────────────────────────────────────────────
        record = SessionRecord.create(finished, self._total_seconds // 60)
        self._persist(record)

        # ── count ─────────────────────────────────────────────────────
        if finished is Mode.WORK:
            self._completed_work_count += 1
        count = self._completed_work_count
        log.info("%s complete, pomodoros: %d", finished.value, count)

        # ── notify ────────────────────────────────────────────────────
        self.completed.emit(finished, count)
        self._notify(_COMPLETION_KIND[finished], count)

        # ── advance cycle ─────────────────────────────────────────────
        upcoming = next_mode_after(finished, count)
        self.switch_mode(upcoming)

        auto = (
            self.auto_start_breaks if upcoming.is_break
            else self.auto_start_pomodoros
        )
        if auto:
            self._auto_start_timer.start()

    def _persist(self, record: SessionRecord) -> None:
        if self._store is None:
            return
        try:
            if not self._store.append_session(record):
                log.warning("Session was not saved: %s", record)
        except Exception:
            log.exception("Saving session failed")

    def _notify(self, kind: NotificationKind, count: int) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify(kind, count)
        except Exception:
            log.exception("Completion notification failed")
