"""Tray application for TomatoClock.

Owns one of each collaborator and wires them together:

    TimerEngine ──append_session──▶ SessionStore ◀──read── StatsAggregator
         │                                                     │
         └──notify──▶ Notifier                tray tooltip ◀───┘
"""

from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import QObject, QRectF, Qt, QTimer
from PyQt6.QtGui import QColor, QIcon, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import QMenu, QSystemTrayIcon

from .audio.sounds import SoundManager
from .errors import SettingsError
from .notifications import Notifier
from .records import Mode
from .settings import Settings, validate_settings
from .stats.aggregator import ROLLOVER_INTERVAL_MS, StatsAggregator, StatsSnapshot
from .storage import SessionStore
from .timer.engine import TimerEngine, TimerStatus, format_time

log = logging.getLogger(__name__)

_MODE_TEXT = {
    Mode.WORK: "\U0001f345 Working",
    Mode.SHORT_BREAK: "☕ Short break",
    Mode.LONG_BREAK: "\U0001f31f Long break",
}

_MODE_COLOUR = {
    Mode.WORK: QColor("#E74C3C"),
    Mode.SHORT_BREAK: QColor("#27AE60"),
    Mode.LONG_BREAK: QColor("#2980B9"),
}


# ── tray icon ─────────────────────────────────────────────────────────────

ICON_PX = 64  # rendered at 2x, shown at 32 pt


def _make_tray_icon(mode: Mode, status: TimerStatus, progress: float = 0.0) -> QIcon:
    """Ring in the mode colour, filled as a pie by *progress* (0-100).

    A paused clock gets two bars over the pie.
    """
    pixmap = QPixmap(ICON_PX, ICON_PX)
    pixmap.fill(Qt.GlobalColor.transparent)
    colour = _MODE_COLOUR[mode]
    bounds = QRectF(6, 6, ICON_PX - 12, ICON_PX - 12)

    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    painter.setPen(QPen(colour, 5))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawEllipse(bounds)

    if status != TimerStatus.IDLE:
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(colour)
        # Qt angles are in 1/16 degree, counter-clockwise from 3 o'clock.
        span = -int(360 * 16 * max(progress, 1.0) / 100)
        painter.drawPie(bounds, 90 * 16, span)

    if status == TimerStatus.PAUSED:
        painter.setBrush(QColor("white"))
        mid = ICON_PX // 2
        painter.drawRect(QRectF(mid - 11, mid - 12, 7, 24))
        painter.drawRect(QRectF(mid + 4, mid - 12, 7, 24))

    painter.end()
    pixmap.setDevicePixelRatio(2.0)
    return QIcon(pixmap)


class TomatoClockApp(QObject):
    """Builds the collaborators, the tray icon and the rollover timer."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings_path: Path | None = None,
        sounds_dir: Path | None = None,
        with_sound: bool = True,
    ) -> None:
        super().__init__(parent)

        # ── collaborators ─────────────────────────────────────────────
        self.store = SessionStore(settings_path)
        self.stats = StatsAggregator(self.store)
        self.settings: Settings = self.store.read_settings()

        self.tray_icon = QSystemTrayIcon(self)
        sound_manager = (
            SoundManager(self, sounds_dir=sounds_dir) if with_sound else None
        )
        self.notifier = Notifier(
            self, tray_icon=self.tray_icon, sound_manager=sound_manager,
        )
        self.engine = TimerEngine(
            self, store=self.store, notifier=self.notifier,
        )

        try:
            validate_settings(self.settings)
        except SettingsError:
            log.warning("Stored settings out of range, using defaults")
            self.settings = Settings()
        self.engine.apply_settings(self.settings)
        self.notifier.apply_settings(self.settings)

        # ── signals ───────────────────────────────────────────────────
        self.engine.tick.connect(self._on_tick)
        self.engine.mode_changed.connect(self._on_mode_changed)
        self.engine.completed.connect(self._on_completed)
        self.engine.status_changed.connect(self._on_status_changed)

        # ── day rollover: once now, then every minute ─────────────────
        self.stats.check_day_rollover()
        self._rollover_timer = QTimer(self)
        self._rollover_timer.setInterval(ROLLOVER_INTERVAL_MS)
        self._rollover_timer.timeout.connect(self._on_rollover_check)
        self._rollover_timer.start()

        self._snapshot: StatsSnapshot = self.stats.refresh()
        self._build_tray_menu()
        self._refresh_tray()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def snapshot(self) -> StatsSnapshot:
        """Latest stats, refreshed on completion and rollover."""
        return self._snapshot

    def show(self) -> None:
        self.tray_icon.show()

    def toggle_start(self) -> None:
        """Space-bar behaviour: pause when running, otherwise start."""
        if self.engine.is_running:
            self.engine.pause()
        else:
            self.engine.start()

    def save_settings(self, settings: Settings) -> None:
        """Validate, persist and apply *settings*.

        Raises :class:`SettingsError` if a duration is out of range;
        nothing is changed in that case.
        """
        validate_settings(settings)
        self.store.write_settings(settings)
        self.settings = settings
        self.engine.apply_settings(settings)
        self.notifier.apply_settings(settings)
        if not self.engine.is_running:
            self.engine.reset()
        log.info("Settings saved")

    # ══════════════════════════════════════════════════════════════════
    #  SYSTEM TRAY
    # ══════════════════════════════════════════════════════════════════

    def _build_tray_menu(self) -> None:
        menu = QMenu()

        self._start_action = menu.addAction("Start")
        self._start_action.triggered.connect(self.toggle_start)

        reset_action = menu.addAction("Reset")
        reset_action.triggered.connect(self.engine.reset)

        menu.addSeparator()
        for mode in Mode:
            action = menu.addAction(_MODE_TEXT[mode])
            action.triggered.connect(
                lambda _checked=False, m=mode: self.engine.switch_mode(m)
            )

        menu.addSeparator()
        for delta in (-5, -1, 1, 5):
            action = menu.addAction(f"{delta:+d} min")
            action.triggered.connect(
                lambda _checked=False, d=delta: self.engine.adjust_active_duration(d)
            )

        menu.addSeparator()
        quit_action = menu.addAction("Quit")
        quit_action.triggered.connect(self._quit_app)

        self._menu = menu
        self.tray_icon.setContextMenu(menu)

    def _refresh_tray(self) -> None:
        state = self.engine.snapshot()
        self.tray_icon.setIcon(_make_tray_icon(state.mode, state.status, state.progress))
        self._start_action.setText("Pause" if state.is_running else "Start")
        today = self._snapshot.today
        self.tray_icon.setToolTip(
            f"{format_time(state.time_left)} - {_MODE_TEXT[state.mode]}\n"
            f"Today: {today.count} pomodoros, {today.minutes} min, "
            f"{today.breaks} breaks"
        )

    def _quit_app(self) -> None:
        from PyQt6.QtWidgets import QApplication
        self.engine.pause()
        self.tray_icon.hide()
        QApplication.instance().quit()

    # ══════════════════════════════════════════════════════════════════
    #  TIMER SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self, time_left: int, total_seconds: int) -> None:
        self._refresh_tray()

    def _on_mode_changed(self, mode: Mode) -> None:
        self._refresh_tray()

    def _on_status_changed(self, status: TimerStatus) -> None:
        self._refresh_tray()

    def _on_completed(self, mode: Mode, completed_work_count: int) -> None:
        self._snapshot = self.stats.refresh()
        today = self._snapshot.today
        log.info(
            "Today: %d pomodoros, %d min, %d breaks",
            today.count, today.minutes, today.breaks,
        )
        self._refresh_tray()

    def _on_rollover_check(self) -> None:
        if self.stats.check_day_rollover():
            self._snapshot = self.stats.refresh()
            self._refresh_tray()
