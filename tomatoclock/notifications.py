"""Completion alerts: tray balloon plus sound.

The engine only knows the :class:`Notifier` through
``notify(kind, completed_work_count)``; everything else here is about
how the alert reaches the user.
"""

from __future__ import annotations

import logging
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QSystemTrayIcon

log = logging.getLogger(__name__)

MESSAGE_TIMEOUT_MS = 5000


class NotificationKind(Enum):
    WORK_COMPLETE = "work_complete"
    SHORT_BREAK_COMPLETE = "short_break_complete"
    LONG_BREAK_COMPLETE = "long_break_complete"


def _compose(kind: NotificationKind, count: int) -> tuple[str, str]:
    if kind is NotificationKind.WORK_COMPLETE:
        plural = "s" if count != 1 else ""
        return (
            "\U0001f345 Work session complete!",
            f"Great job! You've finished {count} pomodoro{plural}. Time for a break!",
        )
    if kind is NotificationKind.LONG_BREAK_COMPLETE:
        return ("⏰ Break is over", "Long break is over! Ready to get back to work?")
    return ("⏰ Break is over", "Short break is over! Let's stay focused!")


def _sound_for(kind: NotificationKind) -> str:
    if kind is NotificationKind.WORK_COMPLETE:
        return "work_complete"
    return "break_complete"


class Notifier(QObject):
    """Shows completion alerts and plays the matching tone.

    Signals
    -------
    message(title: str, body: str)
        Emitted for every alert that passes the ``notifications_enabled``
        switch, whether or not a tray icon is available to show it.
    """

    message = pyqtSignal(str, str)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        tray_icon: QSystemTrayIcon | None = None,
        sound_manager=None,
    ) -> None:
        super().__init__(parent)
        self._tray_icon = tray_icon
        self._sound_manager = sound_manager
        self._notifications_enabled = True
        self._sound_enabled = True

    # ── switches ──────────────────────────────────────────────────────

    @property
    def notifications_enabled(self) -> bool:
        return self._notifications_enabled

    def set_notifications_enabled(self, enabled: bool) -> None:
        self._notifications_enabled = enabled

    @property
    def sound_enabled(self) -> bool:
        return self._sound_enabled

    def set_sound_enabled(self, enabled: bool) -> None:
        self._sound_enabled = enabled

    def apply_settings(self, settings) -> None:
        self.set_sound_enabled(settings.sound_enabled)
        self.set_notifications_enabled(settings.notification_enabled)

    # ── alerts ────────────────────────────────────────────────────────

    def notify(self, kind: NotificationKind, completed_work_count: int) -> None:
        title, body = _compose(kind, completed_work_count)
        self.show_message(title, body)
        self.play_sound(_sound_for(kind))

    def show_message(self, title: str, body: str) -> None:
        if not self._notifications_enabled:
            return
        log.info("%s: %s", title, body)
        self.message.emit(title, body)
        if self._tray_icon is not None and QSystemTrayIcon.isSystemTrayAvailable():
            self._tray_icon.showMessage(
                title, body,
                QSystemTrayIcon.MessageIcon.Information,
                MESSAGE_TIMEOUT_MS,
            )

    def play_sound(self, name: str) -> None:
        if not self._sound_enabled or self._sound_manager is None:
            return
        self._sound_manager.play(name)

    def test(self) -> None:
        """Fire a sample alert so the user can check both channels."""
        self.show_message("\U0001f9ea Test notification", "If you can see this, notifications work!")
        self.play_sound("test")
