"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/TomatoClock/settings.json

(or under ``$TOMATOCLOCK_HOME`` when that variable is set).

Usage::

    settings = load_settings()
    settings.work_duration = 50
    validate_settings(settings)
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .errors import SettingsError

log = logging.getLogger(__name__)


APP_SUPPORT_DIR = Path(
    os.environ.get("TOMATOCLOCK_HOME")
    or Path.home() / "Library" / "Application Support" / "TomatoClock"
)
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

# (min, max) minutes accepted from the settings surface
DURATION_LIMITS: dict[str, tuple[int, int]] = {
    "work_duration": (1, 60),
    "short_break_duration": (1, 30),
    "long_break_duration": (1, 60),
}

_LABELS = {
    "work_duration": "Work duration",
    "short_break_duration": "Short break duration",
    "long_break_duration": "Long break duration",
}


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    work_duration: int = 25                # minutes
    short_break_duration: int = 5
    long_break_duration: int = 15
    auto_start_breaks: bool = False
    auto_start_pomodoros: bool = False

    # ── audio / notifications ─────────────────────────────────────────
    sound_enabled: bool = True
    notification_enabled: bool = True

    # ── appearance ────────────────────────────────────────────────────
    dark_mode: bool = False


def validate_settings(settings: Settings) -> None:
    """Raise :class:`SettingsError` if any duration is out of range."""
    for name, (low, high) in DURATION_LIMITS.items():
        value = getattr(settings, name)
        if not isinstance(value, int) or isinstance(value, bool):
            raise SettingsError(f"{_LABELS[name]} must be a whole number of minutes")
        if not low <= value <= high:
            raise SettingsError(
                f"{_LABELS[name]} must be between {low} and {high} minutes"
            )


def settings_from_dict(data: dict) -> Settings:
    """Build Settings from a dict, ignoring unknown keys."""
    valid_keys = {f.name for f in fields(Settings)}
    filtered = {k: v for k, v in data.items() if k in valid_keys}
    return Settings(**filtered)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return settings_from_dict(data)
    except (OSError, ValueError, TypeError):
        log.exception("Could not read settings from %s, using defaults", path)
    return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
