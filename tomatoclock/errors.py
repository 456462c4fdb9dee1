"""Exceptions raised by TomatoClock."""


class TomatoClockError(Exception):
    """Base class for all TomatoClock errors."""


class InvalidModeError(TomatoClockError, ValueError):
    """An unrecognized mode was passed to the timer engine."""

    def __init__(self, mode: object) -> None:
        super().__init__(f"Invalid mode: {mode!r}")
        self.mode = mode


class SettingsError(TomatoClockError, ValueError):
    """A setting is outside the range the settings surface accepts."""
