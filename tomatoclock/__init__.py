"""TomatoClock: a pomodoro timer with session history and statistics."""

__version__ = "0.1.0"
