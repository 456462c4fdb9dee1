"""Shared test helpers for TomatoClock."""

from datetime import date, datetime, time

from tomatoclock.records import Mode, SessionRecord, date_key
from tomatoclock.timer.engine import TimerEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeNotifier:
    """Records ``notify`` calls instead of showing anything."""

    def __init__(self):
        self.calls: list = []

    def notify(self, kind, completed_work_count):
        self.calls.append((kind, completed_work_count))


class BrokenNotifier:
    def notify(self, kind, completed_work_count):
        raise RuntimeError("notification backend down")


class RaisingStore:
    """A store whose append always blows up."""

    def append_session(self, record):
        raise RuntimeError("disk full")


class RefusingStore:
    """A store whose append reports failure without raising."""

    def __init__(self):
        self.attempts = 0

    def append_session(self, record):
        self.attempts += 1
        return False


class FakeSoundManager:
    def __init__(self):
        self.played: list[str] = []

    def play(self, name):
        self.played.append(name)


def complete_session(engine: TimerEngine) -> None:
    """Fast-complete the current session by jumping to the last tick."""
    engine._time_left = 1
    engine._on_tick()


def make_record(
    day: date,
    mode: Mode = Mode.WORK,
    minutes: int = 25,
    completed: bool = True,
    at: time = time(10, 0),
) -> SessionRecord:
    """A record stamped on *day* at *at*."""
    return SessionRecord(
        timestamp=datetime.combine(day, at),
        mode=mode,
        duration_minutes=minutes,
        completed=completed,
        calendar_date=date_key(day),
    )
