"""Shared pytest fixtures for TomatoClock tests."""

import os
import sys
import tempfile

# Before any tomatoclock import: keep files out of the real home and
# let Qt run without a display.
os.environ.setdefault("TOMATOCLOCK_HOME", tempfile.mkdtemp(prefix="tomatoclock-"))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PyQt6.QtWidgets import QApplication

from tomatoclock.database.db import configure_engine, init_db
from tomatoclock.storage import SessionStore
from tomatoclock.timer.engine import TimerEngine

from helpers import FakeNotifier


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def store(tmp_path):
    """SessionStore with its settings file in a temp dir."""
    return SessionStore(settings_path=tmp_path / "settings.json")


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def engine(qapp, store, notifier):
    """Fresh TimerEngine wired to the in-memory store, auto-start OFF."""
    return TimerEngine(parent=None, store=store, notifier=notifier)


@pytest.fixture
def engine_auto(qapp, store, notifier):
    """Fresh TimerEngine with both auto-start flags ON."""
    return TimerEngine(
        parent=None, store=store, notifier=notifier,
        auto_start_breaks=True, auto_start_pomodoros=True,
    )


@pytest.fixture
def engine_bare(qapp):
    """Fresh TimerEngine with no collaborators (pure state-machine tests)."""
    return TimerEngine(parent=None)
