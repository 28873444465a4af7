"""
Pytest configuration and fixtures.
"""

import sys
from datetime import datetime
from pathlib import Path
import pytest
from PySide6.QtCore import QCoreApplication

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskflow.infra.repository import SqlTaskPersistence
from taskflow.infra.scheduler import ManualTickScheduler
from taskflow.services import TaskStore, TimerEngine
from tests.fakes import FakeClock, RecordingPersistence, sequential_ids

# Wednesday, mid-month: the trailing week and the calendar month differ
REFERENCE_NOW = datetime(2026, 3, 18, 12, 0, 0)


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    """Signals only need a QObject, but a core app keeps Qt's global state sane"""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def clock():
    return FakeClock(REFERENCE_NOW)


@pytest.fixture
def persistence():
    """In-memory SQLite database for testing"""
    adapter = SqlTaskPersistence("sqlite:///:memory:")
    yield adapter
    adapter.engine.dispose()


@pytest.fixture
def recording_persistence():
    return RecordingPersistence()


@pytest.fixture
def store(persistence, clock):
    return TaskStore(persistence, namespace="test", clock=clock, id_factory=sequential_ids())


@pytest.fixture
def scheduler():
    return ManualTickScheduler()


@pytest.fixture
def engine(store, scheduler):
    timer = TimerEngine(store, scheduler)
    yield timer
    timer.dispose()
