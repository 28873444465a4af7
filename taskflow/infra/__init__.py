"""Infrastructure layer - Configuration, persistence and tick sources"""

from .db import DatabaseEngine, init_db
from .repository import (
    JsonFileTaskPersistence,
    SqlTaskPersistence,
    TaskPersistence,
    create_persistence,
)
from .scheduler import ManualTickScheduler, QtTickScheduler, TickHandle, TickScheduler

__all__ = [
    "DatabaseEngine", "init_db",
    "TaskPersistence", "SqlTaskPersistence", "JsonFileTaskPersistence", "create_persistence",
    "TickScheduler", "TickHandle", "QtTickScheduler", "ManualTickScheduler",
]
