"""
Persistence adapters for task lists.

Architecture Decision: Why a Port?
The task engine never talks to a storage medium directly. It hands a
serialized task list to a TaskPersistence and asks for it back once at
startup. That makes it easy to:
- Switch between a SQLite database and plain JSON files
- Use fakes in tests
- Keep storage failures out of the domain logic (retries belong here)
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import select

from taskflow.infra.config import Settings
from taskflow.infra.db import DatabaseEngine, TaskListModel, init_db

logger = logging.getLogger(__name__)


class TaskPersistence(ABC):
    """
    Storage port used by TaskStore.

    A namespace identifies one task list (for example a user's list). The
    payload is opaque to the adapter.
    """

    @abstractmethod
    def load(self, namespace: str) -> Optional[str]:
        """Return the stored payload, or None if nothing was saved yet"""

    @abstractmethod
    def save(self, namespace: str, payload: str) -> None:
        """Replace the stored payload for a namespace"""


class SqlTaskPersistence(TaskPersistence):
    """
    Stores each namespace as a single row in the task_lists table.
    """

    def __init__(self, db_url: Optional[str] = None, engine: Optional[DatabaseEngine] = None):
        if engine is None and db_url is None:
            raise ValueError("Either db_url or engine is required")
        self.engine = init_db(db_url, engine=engine)

    def load(self, namespace: str) -> Optional[str]:
        with self.engine.get_session() as session:
            result = session.execute(
                select(TaskListModel.payload).where(TaskListModel.namespace == namespace)
            )
            return result.scalar_one_or_none()

    def save(self, namespace: str, payload: str) -> None:
        with self.engine.get_session() as session:
            model = session.get(TaskListModel, namespace)
            if model is None:
                model = TaskListModel(namespace=namespace, payload=payload)
                session.add(model)
            else:
                model.payload = payload
            model.updated_at = datetime.now()
            session.commit()
        logger.debug(f"Saved task list '{namespace}' ({len(payload)} bytes)")


class JsonFileTaskPersistence(TaskPersistence):
    """
    Stores each namespace as tasks_<namespace>.json in a directory.
    """

    FILE_PREFIX = "tasks_"
    FILE_EXTENSION = ".json"

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path_for(self, namespace: str) -> Path:
        return self.directory / f"{self.FILE_PREFIX}{namespace}{self.FILE_EXTENSION}"

    def load(self, namespace: str) -> Optional[str]:
        path = self._path_for(namespace)
        if not path.exists():
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def save(self, namespace: str, payload: str) -> None:
        path = self._path_for(namespace)
        # Write next to the target and swap, so a crash never leaves half a file
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(payload)
        tmp_path.replace(path)
        logger.debug(f"Saved task list '{namespace}' to {path}")


def create_persistence(settings: Settings) -> TaskPersistence:
    """
    Create the persistence adapter selected in settings.

    Returns:
        TaskPersistence instance for the configured backend
    """
    if settings.storage_backend == "json":
        return JsonFileTaskPersistence(settings.data_dir)
    return SqlTaskPersistence(settings.get_db_url())
