"""
Task Store - Canonical collection of tasks.

Architecture Decision: Write-through Store + Observer Pattern (Qt Signals)
The store keeps the task list in memory and hands the whole serialized list
to the persistence port after every change. Listeners (the timer engine, a
UI) subscribe to signals instead of polling.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Union

from PySide6.QtCore import QObject, Signal
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from taskflow.domain.errors import NotFound, ValidationError
from taskflow.domain.models import Status, Task, TaskPatch
from taskflow.infra.repository import TaskPersistence

logger = logging.getLogger(__name__)

_TASK_LIST = TypeAdapter(List[Task])

PatchLike = Union[TaskPatch, Mapping[str, object]]


def _as_validation_error(exc: PydanticValidationError) -> ValidationError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    return ValidationError(f"Invalid value for {field}: {first['msg']}", field=field)


class TaskStore(QObject):
    """
    Owns the tasks of one namespace and enforces their invariants.

    Every read returns copies, so callers can never change a stored task
    behind the store's back.
    """

    # Signals
    task_created = Signal(str)  # task_id
    task_updated = Signal(str)  # task_id
    task_deleted = Signal(str, bool)  # task_id, was bound to the active timer

    def __init__(self, persistence: TaskPersistence, namespace: str = "default",
                 clock: Optional[Callable[[], datetime]] = None,
                 id_factory: Optional[Callable[[], str]] = None):
        super().__init__()
        self.persistence = persistence
        self.namespace = namespace
        self._clock = clock or datetime.now
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

        self._tasks: Dict[str, Task] = {}
        self._active_task_id: Optional[str] = None

        self._load()

    # ------------------------------------------------------------------
    # Persistence

    def _load(self):
        """Read the namespace once, at startup"""
        payload = self.persistence.load(self.namespace)
        if not payload:
            logger.debug(f"No stored tasks for '{self.namespace}'")
            return

        try:
            tasks = _TASK_LIST.validate_json(payload)
        except PydanticValidationError as e:
            logger.error(f"Stored task list '{self.namespace}' is invalid: {e}")
            raise ValidationError(
                f"Stored task list '{self.namespace}' is invalid ({e.error_count()} errors)"
            ) from e

        for task in tasks:
            if task.id in self._tasks:
                raise ValidationError(
                    f"Stored task list '{self.namespace}' contains duplicate id {task.id}", field="id"
                )
            self._tasks[task.id] = task

        logger.info(f"Loaded {len(self._tasks)} tasks from '{self.namespace}'")

    def _persist(self, tasks: Dict[str, Task]):
        """Save the new collection, then swap it in. A failed save changes nothing."""
        payload = _TASK_LIST.dump_json(list(tasks.values()), by_alias=True, indent=2)
        self.persistence.save(self.namespace, payload.decode('utf-8'))
        self._tasks = tasks

    # ------------------------------------------------------------------
    # Helpers

    def _require(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFound(task_id)
        return task

    @staticmethod
    def _coerce_patch(fields: Optional[PatchLike]) -> TaskPatch:
        if fields is None:
            return TaskPatch()
        if isinstance(fields, TaskPatch):
            return fields
        try:
            return TaskPatch.model_validate(dict(fields))
        except PydanticValidationError as e:
            error = _as_validation_error(e)
            logger.warning(f"Rejected task fields: {error}")
            raise error from e

    def _build(self, data: dict) -> Task:
        try:
            return Task.model_validate(data)
        except PydanticValidationError as e:
            error = _as_validation_error(e)
            logger.warning(f"Rejected task fields: {error}")
            raise error from e

    def _new_id(self) -> str:
        task_id = self._id_factory()
        while task_id in self._tasks:
            task_id = self._id_factory()
        return task_id

    # ------------------------------------------------------------------
    # Commands

    def create(self, fields: Optional[PatchLike] = None) -> Task:
        """
        Create a task from optional initial fields.

        Unspecified fields get the defaults: status todo, priority medium,
        category work, no time spent and no due date.
        """
        patch = self._coerce_patch(fields)
        task = self._build({**patch.changes(), "id": self._new_id(), "created_at": self._clock()})

        tasks = dict(self._tasks)
        tasks[task.id] = task
        self._persist(tasks)

        logger.debug(f"Created task {task.id} '{task.title}'")
        self.task_created.emit(task.id)
        return task.model_copy(deep=True)

    def update(self, task_id: str, patch: PatchLike) -> Task:
        """
        Merge the explicitly supplied fields of patch into a task.

        Raises:
            NotFound: task_id is unknown
            ValidationError: a value is outside its allowed set
        """
        current = self._require(task_id)
        changes = self._coerce_patch(patch).changes()

        data = current.model_dump()
        data.update(changes)
        updated = self._build(data)

        tasks = dict(self._tasks)
        tasks[task_id] = updated
        self._persist(tasks)

        logger.debug(f"Updated task {task_id}: {sorted(changes)}")
        self.task_updated.emit(task_id)
        return updated.model_copy(deep=True)

    def delete(self, task_id: str) -> bool:
        """
        Remove a task.

        Returns:
            True if the task was bound to the active timer session
        """
        self._require(task_id)

        tasks = dict(self._tasks)
        del tasks[task_id]
        self._persist(tasks)

        was_active = self._active_task_id == task_id
        if was_active:
            self._active_task_id = None

        logger.debug(f"Deleted task {task_id} (active session: {was_active})")
        self.task_deleted.emit(task_id, was_active)
        return was_active

    # ------------------------------------------------------------------
    # Queries

    def get(self, task_id: str) -> Task:
        return self._require(task_id).model_copy(deep=True)

    def list(self, status: Optional[Status] = None) -> List[Task]:
        """Snapshot of all tasks in creation order, optionally only one status"""
        return [
            task.model_copy(deep=True)
            for task in self._tasks.values()
            if status is None or task.status == status
        ]

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    # ------------------------------------------------------------------
    # Timer binding

    @property
    def active_task_id(self) -> Optional[str]:
        """Task currently bound to the timer session, if any"""
        return self._active_task_id

    def bind_session(self, task_id: str):
        self._require(task_id)
        self._active_task_id = task_id

    def release_session(self):
        self._active_task_id = None
