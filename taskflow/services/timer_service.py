"""
Timer Service - Core time tracking logic.

Architecture Decision: Observer Pattern (Qt Signals)
The engine emits signals when state changes, keeping it decoupled from UI.
Time itself comes from an injected TickScheduler, so the same state machine
runs on a QTimer in the application and on virtual time in tests.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from taskflow.domain.errors import TimerStateError
from taskflow.domain.models import TaskPatch, TimerSession, TimerState
from taskflow.infra.scheduler import TickHandle, TickScheduler
from taskflow.services.task_store import TaskStore

logger = logging.getLogger(__name__)


def commit_minutes(elapsed_seconds: int) -> int:
    """
    Whole minutes to bill for a session.

    Anything that ran at all is worth at least one minute.
    """
    minutes = elapsed_seconds // 60
    if elapsed_seconds > 0 and minutes == 0:
        return 1
    return minutes


class TimerEngine(QObject):
    """
    The time tracking engine. Holds at most one session, for one task.

    Starting a session for another task always commits the current one first,
    so two tasks can never be tracked at the same time.
    """

    # Signals
    ticked = Signal(str, int)  # task_id, elapsed_seconds
    session_started = Signal(str)  # task_id
    session_paused = Signal(str)  # task_id
    session_resumed = Signal(str)  # task_id
    session_committed = Signal(str, int)  # task_id, minutes
    session_discarded = Signal(str)  # task_id

    def __init__(self, store: TaskStore, scheduler: TickScheduler, tick_interval_ms: int = 1000):
        super().__init__()
        self.store = store
        self.scheduler = scheduler
        self.tick_interval_ms = tick_interval_ms

        self._session: Optional[TimerSession] = None
        self._tick_handle: Optional[TickHandle] = None

        self.store.task_deleted.connect(self._on_task_deleted)

    # ------------------------------------------------------------------
    # State

    @property
    def state(self) -> TimerState:
        return self._session.state if self._session else TimerState.IDLE

    @property
    def active_task_id(self) -> Optional[str]:
        return self._session.task_id if self._session else None

    @property
    def elapsed_seconds(self) -> int:
        return self._session.elapsed_seconds if self._session else 0

    @property
    def session(self) -> Optional[TimerSession]:
        """Copy of the current session, or None when idle"""
        return self._session.model_copy() if self._session else None

    def is_tracking(self) -> bool:
        """Check if currently accumulating time"""
        return self.state == TimerState.RUNNING

    # ------------------------------------------------------------------
    # Tick source

    def _schedule_tick(self):
        self._cancel_tick()
        self._tick_handle = self.scheduler.schedule_repeating(self.tick_interval_ms, self.tick)

    def _cancel_tick(self):
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def tick(self):
        """Called once per interval; one tick is one second of tracked time"""
        if self._session is None or self._session.state != TimerState.RUNNING:
            return

        self._session.elapsed_seconds += 1
        self.ticked.emit(self._session.task_id, self._session.elapsed_seconds)

    # ------------------------------------------------------------------
    # Transitions

    def start(self, task_id: str) -> TimerSession:
        """
        Start tracking time for a task.

        Raises:
            NotFound: the task does not exist
        """
        self.store.get(task_id)

        if self._session is not None:
            if self._session.task_id == task_id:
                # Same task: keep the accrued time instead of billing and restarting
                if self._session.state == TimerState.PAUSED:
                    self.resume()
                return self.session
            self.stop()

        self._session = TimerSession(task_id=task_id, state=TimerState.RUNNING, elapsed_seconds=0)
        self.store.bind_session(task_id)
        self._schedule_tick()

        logger.info(f"Timer started for task {task_id}")
        self.session_started.emit(task_id)
        return self.session

    def pause(self):
        """Freeze elapsed time. Only valid while running."""
        if self.state != TimerState.RUNNING:
            raise TimerStateError(self.state.value, "pause")

        self._cancel_tick()
        self._session.state = TimerState.PAUSED

        logger.debug(f"Timer paused for task {self._session.task_id} at {self._session.elapsed_seconds}s")
        self.session_paused.emit(self._session.task_id)

    def resume(self):
        """Continue accumulating from the frozen value. Only valid while paused."""
        if self.state != TimerState.PAUSED:
            raise TimerStateError(self.state.value, "resume")

        self._session.state = TimerState.RUNNING
        self._schedule_tick()

        logger.debug(f"Timer resumed for task {self._session.task_id}")
        self.session_resumed.emit(self._session.task_id)

    def stop(self) -> int:
        """
        End the session and add its time to the task.

        Returns:
            The number of minutes committed to the task
        """
        if self._session is None:
            raise TimerStateError(self.state.value, "stop")

        session = self._session
        minutes = commit_minutes(session.elapsed_seconds)
        if minutes > 0:
            # A failed save propagates with the session still open
            task = self.store.get(session.task_id)
            self.store.update(session.task_id, TaskPatch(time_spent=task.time_spent + minutes))

        self._clear_session()

        logger.info(
            f"Timer stopped for task {session.task_id}: "
            f"{session.elapsed_seconds}s elapsed, {minutes} min committed"
        )
        self.session_committed.emit(session.task_id, minutes)
        return minutes

    def dispose(self):
        """Shut the engine down. An open session is committed, never dropped."""
        self._cancel_tick()
        if self._session is not None:
            self.stop()
        try:
            self.store.task_deleted.disconnect(self._on_task_deleted)
        except (RuntimeError, TypeError):
            logger.debug("Timer engine was already disconnected from the store")

    def _clear_session(self):
        self._cancel_tick()
        self._session = None
        self.store.release_session()

    def _on_task_deleted(self, task_id: str, was_active: bool):
        """Deleting the tracked task drops its session without committing"""
        if self._session is None or self._session.task_id != task_id:
            return

        elapsed = self._session.elapsed_seconds
        self._clear_session()

        logger.warning(f"Task {task_id} deleted while tracked; discarded {elapsed}s")
        self.session_discarded.emit(task_id)
