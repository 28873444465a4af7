"""
Tick sources for the timer engine.

Architecture Decision: Injectable Scheduler
The timer engine only knows that "something calls me back every interval".
In the running application that is a QTimer on the Qt event loop; in tests it
is ManualTickScheduler, which advances virtual time on demand so nothing
depends on real wall-clock delays.
"""

from abc import ABC, abstractmethod
from typing import Callable, List

from PySide6.QtCore import QTimer


class TickHandle(ABC):
    """A scheduled recurring callback that can be cancelled"""

    @abstractmethod
    def cancel(self) -> None:
        """Stop further callbacks. Calling it twice is harmless."""


class TickScheduler(ABC):
    """Creates recurring fixed-interval callbacks"""

    @abstractmethod
    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> TickHandle:
        """Call callback every interval_ms until the returned handle is cancelled"""


class _QtTickHandle(TickHandle):

    def __init__(self, timer: QTimer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()


class QtTickScheduler(TickScheduler):
    """
    Real-time ticks driven by the Qt event loop.

    Requires a running QCoreApplication (or QApplication) for callbacks to fire.
    """

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> TickHandle:
        timer = QTimer()
        timer.timeout.connect(callback)
        timer.start(interval_ms)
        return _QtTickHandle(timer)


class _ManualTickHandle(TickHandle):

    def __init__(self, interval_ms: int, callback: Callable[[], None]):
        self.interval_ms = interval_ms
        self.callback = callback
        self._active = True

    def cancel(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active


class ManualTickScheduler(TickScheduler):
    """
    Virtual-time scheduler. Nothing happens until advance() is called.
    """

    def __init__(self):
        self._handles: List[_ManualTickHandle] = []

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> TickHandle:
        handle = _ManualTickHandle(interval_ms, callback)
        self._handles.append(handle)
        return handle

    @property
    def active_count(self) -> int:
        """Number of callbacks that would still fire"""
        return sum(1 for h in self._handles if h.active)

    def advance(self, ticks: int = 1) -> None:
        """Fire every active callback `ticks` times, in scheduling order"""
        for _ in range(ticks):
            # A callback may cancel handles (including its own) mid-round
            for handle in list(self._handles):
                if handle.active:
                    handle.callback()
            self._handles = [h for h in self._handles if h.active]
