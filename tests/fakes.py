"""
Test doubles for the persistence port and the clock.
"""

import itertools
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from taskflow.infra.repository import TaskPersistence


class RecordingPersistence(TaskPersistence):
    """
    Dict-backed persistence that remembers every call.

    - loads: namespaces passed to load()
    - saves: (namespace, payload) pairs passed to save()
    - fail_saves: make save() raise OSError, e.g. to simulate a full disk
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.loads: List[str] = []
        self.saves: List[Tuple[str, str]] = []
        self.fail_saves = False

    def load(self, namespace: str) -> Optional[str]:
        self.loads.append(namespace)
        return self.data.get(namespace)

    def save(self, namespace: str, payload: str) -> None:
        if self.fail_saves:
            raise OSError("disk full")
        self.saves.append((namespace, payload))
        self.data[namespace] = payload


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def sequential_ids(prefix: str = "task") -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"
