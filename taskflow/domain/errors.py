"""
Domain errors.

Every failed precondition in the core surfaces as one of these. They are all
recoverable by the caller; none of them should bring the process down.
"""

from typing import Optional


class TaskFlowError(Exception):
    """Base class for all TaskFlow domain errors"""


class NotFound(TaskFlowError, LookupError):
    """An operation referenced a task id that the store does not hold"""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class ValidationError(TaskFlowError, ValueError):
    """
    A value was rejected at the store boundary.

    Raised for out-of-set category/priority/status values, negative time,
    nulls in required fields, attempts to patch immutable fields and for
    stored payloads that no longer parse.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class EmptyExport(TaskFlowError):
    """The export scope filter matched no tasks"""

    def __init__(self, scope: str):
        self.scope = scope
        super().__init__(f"No tasks match export scope '{scope}'")


class TimerStateError(TaskFlowError):
    """A timer transition was requested from a state that does not allow it"""

    def __init__(self, state: str, action: str):
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} timer while {state}")
