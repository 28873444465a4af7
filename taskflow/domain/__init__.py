"""Domain layer - Pure business entities and errors"""

from .errors import EmptyExport, NotFound, TaskFlowError, TimerStateError, ValidationError
from .models import (
    AdvisoryFlags,
    AnalyticsSnapshot,
    Category,
    ExportFormat,
    ExportResult,
    ExportScope,
    Priority,
    Status,
    Task,
    TaskPatch,
    TimerSession,
    TimerState,
)

__all__ = [
    "AdvisoryFlags", "AnalyticsSnapshot", "Category", "ExportFormat", "ExportResult",
    "ExportScope", "Priority", "Status", "Task", "TaskPatch", "TimerSession", "TimerState",
    "EmptyExport", "NotFound", "TaskFlowError", "TimerStateError", "ValidationError",
]
