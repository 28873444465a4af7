"""Services layer - Business logic"""

from .task_store import TaskStore
from .timer_service import TimerEngine, commit_minutes
from .analytics_service import AnalyticsService, compute_analytics
from .export_service import ExportService

__all__ = [
    "TaskStore", "TimerEngine", "commit_minutes",
    "AnalyticsService", "compute_analytics", "ExportService",
]
