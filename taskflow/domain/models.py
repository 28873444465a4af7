"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
Tasks are loaded back from whatever the persistence adapter stored, and
patches arrive from loosely typed callers. Pydantic validates both at the
boundary and gives us JSON serialization with the camelCase keys the stored
task lists use (timeSpent, createdAt, dueDate).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    WORK = "work"
    PERSONAL = "personal"
    STUDY = "study"
    HEALTH = "health"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Status(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Collapse aware timestamps onto the single local reference frame"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class Task(BaseModel):
    """
    Represents a discrete piece of work.

    time_spent is stored in whole minutes. It only grows through a timer
    commit or an explicit edit.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str = "New Task"
    description: Optional[str] = ""
    category: Category = Category.WORK
    priority: Priority = Priority.MEDIUM
    status: Status = Status.TODO
    time_spent: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.now)
    due_date: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_legacy_id(cls, value: Any) -> Any:
        # Older task lists used millisecond timestamps as ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("created_at", "due_date")
    @classmethod
    def _normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(value)

    @property
    def is_completed(self) -> bool:
        return self.status == Status.COMPLETED


class TaskPatch(BaseModel):
    """
    Partial update for a Task.

    Only the fields a caller explicitly sets are merged; everything else on
    the stored task is left alone. id and createdAt are not part of the patch,
    so passing them is rejected.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[Category] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    time_spent: Optional[int] = Field(default=None, ge=0)
    due_date: Optional[datetime] = None

    @field_validator("title", "category", "priority", "status", "time_spent", mode="before")
    @classmethod
    def _reject_null(cls, value: Any, info) -> Any:
        if value is None:
            raise ValueError(f"{info.field_name} cannot be cleared")
        return value

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly supplied by the caller, keyed by attribute name"""
        return self.model_dump(exclude_unset=True)


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class TimerSession(BaseModel):
    """
    Ephemeral tracking state for a single task. Never persisted.
    """
    task_id: str
    state: TimerState = TimerState.RUNNING
    elapsed_seconds: int = Field(default=0, ge=0)


class AdvisoryFlags(BaseModel):
    """Boolean hints a presentation layer can turn into recommendations"""
    low_completion: bool = False
    high_avg_duration: bool = False
    priority_imbalance: bool = False
    no_recent_activity: bool = False


class AnalyticsSnapshot(BaseModel):
    """
    Derived statistics over a task snapshot.

    Grouped counts only contain values that actually occur; there is no
    zero-fill.
    """
    generated_at: datetime
    task_count: int = 0
    completed_count: int = 0
    in_progress_count: int = 0

    by_status: Dict[Status, int] = Field(default_factory=dict)
    by_category: Dict[Category, int] = Field(default_factory=dict)
    by_priority: Dict[Priority, int] = Field(default_factory=dict)

    total_time_spent: int = 0  # minutes
    avg_time_per_task: float = 0.0  # minutes
    completion_rate: float = 0.0  # percent

    weekly_count: int = 0
    monthly_count: int = 0

    flags: AdvisoryFlags = Field(default_factory=AdvisoryFlags)


class ExportScope(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


class ExportFormat(str, Enum):
    FLAT_TABLE = "flat-table"
    REPORT = "report"
    WORKBOOK = "workbook"


class ExportResult(BaseModel):
    """Serialized export plus the metadata a delivery mechanism needs"""
    filename: str
    content: bytes
    media_type: str
    task_count: int
