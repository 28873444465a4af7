"""
Analytics Service - Statistics over a task snapshot.

Everything here is a pure function of (tasks, now). Nothing is cached and
the input tasks are never modified.
"""

import datetime
from collections import Counter
from typing import Callable, Iterable, Optional

from taskflow.domain.models import AdvisoryFlags, AnalyticsSnapshot, Priority, Status, Task, to_local_naive

# Thresholds for the advisory flags
LOW_COMPLETION_PERCENT = 50.0
HIGH_AVG_DURATION_MINUTES = 120.0
RECENT_WINDOW = datetime.timedelta(days=7)


def start_of_month(now: datetime.datetime) -> datetime.datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def compute_analytics(tasks: Iterable[Task], now: datetime.datetime) -> AnalyticsSnapshot:
    """
    Build grouped counts, rates and advisory flags for a task snapshot.

    Args:
        tasks: The tasks to analyse
        now: Reference time for the weekly and monthly windows
    """
    # Task timestamps are local naive, so "now" must be too
    now = to_local_naive(now)
    tasks = list(tasks)
    count = len(tasks)

    by_status = Counter(task.status for task in tasks)
    by_category = Counter(task.category for task in tasks)
    by_priority = Counter(task.priority for task in tasks)

    total_time = sum(task.time_spent for task in tasks)
    avg_time = total_time / count if count else 0.0
    completion_rate = by_status[Status.COMPLETED] / count * 100 if count else 0.0

    week_start = now - RECENT_WINDOW
    month_start = start_of_month(now)
    weekly_count = sum(1 for task in tasks if task.created_at >= week_start)
    monthly_count = sum(1 for task in tasks if task.created_at >= month_start)

    flags = AdvisoryFlags(
        low_completion=completion_rate < LOW_COMPLETION_PERCENT,
        high_avg_duration=avg_time > HIGH_AVG_DURATION_MINUTES,
        priority_imbalance=by_priority[Priority.HIGH] > by_priority[Priority.LOW],
        no_recent_activity=weekly_count == 0,
    )

    return AnalyticsSnapshot(
        generated_at=now,
        task_count=count,
        completed_count=by_status[Status.COMPLETED],
        in_progress_count=by_status[Status.IN_PROGRESS],
        # Counter lookups above never insert keys, so only present values remain
        by_status=dict(by_status),
        by_category=dict(by_category),
        by_priority=dict(by_priority),
        total_time_spent=total_time,
        avg_time_per_task=avg_time,
        completion_rate=completion_rate,
        weekly_count=weekly_count,
        monthly_count=monthly_count,
        flags=flags,
    )


class AnalyticsService:
    """
    Thin wrapper that supplies "now" from an injectable clock.
    """

    def __init__(self, clock: Optional[Callable[[], datetime.datetime]] = None):
        self._clock = clock or datetime.datetime.now

    def compute(self, tasks: Iterable[Task], now: Optional[datetime.datetime] = None) -> AnalyticsSnapshot:
        return compute_analytics(tasks, now or self._clock())
