"""
Tests for analytics aggregation over task snapshots.
"""

from datetime import datetime, timedelta, timezone

import pytest

from taskflow.domain import Category, Priority, Status, Task
from taskflow.services import AnalyticsService, compute_analytics
from tests.conftest import REFERENCE_NOW


def make_task(n: int = 1, **fields) -> Task:
    fields.setdefault("created_at", REFERENCE_NOW)
    return Task(id=f"t{n}", **fields)


def test_empty_snapshot_has_zero_rates():
    snapshot = compute_analytics([], REFERENCE_NOW)

    assert snapshot.task_count == 0
    assert snapshot.completion_rate == 0
    assert snapshot.avg_time_per_task == 0
    assert snapshot.total_time_spent == 0
    assert snapshot.by_status == {}
    assert snapshot.flags.low_completion is True
    assert snapshot.flags.no_recent_activity is True
    assert snapshot.flags.priority_imbalance is False


def test_completion_rate_and_averages():
    tasks = [
        make_task(1, status=Status.COMPLETED, time_spent=30),
        make_task(2, status=Status.TODO, time_spent=0),
    ]

    snapshot = compute_analytics(tasks, REFERENCE_NOW)

    assert snapshot.completion_rate == 50.0
    assert snapshot.total_time_spent == 30
    assert snapshot.avg_time_per_task == 15
    assert snapshot.completed_count == 1
    assert snapshot.flags.low_completion is False
    assert snapshot.flags.high_avg_duration is False


def test_grouped_counts_omit_absent_values():
    tasks = [
        make_task(1, category=Category.WORK, priority=Priority.HIGH, status=Status.IN_PROGRESS),
        make_task(2, category=Category.WORK, priority=Priority.LOW),
        make_task(3, category=Category.HEALTH, priority=Priority.HIGH),
    ]

    snapshot = compute_analytics(tasks, REFERENCE_NOW)

    assert snapshot.by_category == {Category.WORK: 2, Category.HEALTH: 1}
    assert snapshot.by_priority == {Priority.HIGH: 2, Priority.LOW: 1}
    assert snapshot.by_status == {Status.IN_PROGRESS: 1, Status.TODO: 2}
    assert snapshot.by_status["todo"] == 2
    assert Category.STUDY not in snapshot.by_category
    assert snapshot.in_progress_count == 1


@pytest.mark.parametrize("days_ago, counted", [(6, True), (7, True), (8, False)])
def test_weekly_window(days_ago, counted):
    task = make_task(created_at=REFERENCE_NOW - timedelta(days=days_ago))

    snapshot = compute_analytics([task], REFERENCE_NOW)

    assert snapshot.weekly_count == (1 if counted else 0)
    assert snapshot.flags.no_recent_activity is (not counted)


def test_monthly_window_starts_at_first_instant_of_month():
    tasks = [
        make_task(1, created_at=datetime(2026, 3, 1, 0, 0, 0)),
        make_task(2, created_at=datetime(2026, 2, 28, 23, 59, 59)),
        make_task(3, created_at=datetime(2026, 3, 17, 9, 0)),
    ]

    snapshot = compute_analytics(tasks, REFERENCE_NOW)

    assert snapshot.monthly_count == 2
    assert snapshot.weekly_count == 1


def test_priority_imbalance_counts_missing_low_as_zero():
    snapshot = compute_analytics([make_task(priority=Priority.HIGH)], REFERENCE_NOW)
    assert snapshot.flags.priority_imbalance is True

    balanced = [make_task(1, priority=Priority.HIGH), make_task(2, priority=Priority.LOW)]
    assert compute_analytics(balanced, REFERENCE_NOW).flags.priority_imbalance is False


def test_high_average_duration_flag_is_strict():
    at_limit = [make_task(1, time_spent=120), make_task(2, time_spent=120)]
    above = [make_task(1, time_spent=121)]

    assert compute_analytics(at_limit, REFERENCE_NOW).flags.high_avg_duration is False
    assert compute_analytics(above, REFERENCE_NOW).flags.high_avg_duration is True


def test_input_tasks_are_not_mutated():
    tasks = [make_task(1, time_spent=5), make_task(2, status=Status.COMPLETED)]
    before = [t.model_copy(deep=True) for t in tasks]

    compute_analytics(tasks, REFERENCE_NOW)

    assert tasks == before


def test_service_uses_injected_clock(store, clock):
    store.create()
    clock.advance(days=10)

    snapshot = AnalyticsService(clock=clock).compute(store.list())

    assert snapshot.generated_at == REFERENCE_NOW + timedelta(days=10)
    assert snapshot.weekly_count == 0
    assert snapshot.flags.no_recent_activity is True


def test_aware_now_is_compared_in_local_time():
    tasks = [make_task(1, created_at=REFERENCE_NOW - timedelta(days=1))]
    aware_now = REFERENCE_NOW.astimezone(timezone.utc)

    snapshot = compute_analytics(tasks, aware_now)

    assert snapshot.weekly_count == 1
    assert snapshot.monthly_count == 1
    assert snapshot.generated_at == REFERENCE_NOW
