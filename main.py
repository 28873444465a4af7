#!/usr/bin/env python

"""
TaskFlow - Console Entry Point

A small console front end over the task engine: manage tasks, track time
with a live timer, show analytics and export reports.

Usage:
    python main.py add "Write report" --category work --priority high
    python main.py list [--status completed]
    python main.py set <task-id> status=completed
    python main.py delete <task-id>
    python main.py track <task-id>        (Ctrl+C stops and commits)
    python main.py stats
    python main.py export [--scope pending] [--format report]
"""

import argparse
import datetime
import logging
import signal
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from taskflow.domain import Category, ExportFormat, ExportScope, Priority, Status, TaskFlowError
from taskflow.infra.config import get_settings
from taskflow.infra.logging_setup import setup_logging
from taskflow.infra.repository import create_persistence
from taskflow.infra.scheduler import QtTickScheduler
from taskflow.services import AnalyticsService, ExportService, TaskStore, TimerEngine
from taskflow.utils import format_clock, format_minutes

logger = logging.getLogger("taskflow.main")

RECOMMENDATIONS = {
    "low_completion": "Try breaking down large tasks into smaller, manageable chunks",
    "high_avg_duration": "Consider setting time limits to improve focus and efficiency",
    "priority_imbalance": "Balance your workload with more low-priority tasks for variety",
    "no_recent_activity": "Stay consistent by creating at least one task per week",
}


def _parse_due(value: str) -> datetime.datetime:
    return datetime.datetime.strptime(value, "%Y-%m-%d")


def cmd_add(store: TaskStore, args) -> int:
    fields = {"title": args.title, "description": args.description,
              "category": args.category, "priority": args.priority}
    if args.due:
        fields["due_date"] = _parse_due(args.due)
    task = store.create(fields)
    print(task.id)
    return 0


def cmd_list(store: TaskStore, args) -> int:
    for task in store.list(status=args.status):
        print(f"{task.id}  [{task.status.value:<11}] {task.priority.value:<6} "
              f"{task.category.value:<8} {format_minutes(task.time_spent):>8}  {task.title}")
    return 0


def cmd_set(store: TaskStore, args) -> int:
    patch = {}
    for assignment in args.assignments:
        key, sep, value = assignment.partition("=")
        if not sep:
            print(f"Expected field=value, got '{assignment}'", file=sys.stderr)
            return 2
        patch[key] = value if value != "" else None
    store.update(args.task_id, patch)
    return 0


def cmd_delete(store: TaskStore, args) -> int:
    store.delete(args.task_id)
    return 0


def cmd_track(store: TaskStore, args) -> int:
    settings = get_settings()
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    engine = TimerEngine(store, QtTickScheduler(), tick_interval_ms=settings.tick_interval_ms)

    title = store.get(args.task_id).title
    engine.ticked.connect(
        lambda task_id, elapsed: print(f"\r{title}: {format_clock(elapsed)}", end="", flush=True)
    )

    # The tick timer wakes the interpreter every interval, so SIGINT is seen promptly
    signal.signal(signal.SIGINT, lambda *_: app.quit())

    engine.start(args.task_id)
    app.exec()
    print()

    minutes = engine.stop()
    engine.dispose()
    print(f"Committed {minutes} min to '{title}'")
    return 0


def cmd_stats(store: TaskStore, args) -> int:
    snapshot = AnalyticsService().compute(store.list())
    print(f"Tasks: {snapshot.task_count}  completed: {snapshot.completed_count}  "
          f"in progress: {snapshot.in_progress_count}")
    print(f"Completion rate: {snapshot.completion_rate:.1f}%")
    print(f"Total time: {format_minutes(snapshot.total_time_spent)}  "
          f"avg/task: {format_minutes(round(snapshot.avg_time_per_task))}")
    print(f"Created this week: {snapshot.weekly_count}  this month: {snapshot.monthly_count}")
    for label, counts in (("Status", snapshot.by_status), ("Category", snapshot.by_category),
                          ("Priority", snapshot.by_priority)):
        print(f"{label}: " + ", ".join(f"{k.value}={v}" for k, v in counts.items()))
    for flag, enabled in snapshot.flags.model_dump().items():
        if enabled:
            print(f"* {RECOMMENDATIONS[flag]}")
    return 0


def cmd_export(store: TaskStore, args) -> int:
    settings = get_settings()
    result = ExportService().export(store.list(), scope=args.scope, fmt=args.format)

    output_dir = Path(args.output) if args.output else settings.export_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / result.filename
    with open(output_file, 'wb') as f:
        f.write(result.content)

    print(f"Exported {result.task_count} tasks to: {output_file.absolute()}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskflow", description="Task and time tracker")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add", help="create a task")
    p.add_argument("title")
    p.add_argument("--description", default="")
    p.add_argument("--category", default=Category.WORK.value, choices=[c.value for c in Category])
    p.add_argument("--priority", default=Priority.MEDIUM.value, choices=[c.value for c in Priority])
    p.add_argument("--due", help="due date as YYYY-MM-DD")
    p.set_defaults(handler=cmd_add)

    p = sub.add_parser("list", help="list tasks")
    p.add_argument("--status", choices=[s.value for s in Status])
    p.set_defaults(handler=cmd_list)

    p = sub.add_parser("set", help="update fields of a task")
    p.add_argument("task_id")
    p.add_argument("assignments", nargs="+", metavar="field=value")
    p.set_defaults(handler=cmd_set)

    p = sub.add_parser("delete", help="delete a task")
    p.add_argument("task_id")
    p.set_defaults(handler=cmd_delete)

    p = sub.add_parser("track", help="run the timer for a task")
    p.add_argument("task_id")
    p.set_defaults(handler=cmd_track)

    p = sub.add_parser("stats", help="show analytics")
    p.set_defaults(handler=cmd_stats)

    p = sub.add_parser("export", help="export tasks to a file")
    p.add_argument("--scope", default=ExportScope.ALL.value, choices=[s.value for s in ExportScope])
    p.add_argument("--format", default=ExportFormat.FLAT_TABLE.value, choices=[f.value for f in ExportFormat])
    p.add_argument("--output", help="directory for the exported file")
    p.set_defaults(handler=cmd_export)

    return parser


def main(argv=None):
    """Main entry point"""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level, settings.data_dir / "logs")

    store = TaskStore(create_persistence(settings), namespace=settings.namespace)
    try:
        return args.handler(store, args)
    except TaskFlowError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
