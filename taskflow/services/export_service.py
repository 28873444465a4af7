"""
Export Service - Turns a task snapshot into a portable file.

Architecture Decision: Template Pattern
The plain-text report is a Jinja2 template so its wording can change without
touching code. The flat table has a fixed column contract and is built
directly; the workbook goes through XlsxWriter.

All three formats are pure functions of (tasks, scope, format, now).
"""

import csv
import datetime
import io
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

import xlsxwriter
from jinja2 import Environment, FileSystemLoader

from taskflow.domain.errors import EmptyExport, ValidationError
from taskflow.domain.models import ExportFormat, ExportResult, ExportScope, Status, Task
from taskflow.utils import format_minutes, get_resource_path

logger = logging.getLogger(__name__)

FLAT_TABLE_HEADER = [
    "Title", "Description", "Category", "Priority", "Status", "Time Spent (minutes)", "Created At",
]
REPORT_TEMPLATE = "task_report.txt"
FILENAME_PREFIX = "taskflow-export-"


def _format_date(value: datetime.datetime, fmt: str = "%Y-%m-%d") -> str:
    return value.strftime(fmt)


class ExportService:
    """
    Exports tasks as a flat table (CSV), a text report or an XLSX workbook.
    """

    EXTENSIONS: Dict[ExportFormat, str] = {
        ExportFormat.FLAT_TABLE: "csv",
        ExportFormat.REPORT: "txt",
        ExportFormat.WORKBOOK: "xlsx",
    }
    MEDIA_TYPES: Dict[ExportFormat, str] = {
        ExportFormat.FLAT_TABLE: "text/csv",
        ExportFormat.REPORT: "text/plain",
        ExportFormat.WORKBOOK: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }

    def __init__(self, template_dir: Optional[Path] = None,
                 clock: Optional[Callable[[], datetime.datetime]] = None):
        """
        Initialize the export service.

        Args:
            template_dir: Directory containing the report template
            clock: Source of "now" when a call does not pass one
        """
        if template_dir is None:
            template_dir = get_resource_path("resources/templates")

        self.template_dir = Path(template_dir)
        self._clock = clock or datetime.datetime.now

        # Setup Jinja2 environment
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True
        )

        # Add custom filters
        self.env.filters['format_minutes'] = format_minutes
        self.env.filters['format_date'] = _format_date

    # ------------------------------------------------------------------
    # Filtering

    @staticmethod
    def filter_tasks(tasks: Iterable[Task], scope: Union[ExportScope, str]) -> List[Task]:
        """Apply the scope filter, keeping snapshot order"""
        scope = ExportService._parse(ExportScope, scope, "scope")
        if scope == ExportScope.COMPLETED:
            return [t for t in tasks if t.status == Status.COMPLETED]
        if scope == ExportScope.PENDING:
            return [t for t in tasks if t.status != Status.COMPLETED]
        return list(tasks)

    def count(self, tasks: Iterable[Task], scope: Union[ExportScope, str] = ExportScope.ALL) -> int:
        """Number of tasks an export with this scope would contain"""
        return len(self.filter_tasks(tasks, scope))

    @staticmethod
    def _parse(enum_type, value, field: str):
        try:
            return enum_type(value)
        except ValueError as e:
            raise ValidationError(f"Unknown export {field} '{value}'", field=field) from e

    # ------------------------------------------------------------------
    # Export

    def export(self, tasks: Iterable[Task],
               scope: Union[ExportScope, str] = ExportScope.ALL,
               fmt: Union[ExportFormat, str] = ExportFormat.FLAT_TABLE,
               now: Optional[datetime.datetime] = None) -> ExportResult:
        """
        Serialize the tasks matching scope.

        Raises:
            EmptyExport: no task matches the scope
            ValidationError: scope or format is unknown
        """
        scope = self._parse(ExportScope, scope, "scope")
        fmt = self._parse(ExportFormat, fmt, "format")
        now = now or self._clock()

        selected = self.filter_tasks(tasks, scope)
        if not selected:
            logger.warning(f"Export refused: no tasks in scope '{scope.value}'")
            raise EmptyExport(scope.value)

        if fmt == ExportFormat.FLAT_TABLE:
            content = self.render_flat_table(selected).encode('utf-8')
        elif fmt == ExportFormat.REPORT:
            content = self.render_report(selected, now).encode('utf-8')
        else:
            content = self.render_workbook(selected, now)

        result = ExportResult(
            filename=self.suggested_filename(fmt, now),
            content=content,
            media_type=self.MEDIA_TYPES[fmt],
            task_count=len(selected),
        )
        logger.info(f"Exported {result.task_count} tasks as {fmt.value} ({len(content)} bytes)")
        return result

    def suggested_filename(self, fmt: Union[ExportFormat, str], now: datetime.datetime) -> str:
        fmt = self._parse(ExportFormat, fmt, "format")
        return f"{FILENAME_PREFIX}{_format_date(now)}.{self.EXTENSIONS[fmt]}"

    # ------------------------------------------------------------------
    # Renderers

    @staticmethod
    def render_flat_table(tasks: Iterable[Task]) -> str:
        """
        One header line plus one line per task.

        Title and description are always quoted; the enumerated fields, the
        minute count and the date can never contain a comma and stay bare.
        """
        output = io.StringIO()
        text_writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator=",")
        writer = csv.writer(output, lineterminator="\n")

        writer.writerow(FLAT_TABLE_HEADER)
        for task in tasks:
            text_writer.writerow([task.title, task.description or ""])
            writer.writerow([
                task.category.value,
                task.priority.value,
                task.status.value,
                task.time_spent,
                _format_date(task.created_at),
            ])

        # Records are separated, not terminated, by newlines
        return output.getvalue().rstrip("\n")

    def render_report(self, tasks: Iterable[Task], now: datetime.datetime) -> str:
        """Summary block followed by one table row per task"""
        tasks = list(tasks)
        context = {
            'generated_at': now,
            'tasks': tasks,
            'task_count': len(tasks),
            'total_minutes': sum(t.time_spent for t in tasks),
        }
        template = self.env.get_template(REPORT_TEMPLATE)
        return template.render(**context)

    @staticmethod
    def render_workbook(tasks: Iterable[Task], now: datetime.datetime) -> bytes:
        """
        Generate an .xlsx with:
        - Tab 1: Tasks (same columns as the flat table)
        - Tab 2: Summary (count, total time, tasks per status)
        """
        tasks = list(tasks)
        output = io.BytesIO()
        workbook = xlsxwriter.Workbook(output, {'in_memory': True})
        # Pin document metadata to "now" so identical input gives identical bytes
        workbook.set_properties({'title': 'TaskFlow Pro - Task Report', 'created': now})

        fmt_header = workbook.add_format({
            'bold': True, 'bg_color': '#946ADE', 'font_color': 'white', 'border': 1
        })
        fmt_date = workbook.add_format({'num_format': 'yyyy-mm-dd', 'border': 1})
        fmt_cell = workbook.add_format({'border': 1})

        # --- TAB 1: TASKS ---
        ws_tasks = workbook.add_worksheet("Tasks")
        for col, header in enumerate(FLAT_TABLE_HEADER):
            ws_tasks.write(0, col, header, fmt_header)
        ws_tasks.set_column(0, 1, 32)
        ws_tasks.set_column(2, 6, 16)

        for row, task in enumerate(tasks, start=1):
            ws_tasks.write_string(row, 0, task.title, fmt_cell)
            ws_tasks.write_string(row, 1, task.description or "", fmt_cell)
            ws_tasks.write_string(row, 2, task.category.value, fmt_cell)
            ws_tasks.write_string(row, 3, task.priority.value, fmt_cell)
            ws_tasks.write_string(row, 4, task.status.value, fmt_cell)
            ws_tasks.write_number(row, 5, task.time_spent, fmt_cell)
            ws_tasks.write_datetime(row, 6, task.created_at, fmt_date)

        # --- TAB 2: SUMMARY ---
        ws_summary = workbook.add_worksheet("Summary")
        ws_summary.set_column(0, 0, 22)
        ws_summary.set_column(1, 1, 16)

        total_minutes = sum(t.time_spent for t in tasks)
        rows = [
            ("Export Date", _format_date(now)),
            ("Total Tasks", len(tasks)),
            ("Total Time Tracked", format_minutes(total_minutes)),
        ]
        for status in Status:
            rows.append((f"Status: {status.value}", sum(1 for t in tasks if t.status == status)))

        for row, (label, value) in enumerate(rows):
            ws_summary.write(row, 0, label, fmt_header)
            ws_summary.write(row, 1, value, fmt_cell)

        workbook.close()
        return output.getvalue()
