"""
Script to export a task list based on a YAML configuration.

Example configuration:
    scope: pending
    format: report
    output_dir: exports
"""

import sys
import yaml
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskflow.domain import ExportFormat, ExportScope, TaskFlowError
from taskflow.infra.config import get_settings
from taskflow.infra.repository import create_persistence
from taskflow.services import ExportService, TaskStore


class ExportConfiguration(BaseModel):
    """Configuration for a batch export. Usually loaded from a YAML file."""
    scope: ExportScope = ExportScope.ALL
    format: ExportFormat = ExportFormat.FLAT_TABLE
    namespace: Optional[str] = Field(None, description="Task list to export; defaults to the configured one")
    output_dir: Optional[str] = Field(None, description="Directory for the exported file")


def main():
    if len(sys.argv) < 2:
        print("Usage: python export_tasks.py <config_file.yaml>")
        sys.exit(1)

    config_path = Path(sys.argv[1])
    if not config_path.exists():
        print(f"Error: Config file '{config_path}' not found.")
        sys.exit(1)

    print(f"Loading configuration from {config_path}...")
    with open(config_path, 'r', encoding='utf-8') as f:
        config_data = yaml.safe_load(f) or {}

    try:
        config = ExportConfiguration(**config_data)
    except Exception as e:
        print(f"Error parsing configuration: {e}")
        sys.exit(1)

    settings = get_settings()
    namespace = config.namespace or settings.namespace
    store = TaskStore(create_persistence(settings), namespace=namespace)

    try:
        result = ExportService().export(store.list(), scope=config.scope, fmt=config.format)
    except TaskFlowError as e:
        print(f"Error: {e}")
        sys.exit(1)

    # Determine output path
    output_dir = Path(config.output_dir) if config.output_dir else settings.export_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / result.filename

    with open(output_file, 'wb') as f:
        f.write(result.content)

    print(f"Export of {result.task_count} tasks saved to: {output_file.absolute()}")


if __name__ == "__main__":
    main()
