"""
Logging configuration for the entry points.

Library modules only create `logging.getLogger(__name__)` loggers; handlers
are attached here, once, by whoever starts the process.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional


def setup_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """
    Configure logging with:
    - Console handler at the requested level
    - Rotating file handler with full DEBUG output (when log_dir is given)
    """
    console_level = getattr(logging, str(level).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Replace handlers from a previous call instead of stacking them
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(console)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "taskflow.log", maxBytes=1_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(file_handler)

    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
