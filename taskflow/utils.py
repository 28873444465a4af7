from pathlib import Path


def get_resource_path(relative_path: str) -> Path:
    """
    Get absolute path to a resource shipped inside the taskflow package.

    Args:
        relative_path: Path relative to the package (e.g., "resources/templates")

    Returns:
        Absolute Path object
    """
    return Path(__file__).parent.absolute() / relative_path


def format_minutes(minutes: int) -> str:
    """Format a minute count as '<H>h <M>m'"""
    hours, mins = divmod(int(minutes), 60)
    return f"{hours}h {mins}m"


def format_clock(seconds: int) -> str:
    """Format seconds as HH:MM:SS"""
    hours, remainder = divmod(int(seconds), 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
