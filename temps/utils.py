import datetime
import re
from pathlib import Path

from temps.domain.exceptions import InvalidTimeError

_DURATION_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def get_resource_path(relative_path: str) -> Path:
    """
    Get absolute path to a resource shipped inside the package.

    Args:
        relative_path: Relative path from the package root (e.g., "resources/templates")

    Returns:
        Absolute Path object
    """
    return Path(__file__).parent.absolute() / relative_path


def parse_duration(src: str) -> datetime.timedelta:
    """
    Parse a duration.

    Expects ``HH:MM:SS`` or ``HH:MM`` with hours below 24.
    """
    match = _DURATION_RE.match(src.strip())
    if not match:
        raise InvalidTimeError(f"Could not parse duration '{src}' (expected HH:MM or HH:MM:SS)")
    hours, minutes, seconds = (int(g) if g else 0 for g in match.groups())
    if hours > 23 or minutes > 59 or seconds > 59:
        raise InvalidTimeError(f"Duration '{src}' is out of range")
    return datetime.timedelta(hours=hours, minutes=minutes, seconds=seconds)


def format_hours(duration: datetime.timedelta) -> str:
    """Whole minutes as decimal hours, e.g. 4h24m -> '4.40'"""
    minutes = int(duration.total_seconds() // 60)
    return f"{minutes / 60:.2f}"


def format_elapsed(duration: datetime.timedelta) -> str:
    """
    Format a duration as a human-readable string.

    16 minutes -> '16m', 64 minutes -> '1h 4m', 4000 minutes -> '66h 40m'
    """
    minutes = int(duration.total_seconds() // 60)
    hours, minutes = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
