"""Domain layer - Pure business entities and logic"""

from .models import DayWindow, Entry, Ongoing, ProjectTotal, Summary, WeeklyRow, WeeklySummary
from .exceptions import (
    ConfigError,
    ConflictError,
    FormatError,
    InvalidTimeError,
    MissingProjectError,
    NoOpenEntryError,
    TempsError,
)

__all__ = [
    "DayWindow", "Entry", "Ongoing", "ProjectTotal", "Summary", "WeeklyRow", "WeeklySummary",
    "ConfigError", "ConflictError", "FormatError", "InvalidTimeError",
    "MissingProjectError", "NoOpenEntryError", "TempsError",
]
