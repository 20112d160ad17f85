"""Infrastructure layer - Configuration and persistence"""

from .config import Settings, load_settings
from .repository import EntryStore, format_log, parse_log

__all__ = ["Settings", "load_settings", "EntryStore", "format_log", "parse_log"]
