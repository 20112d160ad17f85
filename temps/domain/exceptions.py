"""
Error kinds raised by the core.

Every error is a TempsError so the command line can report it in one place.
"""

from typing import Optional

from temps.domain.models import Entry


class TempsError(Exception):
    """Base class for all errors reported to the user"""


class FormatError(TempsError):
    """A malformed log line, or an interval that ends before it starts"""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class ConflictError(TempsError):
    """A second timer was opened while one is still running"""

    def __init__(self, entry: Entry):
        self.entry = entry
        super().__init__(
            f"'{entry.project}' is still running since {entry.start.isoformat()}; "
            "stop it before starting another timer"
        )


class NoOpenEntryError(TempsError):
    """Stop or cancel with no running timer"""

    def __init__(self, message: str = "No ongoing entry"):
        super().__init__(message)


class ConfigError(TempsError):
    """Invalid configuration value"""


class InvalidTimeError(TempsError):
    """A time that cannot be used for the requested command"""


class MissingProjectError(TempsError):
    """No project given and none to reuse from the log"""

    def __init__(self):
        super().__init__("Cannot infer project name, please specify")
