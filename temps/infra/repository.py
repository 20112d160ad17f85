"""
Entry Store - the tab-separated interval log.

Architecture Decision: Why a flat file?
The log is meant to be read and fixed by hand, so it stays a plain TSV file
with one entry per line. The store is an ordered list plus a derived
"open entry" accessor; nothing else is cached, so there is a single source
of truth.

Format, a header line followed by one entry per line::

    project\\tstart\\tend
    <project>\\t<start>\\t<end or empty>

Timestamps are RFC3339 with seconds precision and the offset the entry was
recorded with. Only that exact form is accepted, so a file that loads is
written back unchanged. Files without the header line are read as well and
stay without it.
"""

import contextlib
import csv
import datetime
import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from temps.domain.exceptions import ConflictError, FormatError, NoOpenEntryError
from temps.domain.models import Entry

logger = logging.getLogger(__name__)

HEADER = ["project", "start", "end"]


def format_timestamp(value: datetime.datetime) -> str:
    return value.isoformat(timespec="seconds")


def parse_timestamp(value: str, line: int) -> datetime.datetime:
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError:
        raise FormatError(f"invalid timestamp '{value}'", line) from None
    if parsed.tzinfo is None:
        raise FormatError(f"timestamp '{value}' has no UTC offset", line)
    if format_timestamp(parsed) != value:
        raise FormatError(
            f"timestamp '{value}' is not in the form {format_timestamp(parsed)}", line
        )
    return parsed


def _rows(text: str) -> Iterator[Tuple[int, List[str]]]:
    """Non-blank rows with their 1-based line numbers"""
    reader = csv.reader(io.StringIO(text), delimiter="\t")
    for row in reader:
        if not row or row == [""]:
            continue
        yield reader.line_num, row


def has_header(text: str) -> bool:
    """Check whether the first non-blank line is the column header"""
    for _, row in _rows(text):
        return row == HEADER
    return False


def parse_log(text: str) -> List[Entry]:
    """
    Parse the content of a log file.

    Args:
        text: Whole file content

    Returns:
        Entries in file order

    Raises:
        FormatError: On the first malformed line, naming its line number
    """
    entries: List[Entry] = []
    open_line: Optional[int] = None

    for index, (line, row) in enumerate(_rows(text)):
        if index == 0 and row == HEADER:
            continue
        if open_line is not None:
            raise FormatError("an entry without end is followed by more entries", open_line)
        if len(row) != 3:
            raise FormatError(f"expected 3 tab-separated fields, found {len(row)}", line)

        project, start, end = row
        try:
            entry = Entry(
                project=project,
                start=parse_timestamp(start, line),
                end=parse_timestamp(end, line) if end else None,
            )
        except ValidationError as e:
            raise FormatError(e.errors()[0]["msg"], line) from None

        if entry.is_ongoing:
            open_line = line
        entries.append(entry)

    return entries


def format_log(entries: Sequence[Entry], header: bool = True) -> str:
    """Serialize entries into the log format"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter="\t", lineterminator="\n")
    if header:
        writer.writerow(HEADER)
    for entry in entries:
        writer.writerow([
            entry.project,
            format_timestamp(entry.start),
            format_timestamp(entry.end) if entry.end is not None else "",
        ])
    return buffer.getvalue()


class EntryStore:
    """
    Holds the ordered entries of one log file.

    At most one entry is open, and it is always the last one. Changes are
    kept in memory until ``save()`` rewrites the whole file. ``header`` records
    whether the file starts with the column header; new and empty files get one.
    """

    def __init__(self, path: Path, entries: Optional[Sequence[Entry]] = None, header: bool = True):
        self.path = Path(path)
        self.entries: List[Entry] = list(entries or [])
        self.header = header

    @property
    def open_entry(self) -> Optional[Entry]:
        """The running timer, if any"""
        if self.entries and self.entries[-1].is_ongoing:
            return self.entries[-1]
        return None

    @property
    def last_entry(self) -> Optional[Entry]:
        return self.entries[-1] if self.entries else None

    def load(self) -> List[Entry]:
        """Read the log file; a missing file is an empty log"""
        if not self.path.exists():
            logger.debug(f"No log file at {self.path}, starting empty")
            self.entries = []
            self.header = True
            return self.entries

        with open(self.path, 'r', encoding='utf-8', newline='') as f:
            text = f.read()
        try:
            self.entries = parse_log(text)
            self.header = has_header(text) or not text.strip()
        except FormatError:
            logger.error(f"Could not parse {self.path}")
            raise

        logger.debug(f"Loaded {len(self.entries)} entries from {self.path}")
        return self.entries

    def save(self) -> None:
        """Rewrite the log file atomically"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as tmp:
                tmp.write(format_log(self.entries, self.header))
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            raise

        logger.info(f"Saved {len(self.entries)} entries to {self.path}")

    @contextlib.contextmanager
    def session(self) -> Iterator["EntryStore"]:
        """
        Load, hand the store to the caller, and save only if the caller succeeded.

        A command that raises leaves the file untouched.
        """
        self.load()
        yield self
        self.save()

    def append(self, project: str, start: datetime.datetime) -> Entry:
        """
        Add a new open entry.

        Raises:
            ConflictError: If a timer is already running
        """
        current = self.open_entry
        if current is not None:
            raise ConflictError(current)

        try:
            entry = Entry(project=project, start=start.replace(microsecond=0))
        except ValidationError as e:
            raise FormatError(e.errors()[0]["msg"]) from None
        self.entries.append(entry)
        logger.info(f"Started '{entry.project}' at {format_timestamp(entry.start)}")
        return entry

    def close(self, end: datetime.datetime) -> Entry:
        """
        Set the end of the open entry.

        Raises:
            NoOpenEntryError: If no timer is running
            FormatError: If ``end`` is before the entry's start
        """
        current = self.open_entry
        if current is None:
            raise NoOpenEntryError()

        try:
            closed = Entry(project=current.project, start=current.start, end=end.replace(microsecond=0))
        except ValidationError as e:
            raise FormatError(e.errors()[0]["msg"]) from None
        self.entries[-1] = closed
        logger.info(f"Stopped '{closed.project}' at {format_timestamp(closed.end)}")
        return closed

    def cancel(self) -> Entry:
        """
        Remove the open entry.

        Returns:
            The removed entry

        Raises:
            NoOpenEntryError: If no timer is running
        """
        if self.open_entry is None:
            raise NoOpenEntryError()

        entry = self.entries.pop()
        logger.info(f"Cancelled '{entry.project}' started at {format_timestamp(entry.start)}")
        return entry
