"""
Timer Service - Core time tracking logic.

Architecture Decision: Explicit clock
Every operation takes ``now`` as a parameter instead of reading the system
clock, so the rules can be tested with fixed instants.
"""

import datetime
import logging
from typing import Optional

from pydantic import BaseModel

from temps.domain.exceptions import InvalidTimeError, MissingProjectError
from temps.domain.models import Entry
from temps.infra.repository import EntryStore

logger = logging.getLogger(__name__)


class StartResult(BaseModel):
    """What ``start`` did, for confirmation messages"""
    started: Entry
    stopped: Optional[Entry] = None


class TimerService:
    """
    Start, stop and cancel timers on an EntryStore.

    Starting a timer while another one runs is done in two steps: the open
    entry is closed first, then the new one is appended.
    """

    def __init__(self, store: EntryStore):
        self.store = store

    def start(self, now: datetime.datetime, project: Optional[str] = None,
              start: Optional[datetime.datetime] = None) -> StartResult:
        """
        Start tracking time for a project.

        Args:
            now: Current instant; the running timer, if any, is stopped here
            project: Project name; defaults to the project of the last entry
            start: Start instant; defaults to ``now``

        Returns:
            The new entry, and the entry that was stopped to make room for it
        """
        if start is None:
            start = now
        if start > now:
            raise InvalidTimeError("Start date is in the future")

        if project is None:
            last = self.store.last_entry
            if last is None:
                raise MissingProjectError()
            project = last.project

        stopped = None
        if self.store.open_entry is not None:
            stopped = self.store.close(now)

        started = self.store.append(project, start)
        return StartResult(started=started, stopped=stopped)

    def stop(self, now: datetime.datetime, at: Optional[datetime.datetime] = None) -> Entry:
        """
        Stop the running timer.

        Args:
            now: Current instant
            at: Stop instant; defaults to ``now``
        """
        if at is None:
            at = now
        if at > now:
            raise InvalidTimeError("End date is in the future")

        current = self.store.open_entry
        if current is not None and at < current.start:
            raise InvalidTimeError(
                f"End date {at.isoformat()} is before start date {current.start.isoformat()}"
            )
        return self.store.close(at)

    def cancel(self) -> Entry:
        """Discard the running timer"""
        return self.store.cancel()
