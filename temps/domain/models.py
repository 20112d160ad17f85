"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
Entries come from a hand-editable text file, so every field is validated
when a line is turned into an Entry. Derived values (windows, totals) use
the same models so reports can be built and compared as plain data.
"""

import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Entry(BaseModel):
    """
    One recorded or in-progress time interval against a project.

    ``end`` is None exactly when the entry is the running timer. Entries are
    frozen: closing an entry produces a new Entry with ``end`` set.
    """
    model_config = ConfigDict(frozen=True)

    project: str = Field(..., min_length=1)
    start: datetime.datetime
    end: Optional[datetime.datetime] = None

    @model_validator(mode="after")
    def _check_interval(self) -> "Entry":
        if self.start.tzinfo is None:
            raise ValueError("start has no UTC offset")
        if self.end is not None:
            if self.end.tzinfo is None:
                raise ValueError("end has no UTC offset")
            if self.end < self.start:
                raise ValueError(
                    f"end {self.end.isoformat()} is before start {self.start.isoformat()}"
                )
        return self

    @property
    def is_ongoing(self) -> bool:
        """Check whether the entry is still tracking time"""
        return self.end is None

    def effective_end(self, now: datetime.datetime) -> datetime.datetime:
        """The recorded end, or ``now`` for the running timer"""
        return self.end if self.end is not None else now

    def span(
        self, window: "DayWindow", now: datetime.datetime
    ) -> Optional[Tuple[datetime.datetime, datetime.datetime]]:
        """
        Intersect the entry with a window.

        Args:
            window: The window to clip against
            now: Current instant, used as the end of an open entry

        Returns:
            (start, end) of the effective span, or None if it is empty
        """
        return window.clip(self.start, self.effective_end(now))


class DayWindow(BaseModel):
    """
    Half-open time range [start, end) used to scope a report.

    A missing bound means the window is unbounded on that side.
    """
    model_config = ConfigDict(frozen=True)

    start: Optional[datetime.datetime] = None
    end: Optional[datetime.datetime] = None

    @classmethod
    def unbounded(cls) -> "DayWindow":
        return cls()

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, instant: datetime.datetime) -> bool:
        if self.start is not None and instant < self.start:
            return False
        if self.end is not None and instant >= self.end:
            return False
        return True

    def clip(
        self, start: datetime.datetime, end: datetime.datetime
    ) -> Optional[Tuple[datetime.datetime, datetime.datetime]]:
        """Clip [start, end) to the window; None when nothing is left"""
        if self.start is not None and start < self.start:
            start = self.start
        if self.end is not None and end > self.end:
            end = self.end
        if end <= start:
            return None
        return start, end


class ProjectTotal(BaseModel):
    """Time spent on one project inside a window"""
    project: str
    duration: datetime.timedelta = datetime.timedelta(0)


class Ongoing(BaseModel):
    """The running timer as shown under a report"""
    project: str
    start: datetime.datetime
    elapsed: datetime.timedelta


class Summary(BaseModel):
    """
    Per-project totals for a single window.

    Rows are sorted by project name. ``ongoing`` is set only when the open
    entry overlaps the window; its elapsed time is not clipped.
    """
    window: DayWindow
    rows: List[ProjectTotal] = Field(default_factory=list)
    ongoing: Optional[Ongoing] = None

    @property
    def total(self) -> datetime.timedelta:
        return sum((row.duration for row in self.rows), datetime.timedelta(0))


class WeeklyRow(BaseModel):
    """One project's time for each day of a week"""
    project: str
    durations: List[datetime.timedelta]

    @property
    def total(self) -> datetime.timedelta:
        return sum(self.durations, datetime.timedelta(0))


class WeeklySummary(BaseModel):
    """Per-project, per-day totals for a seven day window"""
    window: DayWindow
    days: List[datetime.date]
    rows: List[WeeklyRow] = Field(default_factory=list)
    ongoing: Optional[Ongoing] = None

    @property
    def daily_totals(self) -> List[datetime.timedelta]:
        totals = [datetime.timedelta(0)] * len(self.days)
        for row in self.rows:
            totals = [a + b for a, b in zip(totals, row.durations)]
        return totals

    @property
    def total(self) -> datetime.timedelta:
        return sum(self.daily_totals, datetime.timedelta(0))
