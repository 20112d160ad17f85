"""
Timeline Service - Renders one day of entries as a vertical text chart.

Each output row stands for a fixed slice of time. Every entry is drawn in
its own lane, so overlapping entries show up side by side instead of being
merged. The height of a block glyph shows how much of the slice an entry
covers.

Example (30 minute rows)::

    08:00
          ▄▄▄▄▄▄▄▄ world domination
          ████████
    10:00 ████████
          ████████ ████████ studying / reading
"""

import datetime
import logging
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from temps.domain.models import DayWindow, Entry

logger = logging.getLogger(__name__)

# Ordered from empty through full block
PALETTE = " ▁▂▃▄▅▆▇█"
FULL = len(PALETTE) - 1
AXIS_WIDTH = 6
LABEL_INTERVAL = datetime.timedelta(hours=2)


class Segment(BaseModel):
    """An entry clipped to the window, placed in a lane"""
    project: str
    start: datetime.datetime
    end: datetime.datetime
    lane: int = 0


class TimelineRow(BaseModel):
    """Occupancy of one time slice"""
    start: datetime.datetime
    axis_label: Optional[str] = None
    coverage: List[float] = Field(default_factory=list)  # per lane, 0.0 to 1.0
    projects: List[str] = Field(default_factory=list)    # active projects, by lane then start


def glyph(fraction: float) -> str:
    """
    Block glyph for the covered fraction of a row.

    Any coverage shows at least the lowest block, and only a fully covered
    row gets the full block.
    """
    if fraction <= 0:
        return PALETTE[0]
    if fraction >= 1:
        return PALETTE[FULL]
    index = round(fraction * FULL)
    return PALETTE[min(max(index, 1), FULL - 1)]


def assign_lanes(segments: List[Segment]) -> List[Segment]:
    """Put each segment in the lowest lane that is free at its start"""
    ordered = sorted(segments, key=lambda s: (s.start, s.end, s.project))
    lane_ends: List[datetime.datetime] = []
    placed = []
    for segment in ordered:
        for lane, lane_end in enumerate(lane_ends):
            if lane_end <= segment.start:
                break
        else:
            lane = len(lane_ends)
            lane_ends.append(segment.end)
        lane_ends[lane] = segment.end
        placed.append(segment.model_copy(update={"lane": lane}))
    return placed


class TimelineService:
    """
    Converts a day's entries into timeline rows and rows into text.

    Holds configuration only; rendering the same input twice gives the same text.
    Rows are laid out on the local clock, so axis labels always name full hours.
    """

    def __init__(self, row_minutes: int = 30, lane_width: int = 8,
                 tz: Optional[datetime.tzinfo] = None):
        """
        Args:
            row_minutes: Minutes per row; must divide 120
            lane_width: Characters per lane
            tz: Zone of the axis labels; None uses the system zone
        """
        if row_minutes <= 0 or LABEL_INTERVAL % datetime.timedelta(minutes=row_minutes):
            raise ValueError(f"Row length of {row_minutes} minutes does not divide {LABEL_INTERVAL}")
        self.quantum = datetime.timedelta(minutes=row_minutes)
        self.rows_per_label = LABEL_INTERVAL // self.quantum
        self.lane_width = lane_width
        self.tz = tz

    def segments(self, entries: Sequence[Entry], window: DayWindow,
                 now: datetime.datetime) -> List[Segment]:
        """Clip entries to the window and assign lanes"""
        segments = []
        for entry in entries:
            span = entry.span(window, now)
            if span is not None:
                segments.append(Segment(project=entry.project, start=span[0], end=span[1]))
        return assign_lanes(segments)

    def build_rows(self, entries: Sequence[Entry], window: DayWindow,
                   now: datetime.datetime) -> List[TimelineRow]:
        """
        Compute per-row occupancy for a day.

        Args:
            entries: Entries of the log, in any order
            window: The day's window; must be bounded
            now: Current instant, the end of the running timer

        Returns:
            Rows from the axis label before the first entry through the row
            holding the last entry's end. Rows count from local midnight of the
            window's first day; the first one may start before the window.
        """
        if not window.is_bounded:
            raise ValueError("A timeline needs a bounded window")

        segments = self.segments(entries, window, now)
        if not segments:
            return []

        midnight = window.start.astimezone(self.tz).replace(hour=0, minute=0, second=0, microsecond=0)
        origin = midnight.astimezone(datetime.timezone.utc)
        lanes = max(s.lane for s in segments) + 1

        first = min(s.start for s in segments) - origin
        last = max(s.end for s in segments) - origin
        first_row = (first // self.quantum) // self.rows_per_label * self.rows_per_label
        end_row = -(-last // self.quantum)

        rows = []
        for index in range(first_row, end_row):
            row_start = origin + index * self.quantum
            row_end = row_start + self.quantum

            coverage = [datetime.timedelta(0)] * lanes
            active: List[Tuple[int, datetime.datetime, str]] = []
            for segment in segments:
                overlap = min(segment.end, row_end) - max(segment.start, row_start)
                if overlap > datetime.timedelta(0):
                    coverage[segment.lane] += overlap
                    active.append((segment.lane, segment.start, segment.project))

            projects: List[str] = []
            for _, _, project in sorted(active):
                if project not in projects:
                    projects.append(project)

            local_start = row_start.astimezone(self.tz)
            axis_label = None
            if self._on_label(local_start):
                axis_label = local_start.strftime("%H:%M")

            rows.append(TimelineRow(
                start=local_start,
                axis_label=axis_label,
                coverage=[c / self.quantum for c in coverage],
                projects=projects,
            ))

        logger.debug(f"Timeline has {len(rows)} rows and {lanes} lanes")
        return rows

    @staticmethod
    def _on_label(local: datetime.datetime) -> bool:
        """Check whether a local time falls on an axis label"""
        since_midnight = datetime.timedelta(hours=local.hour, minutes=local.minute, seconds=local.second)
        return since_midnight % LABEL_INTERVAL == datetime.timedelta(0)

    def render(self, rows: Sequence[TimelineRow]) -> str:
        """
        Format rows as text.

        A label is printed whenever the set of active projects differs from
        the previous row's.
        """
        lines = []
        previous: Tuple[str, ...] = ()
        for row in rows:
            axis = (row.axis_label or "").ljust(AXIS_WIDTH)
            bars = " ".join(glyph(fraction) * self.lane_width for fraction in row.coverage)
            line = axis + bars

            current = tuple(row.projects)
            if current and current != previous:
                line += " " + " / ".join(current)
            previous = current

            lines.append(line.rstrip())

        if not lines:
            return ""
        return "\n".join(lines) + "\n"

    def render_day(self, entries: Sequence[Entry], window: DayWindow,
                   now: datetime.datetime) -> str:
        return self.render(self.build_rows(entries, window, now))
