"""
Report Generation Service using Jinja2 templates.

Architecture Decision: Template Pattern
Totals are computed as plain data (Summary models); the text around the
tables comes from templates so the wording can change without touching
the aggregation.
"""

import datetime
import logging
from collections import defaultdict
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from temps.domain.models import DayWindow, Entry, Ongoing, ProjectTotal, Summary, WeeklyRow, WeeklySummary
from temps.services.calendar_service import CalendarService
from temps.services.table import Alignment, Table
from temps.utils import format_elapsed, format_hours, get_resource_path

logger = logging.getLogger(__name__)


class ReportMode(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    FULL = "full"


def find_open_entry(entries: Sequence[Entry]) -> Optional[Entry]:
    """The running timer is always the last entry"""
    if entries and entries[-1].is_ongoing:
        return entries[-1]
    return None


def ongoing_in(entries: Sequence[Entry], window: DayWindow, now: datetime.datetime) -> Optional[Ongoing]:
    """
    The running timer, if it overlaps the window.

    Elapsed time is measured from the real start, not from the window start.
    """
    entry = find_open_entry(entries)
    if entry is None or entry.span(window, now) is None:
        return None
    return Ongoing(project=entry.project, start=entry.start, elapsed=now - entry.start)


def summarize(entries: Sequence[Entry], window: DayWindow, now: datetime.datetime) -> Summary:
    """
    Sum the time spent on each project inside a window.

    Entries may be out of order or overlap; each one contributes its own
    clipped span.

    Args:
        entries: All entries of the log
        window: Window to report on
        now: Current instant, the end of the running timer

    Returns:
        Summary with rows sorted by project name
    """
    totals: Dict[str, datetime.timedelta] = defaultdict(datetime.timedelta)
    for entry in entries:
        span = entry.span(window, now)
        if span is None:
            continue
        start, end = span
        totals[entry.project] += end - start

    rows = [ProjectTotal(project=project, duration=duration) for project, duration in sorted(totals.items())]
    return Summary(window=window, rows=rows, ongoing=ongoing_in(entries, window, now))


def summarize_week(entries: Sequence[Entry], calendar: CalendarService,
                   first_day: datetime.date, now: datetime.datetime) -> WeeklySummary:
    """Per-project totals for each logical day of a week"""
    days = calendar.week_days(first_day)
    windows = [calendar.window(day) for day in days]

    per_project: Dict[str, List[datetime.timedelta]] = {}
    for entry in entries:
        for index, window in enumerate(windows):
            span = entry.span(window, now)
            if span is None:
                continue
            start, end = span
            durations = per_project.setdefault(entry.project, [datetime.timedelta(0)] * len(days))
            durations[index] += end - start

    week_window = calendar.week_window(first_day)
    rows = [WeeklyRow(project=project, durations=durations) for project, durations in sorted(per_project.items())]
    return WeeklySummary(window=week_window, days=days, rows=rows,
                         ongoing=ongoing_in(entries, week_window, now))


class ReportService:
    """
    Builds daily, weekly and all-time reports from the entries of a log.
    """

    def __init__(self, calendar: CalendarService, template_dir: Optional[Path] = None):
        """
        Initialize the report service.

        Args:
            calendar: Day boundary rules
            template_dir: Directory containing Jinja2 templates
        """
        if template_dir is None:
            template_dir = get_resource_path("resources/templates")

        self.calendar = calendar
        self.template_dir = template_dir

        # Setup Jinja2 environment
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True
        )

        # Add custom filters
        self.env.filters['format_hours'] = format_hours
        self.env.filters['format_elapsed'] = format_elapsed
        self.env.filters['format_date'] = self._format_date

    @staticmethod
    def _format_date(value: datetime.date, fmt: str = "%b %d") -> str:
        return value.strftime(fmt)

    def daily(self, entries: Sequence[Entry], now: datetime.datetime,
              day: Optional[datetime.date] = None) -> Summary:
        """Totals for one logical day, today by default"""
        if day is None:
            day = self.calendar.day_of(now)
        return summarize(entries, self.calendar.window(day), now)

    def weekly(self, entries: Sequence[Entry], now: datetime.datetime,
               day: Optional[datetime.date] = None) -> WeeklySummary:
        """Totals for the week containing ``day``, this week by default"""
        if day is None:
            day = self.calendar.day_of(now)
        return summarize_week(entries, self.calendar, self.calendar.week_start(day), now)

    def full(self, entries: Sequence[Entry], now: datetime.datetime) -> Summary:
        """Totals over the whole log"""
        return summarize(entries, DayWindow.unbounded(), now)

    def generate_report(self, mode: ReportMode, entries: Sequence[Entry],
                        now: datetime.datetime, day: Optional[datetime.date] = None) -> str:
        """
        Generate report text.

        Args:
            mode: Daily, weekly or full report
            entries: All entries of the log
            now: Current instant
            day: Reference day for daily and weekly reports

        Returns:
            The report, ending with a newline
        """
        logger.debug(f"Generating {mode.value} report for {day or 'today'}")
        if mode == ReportMode.WEEKLY:
            return self.render_weekly(self.weekly(entries, now, day))
        if mode == ReportMode.FULL:
            return self.render_full(self.full(entries, now))

        if day is None:
            day = self.calendar.day_of(now)
        return self.render_daily(self.daily(entries, now, day), day)

    def _totals_table(self, summary: Summary) -> Table:
        table = Table(["Project", "Hours"], [Alignment.LEFT, Alignment.RIGHT])
        for row in summary.rows:
            table.row([row.project, format_hours(row.duration)])
        table.blank_row()
        table.row(["TOTAL", format_hours(summary.total)])
        return table

    def render_daily(self, summary: Summary, day: datetime.date) -> str:
        return self._render("daily_summary.txt", day=day, table=self._totals_table(summary),
                            ongoing=summary.ongoing)

    def render_full(self, summary: Summary) -> str:
        return self._render("full_summary.txt", table=self._totals_table(summary),
                            ongoing=summary.ongoing)

    def render_weekly(self, summary: WeeklySummary) -> str:
        headers = ["Project"] + [day.strftime("%A") for day in summary.days]
        alignments = [Alignment.LEFT] + [Alignment.RIGHT] * len(summary.days)
        table = Table(headers, alignments)
        for row in summary.rows:
            table.row([row.project] + [format_hours(d) for d in row.durations])
        table.blank_row()
        table.row(["TOTAL"] + [format_hours(d) for d in summary.daily_totals])

        return self._render("weekly_summary.txt", first_day=summary.days[0], table=table,
                            total=summary.total, ongoing=summary.ongoing)

    def _render(self, template_name: str, **context) -> str:
        template = self.env.get_template(template_name)
        return template.render(**context).rstrip("\n") + "\n"
