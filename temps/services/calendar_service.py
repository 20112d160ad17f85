"""
Calendar Service - Maps instants to logical days and weeks.

Architecture Decision: Injected time zone
The local zone defaults to the system zone but can be passed in, so day
boundaries are deterministic in tests.
"""

import datetime
from typing import List, Optional

from temps.domain.exceptions import ConfigError
from temps.domain.models import DayWindow

ONE_DAY = datetime.timedelta(days=1)


class CalendarService:
    """
    Handles day boundary logic.

    A logical day D covers [cutoff(D), cutoff(D + 1)) where cutoff(D) is local
    midnight of D shifted by the midnight offset.
    """

    def __init__(self, midnight_offset: datetime.timedelta = datetime.timedelta(0),
                 first_weekday: int = 0, tz: Optional[datetime.tzinfo] = None):
        """
        Initialize the calendar.

        Args:
            midnight_offset: Time after midnight at which a day ends (0 <= offset < 24h)
            first_weekday: First day of a week, 0 = Monday ... 6 = Sunday
            tz: Local time zone; None uses the system zone
        """
        if not datetime.timedelta(0) <= midnight_offset < ONE_DAY:
            raise ConfigError(f"Midnight offset must be between 00:00 and 24:00, got {midnight_offset}")
        if not 0 <= first_weekday <= 6:
            raise ConfigError(f"First weekday must be between 0 and 6, got {first_weekday}")

        self.midnight_offset = midnight_offset
        self.first_weekday = first_weekday
        self.tz = tz

    def localize(self, naive: datetime.datetime) -> datetime.datetime:
        """
        Attach the local zone to a wall-clock datetime.

        The result carries a fixed UTC offset, so differences between two
        results are exact across a DST change.
        """
        if self.tz is None:
            return naive.astimezone()
        aware = naive.replace(tzinfo=self.tz)
        return aware.astimezone(datetime.timezone(aware.utcoffset()))

    def to_local(self, instant: datetime.datetime) -> datetime.datetime:
        """Convert an aware datetime to the local zone"""
        return instant.astimezone(self.tz)

    def day_of(self, instant: datetime.datetime) -> datetime.date:
        """Logical day containing the instant, on the local wall clock"""
        wall = self.to_local(instant).replace(tzinfo=None)
        return (wall - self.midnight_offset).date()

    def cutoff(self, day: datetime.date) -> datetime.datetime:
        """Instant at which the logical day starts: midnight plus the offset, local time"""
        return self.localize(datetime.datetime.combine(day, datetime.time()) + self.midnight_offset)

    def window(self, day: datetime.date) -> DayWindow:
        """Window covering one logical day"""
        return DayWindow(start=self.cutoff(day), end=self.cutoff(day + ONE_DAY))

    def week_start(self, day: datetime.date) -> datetime.date:
        """First day of the week containing ``day``"""
        return day - datetime.timedelta(days=(day.weekday() - self.first_weekday) % 7)

    def week_of(self, instant: datetime.datetime) -> datetime.date:
        """First day of the week containing the instant's logical day"""
        return self.week_start(self.day_of(instant))

    def week_days(self, first_day: datetime.date) -> List[datetime.date]:
        return [first_day + datetime.timedelta(days=i) for i in range(7)]

    def week_window(self, first_day: datetime.date) -> DayWindow:
        """Window covering the seven logical days starting at ``first_day``"""
        return DayWindow(start=self.cutoff(first_day),
                         end=self.cutoff(first_day + datetime.timedelta(days=7)))

    def resolve_time(self, time: datetime.time, now: datetime.datetime) -> datetime.datetime:
        """
        Place a time of day inside the current logical day.

        With an offset of 02:00, "01:30" typed at 23:00 means 01:30 on the
        next calendar date, since the day has not ended yet.

        Args:
            time: Wall-clock time
            now: Current instant

        Returns:
            The aware instant with that wall-clock time inside today's window
        """
        today = self.day_of(now)
        candidate = self.localize(datetime.datetime.combine(today, time))
        if candidate < self.cutoff(today):
            candidate = self.localize(datetime.datetime.combine(today + ONE_DAY, time))
        return candidate
