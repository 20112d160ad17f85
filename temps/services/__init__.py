"""Services layer - Business logic"""

from .calendar_service import CalendarService
from .timer_service import TimerService
from .report_service import ReportMode, ReportService
from .timeline_service import TimelineService

__all__ = ["CalendarService", "TimerService", "ReportMode", "ReportService", "TimelineService"]
