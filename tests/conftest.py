"""
Pytest configuration and fixtures.
"""

import datetime
import sys
from pathlib import Path

import pytest

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from temps.domain.models import Entry
from temps.infra.repository import EntryStore
from temps.services.calendar_service import CalendarService

TZ = datetime.timezone(datetime.timedelta(hours=2))


def at(day: int, hour: int, minute: int = 0, second: int = 0, month: int = 5) -> datetime.datetime:
    """An instant in May 2024, in the test zone"""
    return datetime.datetime(2024, month, day, hour, minute, second, tzinfo=TZ)


def entry(project: str, start: datetime.datetime, end=None) -> Entry:
    return Entry(project=project, start=start, end=end)


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def now():
    """Monday, May 6th 2024, 15:00"""
    return at(6, 15)


@pytest.fixture
def calendar():
    return CalendarService(tz=TZ)


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "temps.tsv"


@pytest.fixture
def store(log_path):
    return EntryStore(log_path)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's own configuration out of the tests"""
    monkeypatch.setenv("TEMPS_CONFIG_FILE", str(tmp_path / "no-such-settings.yaml"))
    for name in ("TEMPS_FILE", "TEMPS_MIDNIGHT_OFFSET", "TEMPS_FIRST_WEEKDAY",
                 "TEMPS_TIMELINE_ROW_MINUTES", "TEMPS_TIMELINE_LANE_WIDTH"):
        monkeypatch.delenv(name, raising=False)
