"""
Pytest configuration and fixtures
"""
import pytest
from datetime import date, datetime

import pytz
import structlog

from event_parser.utils.config import Config, ParserConfig, CalendarConfig


@pytest.fixture(autouse=True)
def _restore_structlog_config():
    """Undo global structlog configuration changed during a test (e.g. by the CLI)"""
    saved = structlog.get_config()
    yield
    structlog.configure(**saved)


@pytest.fixture
def reference():
    """Thursday 2021-06-10 09:00, naive (floating local time)"""
    return datetime(2021, 6, 10, 9, 0, 0)


@pytest.fixture
def reference_date():
    """Thursday 2021-06-10"""
    return date(2021, 6, 10)


@pytest.fixture
def aware_reference():
    """Thursday 2021-06-10 09:00 in New York"""
    return pytz.timezone("America/New_York").localize(datetime(2021, 6, 10, 9, 0, 0))


@pytest.fixture
def stamp():
    """Fixed DTSTAMP value"""
    return datetime(2021, 1, 1, 0, 0, 0, tzinfo=pytz.UTC)


@pytest.fixture
def test_config():
    """Test configuration"""
    return Config(
        parser=ParserConfig(
            default_duration_minutes=60,
            bare_hour_pm_cutoff=9,
            timezone="UTC"
        ),
        calendar=CalendarConfig(
            product_id="-//Test//Event Parser Tests//EN",
            name="Test Calendar"
        )
    )
