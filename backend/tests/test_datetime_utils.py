"""
Tests for datetime utilities module.
"""
from datetime import datetime, timedelta, timezone

import pytest

from screener.core.adaptive.session import create_session, elapsed_minutes
from screener.core.datetime_utils import ensure_timezone_aware, utc_now


class TestEnsureTimezoneAware:
    """Tests for ensure_timezone_aware function."""

    def test_naive_datetime_becomes_utc(self):
        """Test that a naive datetime is converted to UTC."""
        naive_dt = datetime(2024, 1, 15, 12, 30, 45)

        result = ensure_timezone_aware(naive_dt)

        assert result.tzinfo == timezone.utc
        assert result.replace(tzinfo=None) == naive_dt

    def test_utc_datetime_unchanged(self):
        """Test that a UTC datetime is returned unchanged."""
        utc_dt = datetime(2024, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
        assert ensure_timezone_aware(utc_dt) is utc_dt

    def test_non_utc_timezone_preserved(self):
        """Test that non-UTC timezone-aware datetimes are preserved."""
        tz_plus_5 = timezone(timedelta(hours=5))
        dt = datetime(2024, 1, 15, 12, 30, tzinfo=tz_plus_5)
        assert ensure_timezone_aware(dt).tzinfo == tz_plus_5

    def test_none_raises(self):
        with pytest.raises(ValueError, match="cannot be None"):
            ensure_timezone_aware(None)


class TestUtcNow:
    def test_is_timezone_aware(self):
        assert utc_now().tzinfo == timezone.utc


class TestElapsedWithNaiveTimestamps:
    """Sessions restored with naive timestamps are treated as UTC."""

    def test_naive_start_time(self):
        session = create_session("s", "Reading", "3")
        session.start_time = datetime(2026, 1, 5, 14, 0)
        now = datetime(2026, 1, 5, 14, 6, tzinfo=timezone.utc)

        assert elapsed_minutes(session, now=now) == pytest.approx(6.0)
