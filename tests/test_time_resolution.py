"""
Unit tests for time resolution.

Tests cover:
- Time string parsing and rejection of malformed times
- Date parsing with fallback to today
- Timezone resolution with fallback to process-local time
- Conversion to and from the naive UTC storage form
"""
import pytest
from datetime import date, time, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from availability_engine.error_handling.exceptions import InvalidTimeError, TimezoneResolutionError
from availability_engine.services.time_resolution import (
    DUMMY_DATE,
    load_zone,
    resolve_zone,
    today_in_zone,
    parse_date,
    parse_time,
    combine_local,
    resolve_instant,
    local_day_bounds,
    wall_clock,
    day_of_week,
    to_storage,
    from_storage,
)


class TestParseTime:
    """Test wall-clock time parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("9:05", time(9, 5)),
        ("18:30", time(18, 30)),
        ("07:00", time(7, 0)),
        ("18:30:15", time(18, 30, 15)),
        ("7:15 PM", time(19, 15)),
        ("12:00 am", time(0, 0)),
        (" 11:00 ", time(11, 0)),
    ])
    def test_valid_times(self, value, expected):
        """Test H:MM and HH:MM forms plus tolerated variants."""
        assert parse_time(value) == expected

    @pytest.mark.parametrize("value", ["25:00", "12:60", "noon", "1230", "", None, "13:00 PM"])
    def test_invalid_times_raise(self, value):
        """Test that times without a valid hour and minute are rejected."""
        with pytest.raises(InvalidTimeError) as exc_info:
            parse_time(value)
        assert exc_info.value.field == "time"

    def test_time_instance_passes_through(self):
        """Test that time objects are accepted and stripped of tzinfo."""
        value = time(18, 0, tzinfo=timezone.utc)
        assert parse_time(value) == time(18, 0)
        assert parse_time(value).tzinfo is None


class TestParseDate:
    """Test calendar date parsing."""

    @pytest.mark.parametrize("value", ["2024-06-01", "2024/06/01", "06/01/2024", "2024-06-01T18:30:00"])
    def test_supported_formats(self, value):
        assert parse_date(value) == date(2024, 6, 1)

    def test_date_instance_passes_through(self):
        assert parse_date(date(2024, 6, 1)) == date(2024, 6, 1)
        assert parse_date(datetime(2024, 6, 1, 18, 30)) == date(2024, 6, 1)

    @pytest.mark.parametrize("value", ["not a date", "2024-13-45", "", None])
    def test_unparseable_date_falls_back_to_today(self, value):
        """Test that bad dates resolve to today in the given zone."""
        zone = ZoneInfo("Pacific/Guam")
        assert parse_date(value, zone) == today_in_zone(zone)


class TestZoneResolution:
    """Test restaurant timezone resolution."""

    def test_load_known_zone(self):
        assert load_zone("Pacific/Guam") == ZoneInfo("Pacific/Guam")

    @pytest.mark.parametrize("name", ["Mars/Olympus_Mons", "", None])
    def test_load_unknown_zone_raises(self, name):
        with pytest.raises(TimezoneResolutionError):
            load_zone(name)

    def test_resolve_unknown_zone_returns_none(self):
        """Test that an unknown zone means process-local time."""
        assert resolve_zone("Mars/Olympus_Mons") is None
        assert resolve_zone(None) is None

    def test_resolve_instant_in_named_zone(self):
        instant = resolve_instant("2024-06-01", "18:30", "Pacific/Guam")
        assert instant.utcoffset() == timedelta(hours=10)
        assert (instant.hour, instant.minute) == (18, 30)

    def test_resolve_instant_with_unknown_zone_is_still_aware(self):
        """Test the local-time fallback keeps the wall-clock moment."""
        instant = resolve_instant("2024-06-01", "18:30", "Mars/Olympus_Mons")
        assert instant.tzinfo is not None
        assert (instant.date(), instant.hour, instant.minute) == (date(2024, 6, 1), 18, 30)

    def test_resolve_instant_bad_time_raises(self):
        with pytest.raises(InvalidTimeError):
            resolve_instant("2024-06-01", "half past six", "Pacific/Guam")


class TestCalendarHelpers:
    """Test day arithmetic and wall-clock comparison helpers."""

    @pytest.mark.parametrize("day,expected", [
        (date(2024, 6, 2), 0),  # Sunday
        (date(2024, 6, 3), 1),
        (date(2024, 6, 1), 6),  # Saturday
    ])
    def test_day_of_week_starts_on_sunday(self, day, expected):
        assert day_of_week(day) == expected

    def test_wall_clock_ignores_date(self):
        assert wall_clock(time(11, 0)) == datetime.combine(DUMMY_DATE, time(11, 0))
        assert wall_clock(time(11, 0)) < wall_clock(time(22, 0))

    def test_local_day_bounds(self):
        zone = ZoneInfo("Pacific/Guam")
        start, end = local_day_bounds(date(2024, 6, 1), zone)
        assert start == datetime(2024, 6, 1, tzinfo=zone)
        assert end - start == timedelta(days=1)

    def test_combine_local_across_dst_keeps_wall_clock(self):
        zone = ZoneInfo("America/New_York")
        winter = combine_local(date(2024, 1, 15), time(18, 0), zone)
        summer = combine_local(date(2024, 7, 15), time(18, 0), zone)
        assert winter.hour == summer.hour == 18
        assert winter.utcoffset() != summer.utcoffset()


class TestStorageConversion:
    """Test the naive UTC storage boundary."""

    def test_to_storage_converts_to_naive_utc(self):
        instant = datetime(2024, 6, 1, 12, 0, tzinfo=ZoneInfo("Pacific/Guam"))
        assert to_storage(instant) == datetime(2024, 6, 1, 2, 0)

    def test_from_storage_attaches_utc(self):
        value = from_storage(datetime(2024, 6, 1, 2, 0))
        assert value.tzinfo is timezone.utc
        assert value == datetime(2024, 6, 1, 12, 0, tzinfo=ZoneInfo("Pacific/Guam"))

    def test_round_trip_preserves_instant(self):
        instant = resolve_instant("2024-06-01", "21:30", "Pacific/Guam")
        assert from_storage(to_storage(instant)) == instant
