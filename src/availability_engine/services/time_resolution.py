"""
Time resolution - turns date/time strings into timezone-aware instants.

A restaurant's wall-clock moment is resolved in the restaurant's named
timezone. When that zone cannot be loaded the process's local time is used
instead, and an unparseable date falls back to today. Stored timestamps are
naive UTC; to_storage() and from_storage() convert at that boundary.
"""
import re
from datetime import date, time, datetime, timedelta, timezone, tzinfo
from typing import Any, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger

from ..error_handling.exceptions import InvalidTimeError, TimezoneResolutionError

# Wall-clock times are compared on this date so only time-of-day matters
DUMMY_DATE = date(2000, 1, 1)

DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y")

_TIME_PATTERN = re.compile(
    r"^\s*(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?\s*(?P<meridiem>[AaPp][Mm])?\s*$"
)


def load_zone(time_zone: Optional[str]) -> ZoneInfo:
    """
    Load a named timezone.

    Raises:
        TimezoneResolutionError: If the name is empty or unknown
    """
    if not time_zone:
        raise TimezoneResolutionError(time_zone)
    try:
        return ZoneInfo(time_zone)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise TimezoneResolutionError(time_zone, original_error=e)


def resolve_zone(time_zone: Optional[str]) -> Optional[tzinfo]:
    """
    Resolve a restaurant's timezone, or None to use process-local time.

    Args:
        time_zone: IANA zone name such as "Pacific/Guam"

    Returns:
        The zone, or None if absent or unknown
    """
    if not time_zone:
        return None
    try:
        return load_zone(time_zone)
    except TimezoneResolutionError as e:
        logger.warning(f"Falling back to local time: {e.message}")
        return None


def today_in_zone(zone: Optional[tzinfo]) -> date:
    return datetime.now(zone).date() if zone else date.today()


def parse_date(value: Any, zone: Optional[tzinfo] = None) -> date:
    """
    Parse a calendar date, falling back to today when it can't be read.

    Args:
        value: date, datetime or ISO-ish string ("2024-06-01", "2024/06/01",
               "06/01/2024")
        zone: Zone whose "today" is used for the fallback

    Returns:
        Parsed date, or today's date in zone
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip() if value is not None else ""
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    fallback = today_in_zone(zone)
    logger.warning(f"Unparseable date {value!r}, falling back to {fallback.isoformat()}")
    return fallback


def parse_time(value: Any) -> time:
    """
    Parse a wall-clock time in H:MM or HH:MM form.

    Seconds and an AM/PM suffix are tolerated.

    Args:
        value: time instance or string

    Returns:
        time without tzinfo

    Raises:
        InvalidTimeError: If value doesn't split into a valid hour and minute
    """
    if isinstance(value, datetime):
        return value.time().replace(tzinfo=None)
    if isinstance(value, time):
        return value.replace(tzinfo=None)

    match = _TIME_PATTERN.match(str(value)) if value is not None else None
    if not match:
        raise InvalidTimeError(value)

    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    second = int(match.group("second") or 0)
    meridiem = (match.group("meridiem") or "").lower()

    if meridiem:
        if not 1 <= hour <= 12:
            raise InvalidTimeError(value)
        hour = hour % 12 + (12 if meridiem == "pm" else 0)

    try:
        return time(hour=hour, minute=minute, second=second)
    except ValueError:
        raise InvalidTimeError(value)


def combine_local(day: date, wall_time: time, zone: Optional[tzinfo]) -> datetime:
    """
    Build the aware instant for a wall-clock moment on a day.

    With no zone the naive moment is interpreted in process-local time.
    """
    naive = datetime.combine(day, wall_time.replace(tzinfo=None))
    if zone is None:
        return naive.astimezone()
    return naive.replace(tzinfo=zone)


def resolve_instant(date_value: Any, time_value: Any, time_zone: Optional[str]) -> datetime:
    """
    Resolve a date string, a time string and a restaurant timezone into
    a single aware instant.

    Args:
        date_value: Date string (falls back to today if unparseable)
        time_value: "H:MM" or "HH:MM"
        time_zone: Restaurant's IANA zone name (falls back to local time)

    Returns:
        Timezone-aware datetime

    Raises:
        InvalidTimeError: If the time cannot be parsed
    """
    zone = resolve_zone(time_zone)
    day = parse_date(date_value, zone)
    wall_time = parse_time(time_value)
    return combine_local(day, wall_time, zone)


def local_day_bounds(day: date, zone: Optional[tzinfo]) -> Tuple[datetime, datetime]:
    """Aware [start, end) of a calendar day in the restaurant's zone."""
    start = combine_local(day, time(0, 0), zone)
    end = combine_local(day + timedelta(days=1), time(0, 0), zone)
    return start, end


def wall_clock(value: time) -> datetime:
    """Pin a time-of-day to DUMMY_DATE for date-independent comparisons."""
    return datetime.combine(DUMMY_DATE, value.replace(tzinfo=None))


def day_of_week(day: date) -> int:
    """Day index with 0=Sunday..6=Saturday."""
    return (day.weekday() + 1) % 7


def to_storage(instant: datetime) -> datetime:
    """Convert an aware instant to the naive UTC form stored in the database."""
    if instant.tzinfo is None:
        instant = instant.astimezone()
    return instant.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage(value: datetime) -> datetime:
    """Attach UTC to a stored naive timestamp."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc)
    return value.replace(tzinfo=timezone.utc)
