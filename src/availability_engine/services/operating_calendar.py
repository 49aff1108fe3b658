"""
Operating calendar - decides whether a restaurant is open at a moment.

Checks run in a fixed order and the first that fails supplies the reason:
weekly hours for the day, blocked periods, the day's opening window, then
availability-affecting special events.
"""
from datetime import date, datetime, time
from typing import Any, List, Optional, Tuple

from loguru import logger

from ..config import DEFAULT_LISTING_OPEN_TIME, DEFAULT_LISTING_CLOSE_TIME
from ..error_handling import error_messages
from ..models.database import OperatingHour, SpecialEvent
from ..models.schemas import CalendarStatus, OperatingHoursDay
from .data_access import AvailabilityRepository
from .time_resolution import resolve_instant, wall_clock, day_of_week

DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


class OperatingCalendar:
    """
    Resolves opening status from weekly hours, blocked periods and
    special events.

    Args:
        repository: Data access scoped to the restaurant being queried
    """

    def __init__(self, repository: AvailabilityRepository):
        self.repository = repository

    def is_open(self, date_value: Any, time_value: Any, location_id: Optional[int] = None) -> CalendarStatus:
        """
        Check whether the restaurant is open at a date and time.

        Args:
            date_value: Date string (unparseable dates fall back to today)
            time_value: "H:MM" or "HH:MM"
            location_id: Optional location; restaurant-wide blocks always apply

        Returns:
            CalendarStatus with a reason when closed

        Raises:
            InvalidTimeError: If the time cannot be parsed
        """
        policy = self.repository.get_policy()
        instant = resolve_instant(date_value, time_value, policy.time_zone)
        return self.status_at(instant, location_id)

    def status_at(self, instant: datetime, location_id: Optional[int] = None) -> CalendarStatus:
        """
        Opening status at an aware instant expressed in the restaurant's zone.
        """
        day = instant.date()
        wall_time = instant.time().replace(tzinfo=None)

        window = self.opening_window(day)
        if window is None:
            return CalendarStatus(open=False, reason=error_messages.CLOSED_ON_DAY)

        blocks = self.repository.find_blocking_periods(instant, location_id)
        if blocks:
            logger.debug(f"{len(blocks)} blocked period(s) cover {instant.isoformat()}")
            return CalendarStatus(open=False, reason=error_messages.blocked_reason(blocks[0].reason))

        open_time, close_time = window
        if not wall_clock(open_time) <= wall_clock(wall_time) <= wall_clock(close_time):
            return CalendarStatus(open=False, reason=error_messages.CLOSED_AT_TIME)

        event = self.affecting_event(day, wall_time)
        if event is not None:
            return CalendarStatus(open=False, reason=error_messages.special_event_reason(event.name))

        return CalendarStatus(open=True)

    def opening_window(self, day: date) -> Optional[Tuple[time, time]]:
        """
        Opening and closing times for a day, or None if closed.

        A day with no operating-hours row is closed.
        """
        hours = self.repository.get_operating_hour(day_of_week(day))
        if hours is None or hours.closed:
            return None
        if hours.open_time is None or hours.close_time is None:
            logger.warning(
                f"Operating hours for day {hours.day_of_week} have no open/close time, treating as closed"
            )
            return None
        return hours.open_time, hours.close_time

    def affecting_event(
        self,
        day: date,
        wall_time: time,
        events: Optional[List[SpecialEvent]] = None
    ) -> Optional[SpecialEvent]:
        """
        The first availability-affecting special event running at a time.

        An event without start or end time runs from the start or to the
        end of its day. Pass events to reuse an already loaded list.
        """
        if events is None:
            events = self.repository.find_special_events(day)
        for event in events:
            if not event.affects_availability:
                continue
            starts = wall_clock(event.event_start_time or time.min)
            ends = wall_clock(event.event_end_time or time.max)
            if starts <= wall_clock(wall_time) <= ends:
                return event
        return None

    def weekly_schedule(self) -> List[OperatingHoursDay]:
        """
        All seven days of the weekly schedule, Sunday first.

        Days with no row are listed as closed with placeholder
        09:00-17:00 times.
        """
        rows = {row.day_of_week: row for row in self.repository.list_operating_hours()}
        return [self._schedule_day(index, rows.get(index)) for index in range(7)]

    @staticmethod
    def _schedule_day(index: int, row: Optional[OperatingHour]) -> OperatingHoursDay:
        if row is None:
            return OperatingHoursDay(
                day_of_week=index,
                day_name=DAY_NAMES[index],
                is_open=False,
                opening_time=DEFAULT_LISTING_OPEN_TIME,
                closing_time=DEFAULT_LISTING_CLOSE_TIME,
            )

        return OperatingHoursDay(
            day_of_week=index,
            day_name=DAY_NAMES[index],
            is_open=not row.closed and row.open_time is not None and row.close_time is not None,
            opening_time=(
                error_messages.format_slot_time(row.open_time) if row.open_time else DEFAULT_LISTING_OPEN_TIME
            ),
            closing_time=(
                error_messages.format_slot_time(row.close_time) if row.close_time else DEFAULT_LISTING_CLOSE_TIME
            ),
        )
