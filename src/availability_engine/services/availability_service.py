"""
AvailabilityService - reservation availability decisions for one restaurant.

This service answers three questions over a snapshot of configuration and
existing reservations:
- Is this exact date, time and party size available?
- Which time slots on a date can take a party?
- What is the largest party the restaurant can seat at a moment?

It never writes. Callers on the booking write path construct it with
for_update=True inside their transaction and re-check before committing.
"""
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Callable, List, Optional, Tuple, Union

from loguru import logger
from sqlalchemy.orm import Session

from ..config import DEFAULT_CAPACITY_SLOTS, DEFAULT_CAPACITY_MAXPARTY
from ..error_handling import error_messages
from ..error_handling.exceptions import InvalidPartySizeError
from ..error_handling.handlers import handle_errors
from ..error_handling.logging_config import log_availability_event, log_performance
from ..models.database import BlockedPeriod, Reservation, SpecialEvent
from ..models.schemas import (
    ReservationPolicy,
    CalendarStatus,
    AvailabilityResult,
    TimeSlotAvailability,
    TimeSlotsResult,
    MaxPartySizeResult,
    OperatingHoursResult,
    OperationFailure,
)
from .capacity import CapacityResolver
from .data_access import AvailabilityRepository
from .operating_calendar import OperatingCalendar
from .overlap import OverlapCalculator
from .time_resolution import (
    resolve_zone,
    parse_date,
    parse_time,
    combine_local,
    local_day_bounds,
    from_storage,
)


def coerce_party_size(value: Any) -> int:
    """
    Convert a caller-supplied party size to a positive int.

    Raises:
        InvalidPartySizeError: If value is not integer-coercible or below 1
    """
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidPartySizeError(value)
    try:
        size = int(value.strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise InvalidPartySizeError(value)
    if size < 1:
        raise InvalidPartySizeError(value)
    return size


def _failure(operation: str) -> Callable[[Exception], OperationFailure]:
    def build(error: Exception) -> OperationFailure:
        return OperationFailure(
            errors=[error_messages.get_error_message(error, operation)],
            status=error_messages.classify_error(error),
        )
    return build


def _empty_slots(error: Exception) -> TimeSlotsResult:
    return TimeSlotsResult(
        available_slots=[],
        message=error_messages.SLOTS_UNAVAILABLE,
        errors=[error_messages.get_error_message(error, "get available time slots")],
    )


class AvailabilityService:
    """
    Composes time resolution, the operating calendar, capacity and overlap
    into availability answers.

    Args:
        session: SQLAlchemy database session
        restaurant_id: Restaurant to answer for
        for_update: Lock the restaurant row while reading, for callers
            re-checking inside a booking transaction
    """

    def __init__(self, session: Session, restaurant_id: int, for_update: bool = False):
        self.repository = AvailabilityRepository(session, restaurant_id, for_update=for_update)
        self.calendar = OperatingCalendar(self.repository)
        self.capacity = CapacityResolver(self.repository)

    @property
    def restaurant_id(self) -> int:
        return self.repository.restaurant_id

    def _resolve_moment(
        self,
        date_value: Any,
        time_value: Any,
        policy: ReservationPolicy
    ) -> Tuple[date, datetime]:
        zone = resolve_zone(policy.time_zone)
        day = parse_date(date_value, zone)
        instant = combine_local(day, parse_time(time_value), zone)
        return day, instant

    def _overlap_calculator(self, policy: ReservationPolicy, location_id: Optional[int]) -> OverlapCalculator:
        return OverlapCalculator(policy, self.repository.longest_reservation_duration(location_id))

    # ------------------------------------------------------------------
    # check_availability
    # ------------------------------------------------------------------

    @log_performance("check_availability")
    @handle_errors("check_availability", on_error=_failure("check availability"))
    def check_availability(
        self,
        date: Any,
        time: Any,
        party_size: Any,
        location_id: Optional[int] = None
    ) -> Union[AvailabilityResult, OperationFailure]:
        """
        Check whether a party can be seated at an exact date and time.

        Checks run in order and the first failure wins: calendar closure,
        party size above the restaurant maximum, then free seats.

        Args:
            date: Date string, e.g. "2024-06-01"
            time: "H:MM" or "HH:MM"
            party_size: Integer-coercible party size
            location_id: Optional location to check

        Returns:
            AvailabilityResult, or OperationFailure if the check itself failed
        """
        party = coerce_party_size(party_size)
        policy = self.repository.get_policy()
        day, instant = self._resolve_moment(date, time, policy)

        status = self.calendar.status_at(instant, location_id)
        if not status.open:
            return self._decision(
                AvailabilityResult(available=False, reason=status.reason),
                instant, party, location_id
            )

        if policy.max_party_size is not None and party > policy.max_party_size:
            return self._decision(
                AvailabilityResult(
                    available=False,
                    reason=error_messages.party_size_exceeded_reason(party, policy.max_party_size),
                    max_party_size=policy.max_party_size,
                ),
                instant, party, location_id
            )

        total_seats = self.capacity.total_capacity(location_id, DEFAULT_CAPACITY_SLOTS)
        overlap = self._overlap_calculator(policy, location_id)
        window_start, window_end = overlap.candidate_window(instant)
        reservations = self.repository.find_active_reservations(window_start, window_end, location_id)
        seats_taken = overlap.seats_taken(instant, reservations)
        available_seats = max(total_seats - seats_taken, 0)

        if available_seats < party:
            return self._decision(
                AvailabilityResult(
                    available=False,
                    reason=error_messages.insufficient_seats_reason(available_seats, party),
                    available_seats=available_seats,
                    total_seats=total_seats,
                    max_party_size=policy.max_party_size,
                ),
                instant, party, location_id
            )

        event_reason = self._special_event_day_gate(day, policy, party, location_id)
        if event_reason:
            return self._decision(
                AvailabilityResult(
                    available=False,
                    reason=event_reason,
                    available_seats=available_seats,
                    total_seats=total_seats,
                    max_party_size=policy.max_party_size,
                ),
                instant, party, location_id
            )

        return self._decision(
            AvailabilityResult(
                available=True,
                available_seats=available_seats,
                total_seats=total_seats,
                max_party_size=policy.max_party_size,
            ),
            instant, party, location_id
        )

    def _decision(
        self,
        result: AvailabilityResult,
        instant: datetime,
        party: int,
        location_id: Optional[int]
    ) -> AvailabilityResult:
        log_availability_event(
            "AVAILABLE" if result.available else "UNAVAILABLE",
            restaurant_id=self.restaurant_id,
            location_id=location_id,
            details={
                "at": instant.isoformat(),
                "party_size": party,
                "reason": result.reason,
                "available_seats": result.available_seats,
            },
        )
        return result

    # ------------------------------------------------------------------
    # available_time_slots
    # ------------------------------------------------------------------

    @log_performance("available_time_slots")
    @handle_errors("available_time_slots", on_error=_empty_slots)
    def available_time_slots(
        self,
        date: Any,
        party_size: Any,
        location_id: Optional[int] = None
    ) -> TimeSlotsResult:
        """
        List every open slot on a date for a party size.

        Slots start at opening time and step by the restaurant's slot
        interval; the last one starts one interval before closing. A slot
        that fails to compute is skipped and noted in errors. This
        operation always reports success, with an empty list when nothing
        could be computed.

        Args:
            date: Date string, e.g. "2024-06-01"
            party_size: Integer-coercible party size
            location_id: Optional location to check

        Returns:
            TimeSlotsResult
        """
        party = coerce_party_size(party_size)
        policy = self.repository.get_policy()
        zone = resolve_zone(policy.time_zone)
        day = parse_date(date, zone)

        window = self.calendar.opening_window(day)
        if window is None:
            return TimeSlotsResult(message=error_messages.CLOSED_ON_DAY)

        if policy.max_party_size is not None and party > policy.max_party_size:
            return TimeSlotsResult(
                message=error_messages.party_size_exceeded_reason(party, policy.max_party_size)
            )

        slot_starts = self.generate_slot_times(day, window[0], window[1], policy.time_slot_interval, zone)
        if not slot_starts:
            return TimeSlotsResult(message=error_messages.CLOSED_ON_DAY)

        event_reason = self._special_event_day_gate(day, policy, party, location_id, zone=zone)
        if event_reason:
            return TimeSlotsResult(message=event_reason)

        overlap = self._overlap_calculator(policy, location_id)
        duration = timedelta(minutes=policy.reservation_duration)
        total_seats = self.capacity.total_capacity(location_id, DEFAULT_CAPACITY_SLOTS)
        reservations = self.repository.find_active_reservations(
            overlap.candidate_window(slot_starts[0])[0],
            overlap.candidate_window(slot_starts[-1])[1],
            location_id,
        )
        blocks = self.repository.find_blocked_periods_between(
            slot_starts[0], slot_starts[-1] + duration, location_id
        )
        events = self.repository.find_special_events(day)

        available_slots: List[TimeSlotAvailability] = []
        errors: List[str] = []
        for slot_start in slot_starts:
            label = error_messages.format_slot_time(slot_start.time())
            try:
                slot = self._evaluate_slot(
                    slot_start, party, total_seats, overlap, reservations, blocks, events
                )
            except Exception as e:
                logger.warning(f"Skipping slot {day.isoformat()} {label}: {type(e).__name__}: {e}")
                errors.append(f"{label}: {str(e) or type(e).__name__}")
                continue
            if slot is not None:
                available_slots.append(slot)

        log_availability_event(
            "SLOTS",
            restaurant_id=self.restaurant_id,
            location_id=location_id,
            details={
                "date": day.isoformat(),
                "party_size": party,
                "candidates": len(slot_starts),
                "available": len(available_slots),
                "skipped_on_error": len(errors),
            },
        )

        return TimeSlotsResult(
            available_slots=available_slots,
            message=None if available_slots else "No available time slots for this date",
            errors=errors,
        )

    @staticmethod
    def generate_slot_times(
        day: date,
        open_time: time,
        close_time: time,
        interval_minutes: int,
        zone: Optional[tzinfo]
    ) -> List[datetime]:
        """
        Candidate slot starts from opening to closing minus one interval.

        Stepping happens on wall-clock time, so slots keep their local
        labels across DST changes.
        """
        interval = timedelta(minutes=interval_minutes)
        current = datetime.combine(day, open_time)
        last_start = datetime.combine(day, close_time) - interval

        starts = []
        while current <= last_start:
            starts.append(combine_local(day, current.time(), zone))
            current += interval
        return starts

    def _evaluate_slot(
        self,
        slot_start: datetime,
        party: int,
        total_seats: int,
        overlap: OverlapCalculator,
        reservations: List[Reservation],
        blocks: List[BlockedPeriod],
        events: List[SpecialEvent]
    ) -> Optional[TimeSlotAvailability]:
        slot_end = slot_start + timedelta(minutes=overlap.policy.reservation_duration)
        for block in blocks:
            if from_storage(block.start_time) < slot_end and from_storage(block.end_time) > slot_start:
                return None

        wall_time = slot_start.time().replace(tzinfo=None)
        if self.calendar.affecting_event(slot_start.date(), wall_time, events) is not None:
            return None

        candidates = [r for r in reservations if overlap.within_window(r, slot_start)]
        available_seats = max(total_seats - overlap.seats_taken(slot_start, candidates), 0)
        if available_seats < party:
            return None

        return TimeSlotAvailability(
            time=error_messages.format_slot_time(wall_time),
            available_seats=available_seats,
        )

    # ------------------------------------------------------------------
    # max_party_size
    # ------------------------------------------------------------------

    @log_performance("max_party_size")
    @handle_errors("max_party_size", on_error=_failure("compute max party size"))
    def max_party_size(
        self,
        date: Any,
        time: Any,
        location_id: Optional[int] = None,
        requested_party_size: Any = 1
    ) -> Union[MaxPartySizeResult, OperationFailure]:
        """
        Largest party that can be seated at a moment.

        Uses the ceiling overlap policy (no turnaround buffer) and clamps
        to the restaurant's maximum party size when one is configured.

        Args:
            date: Date string, e.g. "2024-06-01"
            time: "H:MM" or "HH:MM"
            location_id: Optional location to check
            requested_party_size: Party size compared against the ceiling

        Returns:
            MaxPartySizeResult, or OperationFailure if the query failed
        """
        party = coerce_party_size(requested_party_size)
        policy = self.repository.get_policy()
        _, instant = self._resolve_moment(date, time, policy)

        total_seats = self.capacity.total_capacity(location_id, DEFAULT_CAPACITY_MAXPARTY)

        status = self.calendar.status_at(instant, location_id)
        if not status.open:
            return MaxPartySizeResult(
                available=False,
                max_party_size=0,
                requested_party_size=party,
                total_seats=total_seats,
                booked_seats=0,
                reason=status.reason,
            )

        overlap = self._overlap_calculator(policy, location_id)
        window_start, window_end = overlap.candidate_window(instant)
        reservations = self.repository.find_active_reservations(window_start, window_end, location_id)
        booked_seats = overlap.booked_seats_ceiling(instant, reservations)

        remaining = max(total_seats - booked_seats, 0)
        if policy.max_party_size is not None:
            remaining = min(remaining, policy.max_party_size)

        available = remaining >= party
        reason = None
        if not available:
            if policy.max_party_size is not None and party > policy.max_party_size:
                reason = error_messages.party_size_exceeded_reason(party, policy.max_party_size)
            else:
                reason = error_messages.insufficient_seats_reason(remaining, party)

        log_availability_event(
            "MAX_PARTY",
            restaurant_id=self.restaurant_id,
            location_id=location_id,
            details={"at": instant.isoformat(), "max_party_size": remaining, "requested": party},
        )

        return MaxPartySizeResult(
            available=available,
            max_party_size=remaining,
            requested_party_size=party,
            total_seats=total_seats,
            booked_seats=booked_seats,
            reason=reason,
        )

    # ------------------------------------------------------------------
    # Calendar and capacity lookups
    # ------------------------------------------------------------------

    @handle_errors("is_open", on_error=_failure("check opening hours"))
    def is_open(
        self,
        date: Any,
        time: Any,
        location_id: Optional[int] = None
    ) -> Union[CalendarStatus, OperationFailure]:
        return self.calendar.is_open(date, time, location_id)

    def total_capacity(self, location_id: Optional[int] = None) -> int:
        """Total seats for the restaurant or a location; never below 1."""
        return self.capacity.total_capacity(location_id, DEFAULT_CAPACITY_SLOTS)

    @handle_errors("get_operating_hours", on_error=_failure("get operating hours"))
    def get_operating_hours(self) -> Union[OperatingHoursResult, OperationFailure]:
        """Weekly schedule, all seven days, for display."""
        return OperatingHoursResult(operating_hours=self.calendar.weekly_schedule())

    # ------------------------------------------------------------------
    # Special event day gates
    # ------------------------------------------------------------------

    def _special_event_day_gate(
        self,
        day: date,
        policy: ReservationPolicy,
        party: int,
        location_id: Optional[int],
        zone: Optional[tzinfo] = None
    ) -> Optional[str]:
        """
        Reason a day's special event refuses the party, or None.

        An exclusive-booking event takes no further reservations once one
        overlaps that day. A positive max_capacity caps the seats booked by
        reservations overlapping the day, including ones that began the
        evening before.
        """
        events = [
            event for event in self.repository.find_special_events(day)
            if event.exclusive_booking or (event.max_capacity or 0) > 0
        ]
        if not events:
            return None

        if zone is None:
            zone = resolve_zone(policy.time_zone)
        day_start, day_end = local_day_bounds(day, zone)
        overlap = self._overlap_calculator(policy, location_id)
        day_reservations = []
        for reservation in self.repository.find_active_reservations(
            day_start - overlap.lookback(), day_end, location_id
        ):
            start, end = overlap.reservation_span(reservation, turnaround=False)
            if start < day_end and end > day_start:
                day_reservations.append(reservation)
        used = sum(int(reservation.party_size or 0) for reservation in day_reservations)

        for event in events:
            if event.exclusive_booking and day_reservations:
                return error_messages.exclusive_event_reason(event.name)
            if (event.max_capacity or 0) > 0 and used + party > event.max_capacity:
                return error_messages.event_capacity_reason(event.name)
        return None
