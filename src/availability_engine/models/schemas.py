"""
Pydantic models for resolved configuration and availability results.

Every public engine operation returns one of the result models below. All
of them carry a `success` flag; failures are reported with OperationFailure
rather than raised.
"""
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import (
    DEFAULT_RESERVATION_DURATION,
    DEFAULT_TURNAROUND_MINUTES,
    DEFAULT_OVERLAP_WINDOW_MINUTES,
    DEFAULT_TIME_SLOT_INTERVAL,
)


def _positive_int(value: Any) -> Optional[int]:
    """Coerce a stored setting to a positive int, or None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


class ReservationPolicy(BaseModel):
    """
    A restaurant's reservation settings with every gap filled by a default.

    Built once per engine call from the restaurant row; immutable after.
    """
    restaurant_id: int
    time_zone: Optional[str] = None
    max_party_size: Optional[int] = Field(None, description="None means no ceiling is configured")
    reservation_duration: int = Field(DEFAULT_RESERVATION_DURATION, gt=0)
    turnaround_minutes: int = Field(DEFAULT_TURNAROUND_MINUTES, gt=0)
    overlap_window_minutes: int = Field(DEFAULT_OVERLAP_WINDOW_MINUTES, gt=0)
    time_slot_interval: int = Field(DEFAULT_TIME_SLOT_INTERVAL, gt=0)
    seating_capacity: Optional[int] = Field(None, description="Admin-configured seat count")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_restaurant(cls, restaurant) -> "ReservationPolicy":
        """
        Resolve a restaurant row into a policy.

        Args:
            restaurant: Restaurant ORM instance

        Returns:
            ReservationPolicy with defaults substituted for absent or
            non-positive values
        """
        admin_settings = restaurant.admin_settings if isinstance(restaurant.admin_settings, dict) else {}

        return cls(
            restaurant_id=restaurant.id,
            time_zone=restaurant.time_zone or None,
            max_party_size=_positive_int(restaurant.max_party_size),
            reservation_duration=(
                _positive_int(restaurant.default_reservation_length) or DEFAULT_RESERVATION_DURATION
            ),
            turnaround_minutes=_positive_int(restaurant.turnaround_time) or DEFAULT_TURNAROUND_MINUTES,
            overlap_window_minutes=(
                _positive_int(restaurant.overlap_window) or DEFAULT_OVERLAP_WINDOW_MINUTES
            ),
            time_slot_interval=_positive_int(restaurant.time_slot_interval) or DEFAULT_TIME_SLOT_INTERVAL,
            seating_capacity=_positive_int(admin_settings.get("seating_capacity")),
        )


class CalendarStatus(BaseModel):
    """Whether the restaurant is open at a moment, and why not if closed."""
    open: bool
    reason: Optional[str] = None


class CapacityResolution(BaseModel):
    """
    Total seats and which fallback layer produced them.

    source is one of "seats", "location_capacity", "seating_capacity",
    "default".
    """
    total_seats: int = Field(..., ge=1)
    source: str


class AvailabilityResult(BaseModel):
    """
    Answer to "is this date/time/party size available".
    """
    success: Literal[True] = True
    available: bool
    reason: Optional[str] = None
    available_seats: Optional[int] = None
    total_seats: Optional[int] = None
    max_party_size: Optional[int] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "available": False,
                "reason": "Insufficient seats available: 2 open, 4 requested",
                "available_seats": 2,
                "total_seats": 20,
                "max_party_size": 10
            }
        }
    )


class TimeSlotAvailability(BaseModel):
    """A bookable slot start ("HH:MM") with the seats still open at it."""
    time: str
    available_seats: int


class TimeSlotsResult(BaseModel):
    """
    Open slots on a date for a party size.

    errors lists slots that were skipped because they could not be
    computed; success stays True regardless.
    """
    success: Literal[True] = True
    available_slots: List[TimeSlotAvailability] = Field(default_factory=list)
    message: Optional[str] = None
    errors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "available_slots": [
                    {"time": "11:00", "available_seats": 20},
                    {"time": "11:30", "available_seats": 16}
                ],
                "errors": []
            }
        }
    )


class MaxPartySizeResult(BaseModel):
    """
    Largest party accommodable at a slot, and whether the requested
    party fits under it.
    """
    success: Literal[True] = True
    available: bool
    max_party_size: int = Field(..., ge=0)
    requested_party_size: int
    total_seats: int
    booked_seats: int
    reason: Optional[str] = None


class OperatingHoursDay(BaseModel):
    """One weekday of the listed schedule (day_of_week 0=Sunday..6=Saturday)."""
    day_of_week: int = Field(..., ge=0, le=6)
    day_name: str
    is_open: bool
    opening_time: str
    closing_time: str


class OperatingHoursResult(BaseModel):
    success: Literal[True] = True
    operating_hours: List[OperatingHoursDay]


class OperationFailure(BaseModel):
    """
    The check itself failed, as opposed to a slot being unavailable.

    status classifies the failure for the HTTP layer.
    """
    success: Literal[False] = False
    errors: List[str]
    status: str
