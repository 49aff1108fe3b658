"""
Models package - SQLAlchemy ORM models and Pydantic schemas.
"""
from .database import (
    Base,
    Restaurant,
    Location,
    LocationCapacity,
    Layout,
    SeatSection,
    Seat,
    OperatingHour,
    BlockedPeriod,
    SpecialEvent,
    Reservation,
    init_db,
    create_tables,
    get_db_session,
)

from .schemas import (
    ReservationPolicy,
    CalendarStatus,
    CapacityResolution,
    AvailabilityResult,
    TimeSlotAvailability,
    TimeSlotsResult,
    MaxPartySizeResult,
    OperatingHoursDay,
    OperatingHoursResult,
    OperationFailure,
)

__all__ = [
    # Database models
    "Base",
    "Restaurant",
    "Location",
    "LocationCapacity",
    "Layout",
    "SeatSection",
    "Seat",
    "OperatingHour",
    "BlockedPeriod",
    "SpecialEvent",
    "Reservation",
    # Database utilities
    "init_db",
    "create_tables",
    "get_db_session",
    # Pydantic schemas
    "ReservationPolicy",
    "CalendarStatus",
    "CapacityResolution",
    "AvailabilityResult",
    "TimeSlotAvailability",
    "TimeSlotsResult",
    "MaxPartySizeResult",
    "OperatingHoursDay",
    "OperatingHoursResult",
    "OperationFailure",
]
