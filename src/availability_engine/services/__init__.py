"""
Services package - availability computation over restaurant data.
"""
from .availability_service import AvailabilityService, coerce_party_size
from .capacity import CapacityResolver
from .data_access import AvailabilityRepository
from .operating_calendar import OperatingCalendar
from .overlap import OverlapCalculator

__all__ = [
    "AvailabilityService",
    "coerce_party_size",
    "CapacityResolver",
    "AvailabilityRepository",
    "OperatingCalendar",
    "OverlapCalculator",
]
