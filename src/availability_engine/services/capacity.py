"""
Capacity resolver - total seats for a restaurant or one of its locations.

Layers, first non-zero wins:
1. Seats in the active layout (each seat counts at least 1)
2. The location's configured capacity (location queries only)
3. The restaurant's admin-configured seating_capacity
4. The caller's hardcoded default

The resolver never fails and never returns zero.
"""
from typing import Iterable, List, Optional

from loguru import logger

from ..config import DEFAULT_CAPACITY_SLOTS
from ..error_handling.handlers import graceful_degradation
from ..models.schemas import CapacityResolution
from .data_access import AvailabilityRepository


def seat_contribution(capacity) -> int:
    """Seats a single seat adds; missing, zero or negative counts as 1."""
    try:
        return max(int(capacity), 1)
    except (TypeError, ValueError):
        return 1


def sum_seat_capacity(capacities: Iterable) -> int:
    return sum(seat_contribution(capacity) for capacity in capacities)


class CapacityResolver:
    """
    Computes total seating capacity with layered fallbacks.

    Args:
        repository: Data access scoped to the restaurant being queried
    """

    def __init__(self, repository: AvailabilityRepository):
        self.repository = repository

    def total_capacity(self, location_id: Optional[int] = None, default_capacity: int = DEFAULT_CAPACITY_SLOTS) -> int:
        """
        Total seats, always at least 1.

        Args:
            location_id: Resolve a location's seats instead of the restaurant's
            default_capacity: Last-resort seat count for this call path
        """
        return self.resolve(location_id, default_capacity).total_seats

    def resolve(
        self,
        location_id: Optional[int] = None,
        default_capacity: int = DEFAULT_CAPACITY_SLOTS
    ) -> CapacityResolution:
        """
        Resolve total seats and report which layer supplied them.

        Args:
            location_id: Resolve a location's seats instead of the restaurant's
            default_capacity: Last-resort seat count for this call path

        Returns:
            CapacityResolution with total_seats >= 1
        """
        if default_capacity is None or default_capacity < 1:
            default_capacity = DEFAULT_CAPACITY_SLOTS

        total = sum_seat_capacity(self._load_seat_capacities(location_id))
        if total > 0:
            return CapacityResolution(total_seats=total, source="seats")

        if location_id is not None:
            configured = self._load_location_capacity(location_id)
            if configured and configured > 0:
                logger.info(f"No seats laid out for location {location_id}, using configured capacity {configured}")
                return CapacityResolution(total_seats=configured, source="location_capacity")

        seating_capacity = self._load_seating_capacity()
        if seating_capacity and seating_capacity > 0:
            logger.info(f"No seats laid out, using admin seating_capacity {seating_capacity}")
            return CapacityResolution(total_seats=seating_capacity, source="seating_capacity")

        logger.warning(
            f"No seats or configured capacity for restaurant {self.repository.restaurant_id} "
            f"(location={location_id}), using default {default_capacity}"
        )
        return CapacityResolution(total_seats=default_capacity, source="default")

    @graceful_degradation(fallback_value=[], log_message="Seat lookup failed, treating as no seats")
    def _load_seat_capacities(self, location_id: Optional[int]) -> List[Optional[int]]:
        return self.repository.find_seat_capacities(location_id)

    @graceful_degradation(fallback_value=None, log_message="Location capacity lookup failed")
    def _load_location_capacity(self, location_id: int) -> Optional[int]:
        return self.repository.get_location_capacity(location_id)

    @graceful_degradation(fallback_value=None, log_message="Seating capacity setting unavailable")
    def _load_seating_capacity(self) -> Optional[int]:
        return self.repository.get_policy().seating_capacity
