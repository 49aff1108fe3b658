"""
Read-only data access for the availability engine.

AvailabilityRepository scopes every query to one restaurant and bounds
reservation and blocked-period reads to a time window, so the work per
call does not grow with the restaurant's reservation history.
"""
from datetime import date, datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from ..config import INACTIVE_RESERVATION_STATUSES
from ..error_handling.exceptions import ConfigurationError, DatabaseConnectionError
from ..models.database import (
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
)
from ..models.schemas import ReservationPolicy
from .time_resolution import to_storage


class AvailabilityRepository:
    """
    Tenant-scoped reads of restaurant configuration and reservations.

    Args:
        session: SQLAlchemy database session
        restaurant_id: Restaurant every query is scoped to
        for_update: Lock the restaurant row when loading it, for callers
            re-checking availability inside their booking transaction
    """

    def __init__(self, session: Session, restaurant_id: int, for_update: bool = False):
        self.session = session
        self.restaurant_id = restaurant_id
        self.for_update = for_update
        self._restaurant: Optional[Restaurant] = None
        self._policy: Optional[ReservationPolicy] = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        retry=retry_if_exception_type(OperationalError),
        reraise=True,
    )
    def _fetch_restaurant(self) -> Optional[Restaurant]:
        query = self.session.query(Restaurant).filter(Restaurant.id == self.restaurant_id)
        if self.for_update:
            query = query.with_for_update()
        return query.first()

    def get_restaurant(self) -> Restaurant:
        """
        Load the restaurant row, cached for the repository's lifetime.

        Raises:
            ConfigurationError: If the restaurant does not exist
            DatabaseConnectionError: If the database stays unreachable after retries
        """
        if self._restaurant is not None:
            return self._restaurant

        try:
            restaurant = self._fetch_restaurant()
        except OperationalError as e:
            raise DatabaseConnectionError(
                f"Database connection error: {str(e)}",
                original_error=e,
                restaurant_id=self.restaurant_id,
            )

        if restaurant is None:
            raise ConfigurationError(
                f"Restaurant {self.restaurant_id} not found",
                restaurant_id=self.restaurant_id,
            )

        self._restaurant = restaurant
        return restaurant

    def get_policy(self) -> ReservationPolicy:
        if self._policy is None:
            self._policy = ReservationPolicy.from_restaurant(self.get_restaurant())
        return self._policy

    # ------------------------------------------------------------------
    # Calendar
    # ------------------------------------------------------------------

    def get_operating_hour(self, day_of_week: int) -> Optional[OperatingHour]:
        return self.session.query(OperatingHour).filter(
            OperatingHour.restaurant_id == self.restaurant_id,
            OperatingHour.day_of_week == day_of_week,
        ).first()

    def list_operating_hours(self) -> List[OperatingHour]:
        return self.session.query(OperatingHour).filter(
            OperatingHour.restaurant_id == self.restaurant_id
        ).order_by(OperatingHour.day_of_week).all()

    def find_blocking_periods(self, instant: datetime, location_id: Optional[int] = None) -> List[BlockedPeriod]:
        """
        Active blocked periods covering an instant (start <= instant <= end).

        With a location, both that location's and restaurant-wide blocks
        apply; without one, only restaurant-wide blocks.
        """
        at = to_storage(instant)
        return self.session.query(BlockedPeriod).filter(
            BlockedPeriod.restaurant_id == self.restaurant_id,
            BlockedPeriod.active.is_(True),
            BlockedPeriod.start_time <= at,
            BlockedPeriod.end_time >= at,
            self._block_location_clause(location_id),
        ).order_by(BlockedPeriod.start_time).all()

    def find_blocked_periods_between(
        self,
        window_start: datetime,
        window_end: datetime,
        location_id: Optional[int] = None
    ) -> List[BlockedPeriod]:
        """Active blocked periods intersecting [window_start, window_end)."""
        return self.session.query(BlockedPeriod).filter(
            BlockedPeriod.restaurant_id == self.restaurant_id,
            BlockedPeriod.active.is_(True),
            BlockedPeriod.start_time < to_storage(window_end),
            BlockedPeriod.end_time > to_storage(window_start),
            self._block_location_clause(location_id),
        ).order_by(BlockedPeriod.start_time).all()

    def find_special_events(self, event_date: date) -> List[SpecialEvent]:
        return self.session.query(SpecialEvent).filter(
            SpecialEvent.restaurant_id == self.restaurant_id,
            SpecialEvent.event_date == event_date,
        ).order_by(SpecialEvent.id).all()

    # ------------------------------------------------------------------
    # Capacity
    # ------------------------------------------------------------------

    def find_seat_capacities(self, location_id: Optional[int] = None) -> List[Optional[int]]:
        """
        Capacities of the seats in the active layout.

        With a location, the location's current layout (or its most recent
        layout if none is marked current); otherwise the restaurant's
        current layout.
        """
        layout_id = self._resolve_layout_id(location_id)
        if layout_id is None:
            return []

        rows = self.session.query(Seat.capacity).join(
            SeatSection, Seat.seat_section_id == SeatSection.id
        ).join(
            Layout, SeatSection.layout_id == Layout.id
        ).filter(
            Layout.id == layout_id,
            Layout.restaurant_id == self.restaurant_id,
        ).all()

        return [row.capacity for row in rows]

    def get_location_capacity(self, location_id: int) -> Optional[int]:
        capacity = self.session.query(LocationCapacity).filter(
            LocationCapacity.restaurant_id == self.restaurant_id,
            LocationCapacity.location_id == location_id,
        ).first()
        return capacity.total_capacity if capacity else None

    def _resolve_layout_id(self, location_id: Optional[int]) -> Optional[int]:
        if location_id is None:
            return self.get_restaurant().current_layout_id

        location = self.session.query(Location).filter(
            Location.id == location_id,
            Location.restaurant_id == self.restaurant_id,
        ).first()
        if location is None:
            logger.warning(f"Location {location_id} not found for restaurant {self.restaurant_id}")
            return None
        if location.current_layout_id is not None:
            return location.current_layout_id

        latest = self.session.query(Layout.id).filter(
            Layout.restaurant_id == self.restaurant_id,
            Layout.location_id == location_id,
        ).order_by(Layout.id.desc()).first()
        return latest.id if latest else None

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    def find_active_reservations(
        self,
        window_start: datetime,
        window_end: datetime,
        location_id: Optional[int] = None
    ) -> List[Reservation]:
        """
        Seat-occupying reservations starting inside [window_start, window_end].

        A reservation with no status counts as active. With a location only
        that location's reservations are returned; without one only
        restaurant-wide reservations (null location).
        """
        return self.session.query(Reservation).filter(
            Reservation.restaurant_id == self.restaurant_id,
            Reservation.start_time >= to_storage(window_start),
            Reservation.start_time <= to_storage(window_end),
            self._active_status_clause(),
            self._reservation_location_clause(location_id),
        ).order_by(Reservation.start_time).all()

    def longest_reservation_duration(self, location_id: Optional[int] = None) -> Optional[int]:
        """Longest stored duration among active reservations, in minutes."""
        return self.session.query(func.max(Reservation.duration_minutes)).filter(
            Reservation.restaurant_id == self.restaurant_id,
            self._active_status_clause(),
            self._reservation_location_clause(location_id),
        ).scalar()

    @staticmethod
    def _active_status_clause():
        return or_(
            Reservation.status.is_(None),
            Reservation.status.notin_(INACTIVE_RESERVATION_STATUSES),
        )

    @staticmethod
    def _reservation_location_clause(location_id: Optional[int]):
        if location_id is None:
            return Reservation.location_id.is_(None)
        return Reservation.location_id == location_id

    @staticmethod
    def _block_location_clause(location_id: Optional[int]):
        if location_id is None:
            return BlockedPeriod.location_id.is_(None)
        return or_(
            BlockedPeriod.location_id.is_(None),
            BlockedPeriod.location_id == location_id,
        )
