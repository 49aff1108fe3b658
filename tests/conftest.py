"""
Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database holding one restaurant
open 11:00-22:00 every day in Pacific/Guam (UTC+10, no DST), with a
current layout of 20 seats, max party size 10, 60 minute reservations,
15 minute turnaround, a 120 minute overlap window and 30 minute slots.
"""
import sys
from pathlib import Path
from datetime import date, time, datetime
from typing import Generator, Optional
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from availability_engine.models.database import (
    Base,
    Restaurant,
    Location,
    Layout,
    SeatSection,
    Seat,
    OperatingHour,
    BlockedPeriod,
    SpecialEvent,
    Reservation,
)
from availability_engine.services.time_resolution import resolve_instant, to_storage
from availability_engine.services.availability_service import AvailabilityService

TEST_ZONE = "Pacific/Guam"
TEST_DATE = "2024-06-01"  # A Saturday


def stored(date_value: str, time_value: str, time_zone: Optional[str] = TEST_ZONE) -> datetime:
    """Naive UTC column value for a wall-clock moment at the restaurant."""
    return to_storage(resolve_instant(date_value, time_value, time_zone))


@pytest.fixture(scope="function")
def test_db_url() -> str:
    """
    Provide an in-memory SQLite database URL for testing.
    Each test gets a fresh database.
    """
    return "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine(test_db_url: str):
    """
    Create a test database engine with all tables.
    """
    engine = create_engine(test_db_url, echo=False)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """
    Create a database session for testing with automatic rollback.
    """
    SessionLocal = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)
    session = SessionLocal()

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _add_layout(session: Session, restaurant_id: int, capacities, location_id=None) -> Layout:
    layout = Layout(restaurant_id=restaurant_id, location_id=location_id, name="Floor")
    session.add(layout)
    session.flush()

    section = SeatSection(layout_id=layout.id, name="Main")
    session.add(section)
    session.flush()

    for index, capacity in enumerate(capacities, start=1):
        session.add(Seat(seat_section_id=section.id, label=f"S{index}", capacity=capacity))
    session.flush()
    return layout


@pytest.fixture(scope="function")
def restaurant(db_session: Session) -> Restaurant:
    """
    Create the default restaurant with weekly hours and a 20-seat layout.
    """
    restaurant = Restaurant(
        id=1,
        name="Harbor Grill",
        time_zone=TEST_ZONE,
        max_party_size=10,
        default_reservation_length=60,
        turnaround_time=15,
        overlap_window=120,
        time_slot_interval=30,
    )
    db_session.add(restaurant)
    db_session.flush()

    for day in range(7):
        db_session.add(OperatingHour(
            restaurant_id=restaurant.id,
            day_of_week=day,
            open_time=time(11, 0),
            close_time=time(22, 0),
            closed=False,
        ))

    # Five four-tops
    layout = _add_layout(db_session, restaurant.id, [4, 4, 4, 4, 4])
    restaurant.current_layout_id = layout.id

    db_session.commit()
    db_session.refresh(restaurant)
    return restaurant


@pytest.fixture(scope="function")
def location(db_session: Session, restaurant: Restaurant) -> Location:
    """
    Create a patio location with its own 8-seat layout.
    """
    patio = Location(restaurant_id=restaurant.id, name="Patio")
    db_session.add(patio)
    db_session.flush()

    layout = _add_layout(db_session, restaurant.id, [2, 2, 4], location_id=patio.id)
    patio.current_layout_id = layout.id

    db_session.commit()
    db_session.refresh(patio)
    return patio


@pytest.fixture(scope="function")
def service(db_session: Session, restaurant: Restaurant) -> AvailabilityService:
    """Create an AvailabilityService for the default restaurant."""
    return AvailabilityService(db_session, restaurant.id)


@pytest.fixture(scope="function")
def add_reservation(db_session: Session, restaurant: Restaurant):
    """
    Factory adding a reservation at a local wall-clock moment.
    """
    def _add(
        time_value: str,
        party_size: int,
        date_value: str = TEST_DATE,
        duration_minutes: Optional[int] = 60,
        status: Optional[str] = "booked",
        location_id: Optional[int] = None,
    ) -> Reservation:
        reservation = Reservation(
            restaurant_id=restaurant.id,
            location_id=location_id,
            start_time=stored(date_value, time_value),
            duration_minutes=duration_minutes,
            party_size=party_size,
            status=status,
            contact_name="Test Guest",
        )
        db_session.add(reservation)
        db_session.commit()
        return reservation

    return _add


@pytest.fixture(scope="function")
def add_block(db_session: Session, restaurant: Restaurant):
    """
    Factory adding a blocked period between two local times on a date.
    """
    def _add(
        start: str,
        end: str,
        reason: str = "Private event",
        date_value: str = TEST_DATE,
        location_id: Optional[int] = None,
        active: bool = True,
    ) -> BlockedPeriod:
        block = BlockedPeriod(
            restaurant_id=restaurant.id,
            location_id=location_id,
            start_time=stored(date_value, start),
            end_time=stored(date_value, end),
            reason=reason,
            active=active,
        )
        db_session.add(block)
        db_session.commit()
        return block

    return _add


@pytest.fixture(scope="function")
def add_event(db_session: Session, restaurant: Restaurant):
    """
    Factory adding a special event on a date.
    """
    def _add(
        name: str,
        start: Optional[time] = None,
        end: Optional[time] = None,
        event_date: date = date(2024, 6, 1),
        affects_availability: bool = True,
        exclusive_booking: bool = False,
        max_capacity: Optional[int] = None,
    ) -> SpecialEvent:
        event = SpecialEvent(
            restaurant_id=restaurant.id,
            name=name,
            event_date=event_date,
            event_start_time=start,
            event_end_time=end,
            affects_availability=affects_availability,
            exclusive_booking=exclusive_booking,
            max_capacity=max_capacity,
        )
        db_session.add(event)
        db_session.commit()
        return event

    return _add
