"""
SQLAlchemy database models and session management for the availability engine.

The engine only reads these tables. Rows are written by the surrounding
restaurant application; the models here mirror the columns the engine
consults. All DateTime columns hold naive UTC values.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import Generator

from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    Boolean,
    Date,
    Time,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
    CheckConstraint,
    JSON,
)
from sqlalchemy.orm import declarative_base, Session, sessionmaker
from sqlalchemy.engine import Engine

from ..config import get_database_url

# Create declarative base
Base = declarative_base()

# Database engine and session factory (initialized by init_db)
engine: Engine | None = None
SessionLocal: sessionmaker | None = None


class Restaurant(Base):
    """
    Restaurant row carrying the reservation settings the engine resolves.
    """
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    time_zone = Column(String(64), nullable=True)
    max_party_size = Column(Integer, nullable=True)
    default_reservation_length = Column(Integer, nullable=True, default=60)  # Minutes
    turnaround_time = Column(Integer, nullable=True)  # Minutes
    overlap_window = Column(Integer, nullable=True)  # Minutes
    time_slot_interval = Column(Integer, nullable=True, default=30)  # Minutes
    # layouts.id of the active restaurant-wide layout
    current_layout_id = Column(Integer, nullable=True)
    admin_settings = Column(JSON, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Restaurant(id={self.id}, name='{self.name}', time_zone={self.time_zone}, "
            f"max_party_size={self.max_party_size})>"
        )


class Location(Base):
    """
    A physical location of a restaurant with its own seating layout.
    """
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    name = Column(String(255), nullable=False)
    # layouts.id of the active layout at this location
    current_layout_id = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("ix_location_restaurant", "restaurant_id"),
    )

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, restaurant_id={self.restaurant_id}, name='{self.name}')>"


class LocationCapacity(Base):
    """
    Configured seat count for a location, used when no seats are laid out.
    """
    __tablename__ = "location_capacities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False)
    total_capacity = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "location_id", name="uq_location_capacity_location"),
    )


class Layout(Base):
    """
    A floor plan. Belongs to a restaurant and optionally a location.
    """
    __tablename__ = "layouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=True)
    name = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Layout(id={self.id}, restaurant_id={self.restaurant_id}, "
            f"location_id={self.location_id}, name='{self.name}')>"
        )


class SeatSection(Base):
    """
    A group of seats (a table, a bar counter) inside a layout.
    """
    __tablename__ = "seat_sections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    layout_id = Column(Integer, ForeignKey("layouts.id"), nullable=False)
    name = Column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_seat_section_layout", "layout_id"),
    )


class Seat(Base):
    """
    A single seat. A missing or non-positive capacity counts as one guest.
    """
    __tablename__ = "seats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    seat_section_id = Column(Integer, ForeignKey("seat_sections.id"), nullable=False)
    label = Column(String(50), nullable=False)
    capacity = Column(Integer, nullable=True, default=1)
    position_x = Column(Integer, nullable=True)
    position_y = Column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_seat_section", "seat_section_id"),
    )

    def __repr__(self) -> str:
        return f"<Seat(id={self.id}, label='{self.label}', capacity={self.capacity})>"


class OperatingHour(Base):
    """
    Weekly opening hours, one row per restaurant and day of week.

    day_of_week runs 0=Sunday..6=Saturday. open_time and close_time are
    wall-clock times in the restaurant's timezone.
    """
    __tablename__ = "operating_hours"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    open_time = Column(Time, nullable=True)
    close_time = Column(Time, nullable=True)
    closed = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "day_of_week", name="uq_operating_hour_day"),
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_day_of_week_range"),
    )

    def __repr__(self) -> str:
        return (
            f"<OperatingHour(restaurant_id={self.restaurant_id}, day_of_week={self.day_of_week}, "
            f"open_time={self.open_time}, close_time={self.close_time}, closed={self.closed})>"
        )


class BlockedPeriod(Base):
    """
    An ad-hoc closure. A null location_id blocks the whole restaurant.
    """
    __tablename__ = "blocked_periods"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    reason = Column(String(255), nullable=False)
    active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("ix_blocked_period_window", "restaurant_id", "start_time", "end_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<BlockedPeriod(id={self.id}, location_id={self.location_id}, "
            f"start_time={self.start_time}, end_time={self.end_time}, reason='{self.reason}')>"
        )


class SpecialEvent(Base):
    """
    A dated event. Only events with affects_availability close the
    restaurant during their hours; exclusive_booking and max_capacity
    constrain the whole day.
    """
    __tablename__ = "special_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    name = Column(String(255), nullable=True)
    event_date = Column(Date, nullable=False)
    event_start_time = Column(Time, nullable=True)
    event_end_time = Column(Time, nullable=True)
    affects_availability = Column(Boolean, nullable=False, default=False)
    exclusive_booking = Column(Boolean, nullable=False, default=False)
    max_capacity = Column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_special_event_date", "restaurant_id", "event_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<SpecialEvent(id={self.id}, name='{self.name}', event_date={self.event_date}, "
            f"affects_availability={self.affects_availability})>"
        )


class Reservation(Base):
    """
    An existing booking. Rows with status canceled, finished or no_show
    no longer occupy seats.
    """
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=True)
    start_time = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=True)
    party_size = Column(Integer, nullable=False, default=1)
    status = Column(String(20), nullable=True, default="booked")
    contact_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_reservation_window", "restaurant_id", "start_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, location_id={self.location_id}, "
            f"start_time={self.start_time}, party_size={self.party_size}, "
            f"status='{self.status}')>"
        )


def init_db(database_url: str | None = None) -> Engine:
    """
    Initialize database engine and session factory.

    Args:
        database_url: Optional database connection string. If not provided,
                     will use the DATABASE_URL setting.

    Returns:
        SQLAlchemy Engine instance

    Raises:
        ValueError: If database_url is not provided and DATABASE_URL is not set
    """
    global engine, SessionLocal

    if database_url is None:
        database_url = get_database_url()

    engine_options = {"echo": False, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        engine_options.update(pool_size=5, max_overflow=10)

    engine = create_engine(database_url, **engine_options)

    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )

    return engine


def create_tables() -> None:
    """
    Create all tables in the database.

    Raises:
        RuntimeError: If database engine is not initialized
    """
    if engine is None:
        raise RuntimeError("Database engine not initialized. Call init_db() first.")

    Base.metadata.create_all(bind=engine)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic cleanup.

    Yields:
        SQLAlchemy Session instance

    Example:
        with get_db_session() as session:
            result = AvailabilityService(session, restaurant_id=1).check_availability(
                "2024-06-01", "18:30", 4
            )

    Raises:
        RuntimeError: If session factory is not initialized
    """
    if SessionLocal is None:
        raise RuntimeError("Session factory not initialized. Call init_db() first.")

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
