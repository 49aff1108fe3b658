"""
Unit tests for settings, database helpers and the reservation policy.

Tests:
- Settings loading from environment variables
- Database connection and initialization
- Resolving a restaurant row into a ReservationPolicy
- Constraint violations (invalid data)
"""
import pytest
from datetime import time
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from availability_engine import config
from availability_engine.config import (
    Settings,
    get_database_url,
    DEFAULT_RESERVATION_DURATION,
    DEFAULT_TURNAROUND_MINUTES,
    DEFAULT_OVERLAP_WINDOW_MINUTES,
    DEFAULT_TIME_SLOT_INTERVAL,
)
from availability_engine.models import database
from availability_engine.models.database import Restaurant, OperatingHour, init_db, create_tables, get_db_session
from availability_engine.models.schemas import ReservationPolicy


@pytest.fixture
def clean_settings(monkeypatch):
    """Reset the cached settings and clear related environment variables."""
    for name in ("DATABASE_URL", "ENVIRONMENT", "LOG_LEVEL", "LOG_TO_FILE", "LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "_settings", None)
    monkeypatch.setitem(Settings.model_config, "env_file", None)
    yield
    config._settings = None


class TestSettings:
    """Test process settings."""

    def test_defaults(self, clean_settings):
        settings = Settings()
        assert settings.database_url is None
        assert settings.environment == "development"
        assert settings.log_level is None
        assert settings.log_to_file is None
        assert settings.log_dir == "logs"

    def test_reads_environment(self, clean_settings, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_TO_FILE", "false")

        settings = Settings()
        assert settings.database_url == "sqlite:///:memory:"
        assert settings.environment == "production"
        assert settings.log_to_file is False

    def test_get_database_url_requires_setting(self, clean_settings):
        with pytest.raises(ValueError, match="DATABASE_URL"):
            get_database_url()

    def test_get_database_url(self, clean_settings, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
        assert get_database_url() == "sqlite:///:memory:"


class TestDatabaseConnection:
    """Test database initialization and connectivity."""

    def test_init_db_with_url(self, test_db_url):
        """Test database initialization with explicit URL."""
        engine = init_db(test_db_url)
        assert engine is not None
        assert engine.url.database == ":memory:"

    def test_session_round_trip(self, tmp_path):
        init_db(f"sqlite:///{tmp_path / 'engine.db'}")
        create_tables()

        with get_db_session() as session:
            session.add(Restaurant(name="Harbor Grill", time_zone="Pacific/Guam"))

        with get_db_session() as session:
            restaurant = session.query(Restaurant).one()
            assert restaurant.default_reservation_length == 60
            assert restaurant.time_slot_interval == 30

    def test_session_requires_init(self, monkeypatch):
        monkeypatch.setattr(database, "SessionLocal", None)
        with pytest.raises(RuntimeError, match="init_db"):
            with get_db_session():
                pass

    def test_db_session_creation(self, db_session: Session):
        """Test that database session can be created."""
        assert db_session is not None
        assert db_session.is_active


class TestConstraints:
    """Test operating hours constraints."""

    def test_one_row_per_day(self, db_session: Session, restaurant):
        db_session.add(OperatingHour(
            restaurant_id=restaurant.id, day_of_week=3, open_time=time(9, 0), close_time=time(12, 0)
        ))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_day_of_week_range(self, db_session: Session):
        restaurant = Restaurant(name="Night Owl")
        db_session.add(restaurant)
        db_session.flush()

        db_session.add(OperatingHour(restaurant_id=restaurant.id, day_of_week=7))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()


class TestReservationPolicy:
    """Test resolving restaurant settings into a policy."""

    def test_configured_values(self, restaurant):
        policy = ReservationPolicy.from_restaurant(restaurant)

        assert policy.restaurant_id == restaurant.id
        assert policy.time_zone == "Pacific/Guam"
        assert policy.max_party_size == 10
        assert policy.reservation_duration == 60
        assert policy.turnaround_minutes == 15
        assert policy.overlap_window_minutes == 120
        assert policy.time_slot_interval == 30
        assert policy.seating_capacity is None

    def test_missing_and_invalid_values_use_defaults(self):
        restaurant = Restaurant(
            id=3,
            name="Sparse",
            time_zone="",
            max_party_size=0,
            default_reservation_length=None,
            turnaround_time=-5,
            overlap_window=None,
            time_slot_interval=0,
            admin_settings={"seating_capacity": "40"},
        )

        policy = ReservationPolicy.from_restaurant(restaurant)

        assert policy.time_zone is None
        assert policy.max_party_size is None
        assert policy.reservation_duration == DEFAULT_RESERVATION_DURATION
        assert policy.turnaround_minutes == DEFAULT_TURNAROUND_MINUTES
        assert policy.overlap_window_minutes == DEFAULT_OVERLAP_WINDOW_MINUTES
        assert policy.time_slot_interval == DEFAULT_TIME_SLOT_INTERVAL
        assert policy.seating_capacity == 40

    def test_policy_is_frozen(self, restaurant):
        policy = ReservationPolicy.from_restaurant(restaurant)
        with pytest.raises(Exception):
            policy.max_party_size = 50
