"""
Unit tests for the overlap calculator.

Reservations here are transient ORM objects; nothing touches the database.
"""
import pytest
from datetime import datetime, timedelta, timezone

from availability_engine.models.database import Reservation
from availability_engine.models.schemas import ReservationPolicy
from availability_engine.services.overlap import OverlapCalculator, reservation_duration


def _at(hour, minute=0):
    return datetime(2024, 6, 1, hour, minute, tzinfo=timezone.utc)


def _reservation(hour, minute=0, party_size=4, duration_minutes=60):
    return Reservation(
        start_time=datetime(2024, 6, 1, hour, minute),
        party_size=party_size,
        duration_minutes=duration_minutes,
    )


@pytest.fixture
def calculator():
    policy = ReservationPolicy(
        restaurant_id=1,
        time_zone="UTC",
        reservation_duration=60,
        turnaround_minutes=15,
        overlap_window_minutes=120,
    )
    return OverlapCalculator(policy)


class TestReservationDuration:
    """Test per-reservation duration resolution."""

    @pytest.mark.parametrize("duration,expected", [(90, 90), (None, 60), (0, 60), (-15, 60)])
    def test_falls_back_to_default(self, duration, expected):
        assert reservation_duration(_reservation(12, duration_minutes=duration), 60) == expected


class TestBufferedOverlap:
    """Test the closed-interval overlap with turnaround."""

    @pytest.mark.parametrize("hour,minute,expected", [
        (10, 59, False),  # slot ends 11:59, before the reservation starts
        (11, 0, True),    # slot ends exactly at 12:00
        (12, 30, True),
        (13, 15, True),   # reservation plus turnaround ends exactly at 13:15
        (13, 16, False),
    ])
    def test_overlap_boundaries(self, calculator, hour, minute, expected):
        assert calculator.overlaps(_reservation(12), _at(hour, minute)) is expected

    def test_reservation_duration_extends_span(self, calculator):
        long_dinner = _reservation(12, duration_minutes=120)
        assert calculator.overlaps(long_dinner, _at(14, 15)) is True
        assert calculator.overlaps(long_dinner, _at(14, 16)) is False

    def test_seats_taken_sums_overlapping_parties(self, calculator):
        reservations = [_reservation(12, party_size=4), _reservation(12, 30, party_size=2), _reservation(15, party_size=6)]
        assert calculator.seats_taken(_at(12, 30), reservations) == 6

    def test_seats_taken_coarse_fallback(self, calculator):
        """Test that a failing precise pass degrades to the window total."""
        broken = Reservation(start_time=None, party_size=3, duration_minutes=60)
        reservations = [_reservation(18, party_size=4), broken]

        assert calculator.seats_taken(_at(12), reservations) == 7

    def test_adding_overlapping_reservation_never_frees_seats(self, calculator):
        reservations = [_reservation(12, party_size=4)]
        before = calculator.seats_taken(_at(12, 30), reservations)
        after = calculator.seats_taken(_at(12, 30), reservations + [_reservation(13, party_size=2)])
        assert after >= before
        assert after - before == 2


class TestCeilingOverlap:
    """Test the half-open overlap without turnaround."""

    @pytest.mark.parametrize("hour,minute,expected", [
        (11, 0, False),   # slot ends at 12:00, half-open
        (11, 1, True),
        (12, 30, True),
        (12, 59, True),
        (13, 0, False),   # reservation ends at 13:00, no turnaround
    ])
    def test_booked_seats_boundaries(self, calculator, hour, minute, expected):
        booked = calculator.booked_seats_ceiling(_at(hour, minute), [_reservation(12, party_size=5)])
        assert booked == (5 if expected else 0)

    def test_ceiling_is_looser_than_buffered(self, calculator):
        reservations = [_reservation(12, party_size=5)]
        assert calculator.seats_taken(_at(13, 0), reservations) == 5
        assert calculator.booked_seats_ceiling(_at(13, 0), reservations) == 0


class TestCandidateWindow:
    """Test the reservation pre-filter window."""

    def test_window_defaults_to_overlap_window(self, calculator):
        start, end = calculator.candidate_window(_at(12))
        assert start == _at(12) - timedelta(minutes=120)
        assert end == _at(12) + timedelta(minutes=120)

    def test_long_duration_widens_lookback(self, calculator):
        """A 240-minute booking plus 15 minutes turnaround reaches 255 minutes back."""
        wide = OverlapCalculator(calculator.policy, longest_duration=240)

        start, end = wide.candidate_window(_at(12))
        assert start == _at(12) - timedelta(minutes=255)
        assert end == _at(12) + timedelta(minutes=120)
        assert wide.within_window(_reservation(10), _at(12, 30)) is True
        assert calculator.within_window(_reservation(10), _at(12, 30)) is False

    def test_missing_longest_duration_uses_default(self, calculator):
        assert OverlapCalculator(calculator.policy, longest_duration=None).lookback() == timedelta(minutes=120)

    def test_within_window(self, calculator):
        assert calculator.within_window(_reservation(14), _at(12)) is True
        assert calculator.within_window(_reservation(14, 1), _at(12)) is False
