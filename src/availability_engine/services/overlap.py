"""
Overlap calculator - seats already committed around a candidate slot.

Two policies are provided on purpose:

* seats_taken() answers "does this request fit with buffer room". Each
  reservation occupies [start, start + duration + turnaround] and the
  candidate occupies [start, start + default duration]; closed intervals.
* booked_seats_ceiling() answers "what is the ceiling right now". No
  turnaround is added and the intervals are half-open.
"""
from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple

from loguru import logger

from ..models.database import Reservation
from ..models.schemas import ReservationPolicy
from .time_resolution import from_storage


def reservation_duration(reservation: Reservation, default_duration: int) -> int:
    """A reservation's own duration in minutes, or the restaurant default."""
    try:
        minutes = int(reservation.duration_minutes) if reservation.duration_minutes is not None else 0
    except (TypeError, ValueError):
        minutes = 0
    return minutes if minutes > 0 else default_duration


class OverlapCalculator:
    """
    Computes seats taken by existing reservations for a candidate slot.

    Args:
        policy: Resolved reservation settings of the restaurant
        longest_duration: Longest duration among the reservations that may
            be considered, so the window reaches back far enough to find
            long reservations that started earlier
    """

    def __init__(self, policy: ReservationPolicy, longest_duration: Optional[int] = None):
        self.policy = policy
        self.longest_duration = max(int(longest_duration or 0), policy.reservation_duration)

    def lookback(self) -> timedelta:
        """How far before a candidate start a still-seated reservation can begin."""
        return timedelta(minutes=max(
            self.policy.overlap_window_minutes,
            self.longest_duration + self.policy.turnaround_minutes,
        ))

    def candidate_window(self, candidate_start: datetime) -> Tuple[datetime, datetime]:
        """The start_time range reservations are pre-filtered to."""
        ahead = timedelta(minutes=self.policy.overlap_window_minutes)
        return candidate_start - self.lookback(), candidate_start + ahead

    def within_window(self, reservation: Reservation, candidate_start: datetime) -> bool:
        window_start, window_end = self.candidate_window(candidate_start)
        return window_start <= from_storage(reservation.start_time) <= window_end

    def reservation_span(self, reservation: Reservation, turnaround: bool = True) -> Tuple[datetime, datetime]:
        """Aware start and end of the time a reservation occupies its seats."""
        start = from_storage(reservation.start_time)
        minutes = reservation_duration(reservation, self.policy.reservation_duration)
        if turnaround:
            minutes += self.policy.turnaround_minutes
        return start, start + timedelta(minutes=minutes)

    def overlaps(self, reservation: Reservation, candidate_start: datetime) -> bool:
        """Closed-interval test with the reservation extended by turnaround."""
        slot_end = candidate_start + timedelta(minutes=self.policy.reservation_duration)
        start, effective_end = self.reservation_span(reservation, turnaround=True)
        return start <= slot_end and effective_end >= candidate_start

    def seats_taken(self, candidate_start: datetime, reservations: Iterable[Reservation]) -> int:
        """
        Seats committed to reservations overlapping the candidate slot.

        Args:
            candidate_start: Aware start of the slot being tested
            reservations: Active reservations pre-filtered to the overlap window

        Returns:
            Sum of party sizes of overlapping reservations. If the precise
            computation fails, the sum over every supplied reservation.
        """
        reservations = list(reservations)
        try:
            return sum(
                int(reservation.party_size)
                for reservation in reservations
                if self.overlaps(reservation, candidate_start)
            )
        except Exception as e:
            coarse = sum(int(reservation.party_size or 0) for reservation in reservations)
            logger.warning(
                f"Precise overlap computation failed ({type(e).__name__}: {e}), "
                f"using window total of {coarse} seats"
            )
            return coarse

    def booked_seats_ceiling(self, slot_start: datetime, reservations: Iterable[Reservation]) -> int:
        """
        Seats booked during [slot_start, slot_start + default duration),
        ignoring turnaround.
        """
        slot_end = slot_start + timedelta(minutes=self.policy.reservation_duration)
        booked = 0
        for reservation in reservations:
            start, end = self.reservation_span(reservation, turnaround=False)
            if start < slot_end and end > slot_start:
                booked += int(reservation.party_size)
        return booked

