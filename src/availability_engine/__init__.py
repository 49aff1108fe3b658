"""
Reservation availability and capacity engine.

Answers whether a party can be seated at a restaurant, which time slots
remain open on a date, and how large a party fits at a moment, from the
restaurant's hours, closures, seating layout and existing reservations.
"""
from .services import AvailabilityService

__version__ = "0.1.0"

__all__ = ["AvailabilityService"]
