"""
User-facing reason strings and failure messages for availability results.

Every unavailable answer carries one of the reasons built here so the
booking UI can tell the guest why a slot cannot be offered. Failure results
carry a message from get_error_message() and a classification from
classify_error() that the HTTP layer maps to a status code.
"""
from datetime import time
from typing import Optional

from .exceptions import (
    AvailabilityEngineError,
    InputValidationError,
    ConfigurationError,
)


# ============================================================================
# Unavailability reasons
# ============================================================================

CLOSED_ON_DAY = "Restaurant is closed on this day"
CLOSED_AT_TIME = "Restaurant is closed at this time"
SLOTS_UNAVAILABLE = "Unable to load available time slots right now"


def blocked_reason(block_reason: Optional[str]) -> str:
    """Reason for a time covered by a blocked period."""
    return f"Time is blocked: {block_reason or 'Unavailable'}"


def special_event_reason(event_name: Optional[str]) -> str:
    """Reason for a time inside an availability-affecting special event."""
    return f"Special event: {event_name or 'Private event'}"


def exclusive_event_reason(event_name: Optional[str]) -> str:
    return f"Special event: {event_name or 'Private event'} is exclusively booked"


def event_capacity_reason(event_name: Optional[str]) -> str:
    return f"Special event capacity reached: {event_name or 'Private event'}"


def party_size_exceeded_reason(party_size: int, max_party_size: int) -> str:
    return (
        f"Party size of {party_size} exceeds restaurant maximum "
        f"of {max_party_size}"
    )


def insufficient_seats_reason(available_seats: int, party_size: int) -> str:
    return (
        f"Insufficient seats available: {available_seats} open, "
        f"{party_size} requested"
    )


def format_slot_time(slot_time: time) -> str:
    """Format a slot start the way the booking UI expects ("HH:MM")."""
    return slot_time.strftime("%H:%M")


# ============================================================================
# Failure messages and classification
# ============================================================================

# Classification values consumed by the HTTP layer
UNPROCESSABLE_ENTITY = "unprocessable_entity"
NOT_FOUND = "not_found"
INTERNAL_SERVER_ERROR = "internal_server_error"


def get_error_message(error: Exception, operation: str) -> str:
    """
    Build the message placed in a failure result's errors list.

    Args:
        error: Exception that ended the operation
        operation: Human-readable operation name (e.g. "check availability")

    Returns:
        Message such as "Failed to check availability: Invalid time '25:99'"
    """
    if isinstance(error, AvailabilityEngineError):
        detail = error.message
    else:
        detail = str(error) or type(error).__name__
    return f"Failed to {operation}: {detail}"


def classify_error(error: Exception) -> str:
    """
    Classify an error for the HTTP layer.

    Args:
        error: Exception that ended the operation

    Returns:
        One of UNPROCESSABLE_ENTITY, NOT_FOUND, INTERNAL_SERVER_ERROR
    """
    if isinstance(error, InputValidationError):
        return UNPROCESSABLE_ENTITY
    if isinstance(error, ConfigurationError):
        return NOT_FOUND
    return INTERNAL_SERVER_ERROR
