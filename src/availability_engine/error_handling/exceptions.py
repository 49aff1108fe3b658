"""
Custom Exception Classes for the reservation availability engine.

This module defines exception classes for different error categories:
- Input Errors (unparseable times, party sizes)
- Configuration Errors (missing restaurant or location)
- Technical Errors (timezone resolution, database)

Each exception includes context for logging and for classifying the
failure result handed back to callers.
"""

from typing import Optional, Any, Dict


class AvailabilityEngineError(Exception):
    """Base exception for all availability engine errors."""

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recoverable: bool = True
    ):
        """
        Initialize availability engine error.

        Args:
            message: Technical error message for logging
            user_message: User-friendly message for the booking UI
            context: Additional context for logging
            recoverable: Whether the caller can retry with corrected input
        """
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message
        self.context = context or {}
        self.recoverable = recoverable


# ============================================================================
# Input Errors
# ============================================================================

class InputValidationError(AvailabilityEngineError):
    """
    Raised when caller-supplied input cannot be used.

    Examples:
    - Time string that does not split into hour and minute
    - Party size that is not integer-coercible or below 1
    """

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        context = {
            "field": field,
            "value": value,
            **kwargs
        }
        super().__init__(message, user_message, context, recoverable=True)
        self.field = field
        self.value = value


class InvalidTimeError(InputValidationError):
    """Raised when a time string is not in H:MM or HH:MM form."""

    def __init__(self, value: Any, **kwargs):
        super().__init__(
            message=f"Invalid time {value!r}, expected H:MM or HH:MM",
            user_message="Please provide a time like 18:30.",
            field="time",
            value=value,
            **kwargs
        )


class InvalidPartySizeError(InputValidationError):
    """Raised when party size is not a positive integer."""

    def __init__(self, value: Any, **kwargs):
        super().__init__(
            message=f"Invalid party size {value!r}, expected a positive integer",
            user_message="Party size must be at least 1.",
            field="party_size",
            value=value,
            **kwargs
        )


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(AvailabilityEngineError):
    """Raised when the restaurant or location being queried does not exist."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            user_message="This restaurant is not accepting reservations right now.",
            context=kwargs,
            recoverable=False
        )


# ============================================================================
# Technical Errors
# ============================================================================

class TimezoneResolutionError(AvailabilityEngineError):
    """Raised when a restaurant's named timezone cannot be loaded."""

    def __init__(self, time_zone: Optional[str], original_error: Optional[Exception] = None):
        super().__init__(
            f"Unknown timezone {time_zone!r}",
            context={
                "time_zone": time_zone,
                "original_error": str(original_error) if original_error else None,
            },
        )
        self.time_zone = time_zone
        self.original_error = original_error


class DatabaseError(AvailabilityEngineError):
    """
    Raised when reading collaborator data fails.

    Examples:
    - Connection errors
    - Query failures
    """

    def __init__(
        self,
        message: str,
        error_type: str = "unknown",
        original_error: Optional[Exception] = None,
        retry_possible: bool = True,
        **kwargs
    ):
        """
        Initialize database error.

        Args:
            message: Error message
            error_type: Type of error (connection, query)
            original_error: Original exception
            retry_possible: Whether retry is possible
            **kwargs: Additional context
        """
        context = {
            "error_type": error_type,
            "original_error": str(original_error) if original_error else None,
            "retry_possible": retry_possible,
            **kwargs
        }
        super().__init__(message, context=context, recoverable=retry_possible)
        self.error_type = error_type
        self.original_error = original_error
        self.retry_possible = retry_possible


class DatabaseConnectionError(DatabaseError):
    """Raised when the database connection fails."""

    def __init__(self, message: str = "Database connection failed", **kwargs):
        super().__init__(
            message=message,
            error_type="connection",
            retry_possible=True,
            **kwargs
        )


class DatabaseQueryError(DatabaseError):
    """Raised when a database query fails."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            error_type="query",
            retry_possible=True,
            **kwargs
        )
