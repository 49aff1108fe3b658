"""
Error handling module for the reservation availability engine.

This module provides the error handling infrastructure shared by every
engine component:
- Custom exception hierarchy
- Reason strings and failure classification for results
- Boundary and graceful-degradation decorators
- Logging utilities

Main Components:
    - exceptions: Custom exception classes for all error scenarios
    - error_messages: Reason strings, failure messages, classification
    - handlers: Decorators and utilities for error handling
    - logging_config: loguru sinks and structured event logging
"""

from .exceptions import (
    AvailabilityEngineError,
    InputValidationError,
    InvalidTimeError,
    InvalidPartySizeError,
    ConfigurationError,
    TimezoneResolutionError,
    DatabaseError,
    DatabaseConnectionError,
    DatabaseQueryError,
)

from .error_messages import (
    get_error_message,
    classify_error,
    format_slot_time,
)

from .handlers import (
    log_error,
    handle_errors,
    graceful_degradation,
)

from .logging_config import (
    configure_logging,
    init_logging,
    log_availability_event,
    log_error_with_context,
    log_performance,
)

__all__ = [
    # Exceptions
    "AvailabilityEngineError",
    "InputValidationError",
    "InvalidTimeError",
    "InvalidPartySizeError",
    "ConfigurationError",
    "TimezoneResolutionError",
    "DatabaseError",
    "DatabaseConnectionError",
    "DatabaseQueryError",

    # Error Messages
    "get_error_message",
    "classify_error",
    "format_slot_time",

    # Error Handlers
    "log_error",
    "handle_errors",
    "graceful_degradation",

    # Logging
    "configure_logging",
    "init_logging",
    "log_availability_event",
    "log_error_with_context",
    "log_performance",
]
