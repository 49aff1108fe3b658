"""
Centralized error handling utilities for the availability engine.

This module provides utilities for:
- Error logging with context
- Converting errors to an operation's failure result at its boundary
- Graceful degradation to documented fallback values
"""
import functools
from typing import Optional, Callable, Any, Dict
from loguru import logger

from .exceptions import (
    AvailabilityEngineError,
    InputValidationError,
    ConfigurationError,
)
from .logging_config import log_error_with_context


def log_error(
    error: Exception,
    operation: str,
    context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log an error with a severity matched to its category.

    Input and configuration problems are the caller's to fix and log as
    warnings; everything else logs as an error with a stack trace.

    Args:
        error: Exception that occurred
        operation: Name of the operation that failed
        context: Additional context information
    """
    full_context = {"operation": operation, **(context or {})}
    if isinstance(error, AvailabilityEngineError):
        full_context.update(
            {k: v for k, v in error.context.items() if k not in full_context}
        )

    if isinstance(error, (InputValidationError, ConfigurationError)):
        severity = "WARNING"
    else:
        severity = "ERROR"

    log_error_with_context(error, context=full_context, severity=severity)


def handle_errors(operation: str, on_error: Callable[[Exception], Any]):
    """
    Decorator marking the outermost boundary of a public operation.

    Any exception escaping the wrapped function is logged and handed to
    on_error, whose return value becomes the operation's result. Nothing
    is re-raised.

    Args:
        operation: Operation name used in logs
        on_error: Builds the operation's failure result from the exception

    Returns:
        Decorated function that never raises
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                log_error(e, operation)
                return on_error(e)

        return wrapper
    return decorator


def graceful_degradation(
    fallback_value: Any = None,
    log_message: Optional[str] = None
):
    """
    Decorator for graceful degradation when function fails.

    Args:
        fallback_value: Value to return if main function fails
        log_message: Custom log message for degradation

    Returns:
        Decorated function with fallback logic
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                message = log_message or f"Function {func.__name__} failed, using fallback"
                logger.warning(f"{message}: {str(e)}")
                return fallback_value

        return wrapper
    return decorator
