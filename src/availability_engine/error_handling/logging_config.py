"""
Centralized logging configuration for the availability engine.

This module configures loguru for structured logging with different
levels and formats for development vs production.
"""
import sys
import time
import functools
from pathlib import Path
from typing import Optional
from loguru import logger


def configure_logging(
    log_level: str = "INFO",
    log_to_file: bool = True,
    log_dir: str = "logs",
    rotation: str = "100 MB",
    retention: str = "30 days",
    format_type: str = "detailed"
) -> None:
    """
    Configure loguru logging for the application.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to files in addition to console
        log_dir: Directory for log files
        rotation: When to rotate log files (e.g., "100 MB", "1 day")
        retention: How long to keep old log files
        format_type: Format style ("simple", "detailed")
    """
    # Remove default logger
    logger.remove()

    if format_type == "simple":
        format_string = "<level>{level: <8}</level> | <level>{message}</level>"
    else:  # detailed
        format_string = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

    # Console handler (always)
    logger.add(
        sys.stderr,
        format=format_string,
        level=log_level,
        colorize=True,
        backtrace=True,
        diagnose=True
    )

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # General log file (all levels)
        logger.add(
            log_path / "availability_{time:YYYY-MM-DD}.log",
            format=format_string,
            level=log_level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=True
        )

        # Error log file (ERROR and CRITICAL only)
        logger.add(
            log_path / "errors_{time:YYYY-MM-DD}.log",
            format=format_string,
            level="ERROR",
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=True
        )

        # Audit trail of availability decisions
        logger.add(
            log_path / "decisions_{time:YYYY-MM-DD}.log",
            format=format_string,
            level="INFO",
            rotation="1 day",
            retention="90 days",
            compression="zip",
            filter=lambda record: "AVAILABILITY" in record["extra"].get("category", "")
        )

    logger.info(
        f"Logging configured: level={log_level}, "
        f"file_logging={log_to_file}, "
        f"format={format_type}"
    )


def log_availability_event(
    event_type: str,
    restaurant_id: Optional[int] = None,
    location_id: Optional[int] = None,
    details: Optional[dict] = None
) -> None:
    """
    Log an availability decision for the audit trail.

    Args:
        event_type: Type of event (e.g., "AVAILABLE", "UNAVAILABLE", "SLOTS", "MAX_PARTY")
        restaurant_id: Restaurant the decision was made for
        location_id: Location, if the query was location-specific
        details: Additional event details
    """
    details = details or {}

    logger.bind(category="AVAILABILITY").info(
        f"AVAILABILITY {event_type} | "
        f"restaurant={restaurant_id} | "
        f"location={location_id} | "
        f"details={details}"
    )


def log_error_with_context(
    error: Exception,
    context: dict,
    severity: str = "ERROR"
) -> None:
    """
    Log an error with full context information.

    Args:
        error: Exception that occurred
        context: Context dictionary with relevant information
        severity: Log severity (ERROR, WARNING, CRITICAL)
    """
    logger.bind(category="ERROR", **context).log(
        severity,
        f"Error occurred: {type(error).__name__}: {str(error)} | context={context}"
    )

    # Stack trace for ERROR and CRITICAL
    if severity in ["ERROR", "CRITICAL"]:
        logger.opt(exception=error).debug("Stack trace")


def log_performance(operation_name: Optional[str] = None):
    """
    Decorator to log function performance.

    Args:
        operation_name: Name of operation (defaults to function name)

    Example:
        @log_performance("check_availability")
        def check_availability(...):
            ...
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            name = operation_name or func.__name__
            start_time = time.time()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.time() - start_time
                logger.bind(category="PERFORMANCE").warning(
                    f"Performance | {name} | "
                    f"duration={duration:.3f}s | "
                    f"success=False | "
                    f"error={type(e).__name__}"
                )
                raise

            duration = time.time() - start_time
            logger.bind(category="PERFORMANCE").debug(
                f"Performance | {name} | "
                f"duration={duration:.3f}s | "
                f"success=True"
            )
            return result

        return wrapper
    return decorator


def init_logging(
    environment: str = "development",
    log_level: Optional[str] = None,
    log_to_file: Optional[bool] = None,
    log_dir: str = "logs"
) -> None:
    """
    Initialize logging with environment-specific settings.

    Args:
        environment: Environment name ("development", "production", "test")
        log_level: Optional override of the environment's default level
        log_to_file: Optional override of the environment's file logging
        log_dir: Directory for log files
    """
    if environment == "production":
        configure_logging(
            log_level=log_level or "INFO",
            log_to_file=True if log_to_file is None else log_to_file,
            log_dir=log_dir,
            format_type="detailed",
            rotation="100 MB",
            retention="90 days"
        )
    elif environment == "test":
        configure_logging(
            log_level=log_level or "WARNING",
            log_to_file=False,
            format_type="simple"
        )
    else:  # development
        configure_logging(
            log_level=log_level or "DEBUG",
            log_to_file=bool(log_to_file),
            log_dir=log_dir,
            format_type="detailed",
            rotation="50 MB",
            retention="7 days"
        )

    logger.info(f"Logging initialized for {environment} environment")
