"""
Configuration module for the reservation availability engine.

Loads environment variables for the process-level settings (database,
logging) and defines the named defaults used whenever a restaurant's own
reservation settings are missing or invalid.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


# ============================================================================
# Engine defaults
# ============================================================================

DEFAULT_RESERVATION_DURATION = 60  # Minutes
DEFAULT_TURNAROUND_MINUTES = 15
DEFAULT_OVERLAP_WINDOW_MINUTES = 120
DEFAULT_TIME_SLOT_INTERVAL = 30

# Fallback seat counts when no layout or configured capacity exists.
# Slot listing and immediate checks use the larger figure, the
# max-party-size ceiling query uses the smaller one.
DEFAULT_CAPACITY_SLOTS = 26
DEFAULT_CAPACITY_MAXPARTY = 18

# Placeholder hours reported for a weekday with no operating-hours row
DEFAULT_LISTING_OPEN_TIME = "09:00"
DEFAULT_LISTING_CLOSE_TIME = "17:00"

# Reservation statuses that no longer occupy seats
INACTIVE_RESERVATION_STATUSES = ("canceled", "finished", "no_show")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: Database connection string (optional for in-process use)
        environment: Deployment environment used to pick logging defaults
        log_level: Minimum log level
        log_to_file: Whether file sinks are installed
        log_dir: Directory for log files
    """

    # Database configuration
    database_url: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        description="Database connection string"
    )

    # Logging configuration
    environment: str = Field(
        default="development",
        alias="ENVIRONMENT",
        description="development, production or test"
    )

    log_level: Optional[str] = Field(
        default=None,
        alias="LOG_LEVEL",
        description="Overrides the environment's default log level"
    )

    log_to_file: Optional[bool] = Field(
        default=None,
        alias="LOG_TO_FILE",
        description="Write rotating log files in addition to stderr"
    )

    log_dir: str = Field(
        default="logs",
        alias="LOG_DIR",
        description="Directory for log files"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def get_database_url() -> str:
    """
    Get the configured database URL.

    Returns:
        Database connection string

    Raises:
        ValueError: If DATABASE_URL is not set
    """
    database_url = get_settings().database_url
    if not database_url:
        raise ValueError(
            "DATABASE_URL environment variable is not set. "
            "Please set it to your database connection string."
        )
    return database_url
