"""
Core utilities and configuration for the ETL job system.

This package provides foundational components used by every job:

Modules:
    config: Application configuration and environment variable management
    database: SQLAlchemy engine and executor construction
    exceptions: Custom exception hierarchy for configuration errors
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import get_executor
    from core.exceptions import ConfigurationError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Get an executor for the configured database
    executor = get_executor()
    executor.execute("SELECT 1")
"""

from core.config import settings
from core.database import create_db_engine, get_executor
from core.exceptions import (
    ETLException,
    ConfigurationError,
    ObserverCapabilityError,
    UnknownStageError,
    BoundaryNotRegisteredError,
)
from core.logging import setup_logging

__all__ = [
    "settings",
    "create_db_engine",
    "get_executor",
    "setup_logging",
    # Exceptions
    "ETLException",
    "ConfigurationError",
    "ObserverCapabilityError",
    "UnknownStageError",
    "BoundaryNotRegisteredError",
]
