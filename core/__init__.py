"""
Core utilities and configuration for the batch ETL pipeline.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Database engine and session factory creation
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import Settings, settings
    from core.database import create_engine_from_settings, create_session_factory
    from core.exceptions import DatabaseError, SkipLimitExceededError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging(settings)

    # Get database session
    engine = create_engine_from_settings(settings)
    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "Settings",
    "settings",
    "create_engine_from_settings",
    "create_session_factory",
    "setup_logging",
    # Exceptions
    "ETLException",
    "CSVExtractionError",
    "TransformationError",
    "ValidationError",
    "RecordMappingError",
    "LoadError",
    "DatabaseError",
    "DatabaseConnectionError",
    "PipelineError",
    "SkipLimitExceededError",
    "StartLimitExceededError",
]
