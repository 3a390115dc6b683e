"""
Core utilities and configuration for BuildBoss.

This package provides core functionality including logging configuration,
security helpers, domain errors, database setup and the I/O models.
"""

from buildboss.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
