"""
Exception handlers for the BuildBoss server.

This package contains custom exception handlers for domain errors, request
validation errors and unexpected failures, and a setup function to register
them with the FastAPI application.
"""

from .global_handler import (
    buildboss_error_handler,
    global_exception_handler,
    setup_exception_handlers,
    validation_exception_handler,
)

__all__ = [
    "buildboss_error_handler",
    "global_exception_handler",
    "setup_exception_handlers",
    "validation_exception_handler",
]
