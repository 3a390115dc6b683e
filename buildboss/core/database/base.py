"""
Base database models and utilities.

This module provides the foundational database components used across
all entities in the centralized database layer using SQLModel.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import ConfigDict
from sqlmodel import SQLModel


class Base(SQLModel):
    """Base class for all SQLModel entities."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


def new_id() -> str:
    """Generate a primary key for a new record."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the form stored in every table."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Normalize a possibly timezone-aware datetime to naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def column_values(values: dict) -> dict:
    """Copy of ``values`` ready for a column: datetimes as naive UTC, enum members as their value."""
    converted = {}
    for key, value in values.items():
        if isinstance(value, datetime):
            value = to_naive_utc(value)
        elif isinstance(value, Enum):
            value = value.value
        converted[key] = value
    return converted
