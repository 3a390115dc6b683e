"""
Shared I/O models used across API endpoints.
"""

from __future__ import annotations

import math
from typing import Any, ClassVar, Optional, Tuple

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class Pagination(BaseModel):
    """Page metadata returned next to paginated lists."""

    page: int = Field(description="Current page, starting at 1")
    limit: int = Field(description="Page size")
    total: int = Field(description="Total number of matching records")
    pages: int = Field(description="Total number of pages")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    success: bool = True
    message: Optional[str] = None


def offset_for(page: int, limit: int) -> int:
    """Row offset of a 1-based page."""
    return (max(page, 1) - 1) * limit


class PartialUpdate(BaseModel):
    """
    Base for PATCH-style update schemas.

    Fields are optional so that omitted keys leave the stored value alone.
    Names listed in ``non_nullable`` map to NOT NULL columns: sending an
    explicit ``null`` for them is a validation error instead of a failed
    write.
    """

    non_nullable: ClassVar[Tuple[str, ...]] = ()

    @field_validator("*")
    @classmethod
    def _reject_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name in cls.non_nullable:
            raise ValueError(f"{info.field_name} cannot be null")
        return value
