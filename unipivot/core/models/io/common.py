"""Shared I/O building blocks: pagination envelope and timestamp parsing."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, TypeVar

from pydantic import AfterValidator, BaseModel, Field
from typing_extensions import Annotated

from unipivot.core.database.base import as_naive_utc

T = TypeVar("T")

# Accepts aware or naive input and stores naive UTC, matching the database columns.
UTCDateTime = Annotated[datetime, AfterValidator(as_naive_utc)]


class Page(BaseModel, Generic[T]):
    """One page of a listing."""

    items: List[T]
    total: int = Field(description="Number of matching records across all pages")
    page: int = Field(description="1-based page number")
    limit: int = Field(description="Page size")


class MessageResponse(BaseModel):
    message: str


def column_values(data: BaseModel, exclude_unset: bool = False) -> Dict[str, Any]:
    """Dump an input model for entity columns, storing enums by their value."""
    values = data.model_dump(exclude_unset=exclude_unset)
    return {key: value.value if isinstance(value, Enum) else value for key, value in values.items()}
