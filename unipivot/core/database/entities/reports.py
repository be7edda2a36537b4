"""Book report entity model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from unipivot.core.models.domain.enums import ReportStatus, Visibility

from ..base import Base, utc_now


class BookReport(Base, table=True):
    """Book report written by a member, optionally for a program session.

    Table: book_reports
    """

    __tablename__ = "book_reports"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    author_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    program_id: Optional[int] = Field(default=None, foreign_key="programs.id", index=True, ondelete="SET NULL")
    session_id: Optional[int] = Field(default=None, foreign_key="program_sessions.id", ondelete="SET NULL")

    book_title: str = Field(max_length=255)
    book_author: Optional[str] = Field(default=None, max_length=255)
    title: str = Field(max_length=255)
    content: str = Field()
    visibility: str = Field(default=Visibility.public.value, max_length=16)
    status: str = Field(default=ReportStatus.draft.value, max_length=16, index=True)

    review_note: Optional[str] = Field(default=None)
    reviewed_by: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    reviewed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)
