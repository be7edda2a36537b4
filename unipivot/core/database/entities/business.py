"""
Internal business entity models.

Projects group calendar events and documents for the staff back office.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from unipivot.core.models.domain.enums import ProjectStatus

from ..base import Base, utc_now


class Project(Base, table=True):
    """Internal project.

    Table: projects
    """

    __tablename__ = "projects"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    status: str = Field(default=ProjectStatus.planning.value, max_length=16, index=True)
    budget: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    end_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    created_by: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)


class CalendarEvent(Base, table=True):
    """Calendar entry, optionally attached to a project.

    Table: calendar_events
    """

    __tablename__ = "calendar_events"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    type: str = Field(default="GENERAL", max_length=32)
    start_date: datetime = Field(index=True, sa_type=DateTime)
    end_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    all_day: bool = Field(default=False)
    location: Optional[str] = Field(default=None, max_length=255)
    project_id: Optional[int] = Field(default=None, foreign_key="projects.id", index=True, ondelete="SET NULL")
    created_by: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)


class Document(Base, table=True):
    """Document metadata; file storage itself lives outside the database.

    Table: documents
    """

    __tablename__ = "documents"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    type: str = Field(default="OTHER", max_length=32)
    file_path: str = Field(max_length=500)
    file_size: Optional[int] = Field(default=None, ge=0)
    project_id: Optional[int] = Field(default=None, foreign_key="projects.id", index=True, ondelete="SET NULL")
    uploaded_by: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
