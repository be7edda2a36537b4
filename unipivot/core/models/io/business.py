"""
Project, calendar event and document I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from unipivot.core.models.domain.enums import ProjectStatus

from .common import UTCDateTime


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.planning
    budget: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    budget: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None


class ProjectRead(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: ProjectStatus
    budget: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CalendarEventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    type: str = "GENERAL"
    start_date: UTCDateTime
    end_date: Optional[UTCDateTime] = None
    all_day: bool = False
    location: Optional[str] = None
    project_id: Optional[int] = None


class CalendarEventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    all_day: Optional[bool] = None
    location: Optional[str] = None
    project_id: Optional[int] = None


class CalendarEventRead(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    type: str
    start_date: datetime
    end_date: Optional[datetime] = None
    all_day: bool
    location: Optional[str] = None
    project_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DocumentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    type: str = "OTHER"
    file_path: str = Field(min_length=1, max_length=500)
    file_size: Optional[int] = Field(default=None, ge=0)
    project_id: Optional[int] = None


class DocumentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    type: Optional[str] = None
    file_path: Optional[str] = Field(default=None, min_length=1, max_length=500)
    file_size: Optional[int] = Field(default=None, ge=0)
    project_id: Optional[int] = None


class DocumentRead(BaseModel):
    id: int
    title: str
    type: str
    file_path: str
    file_size: Optional[int] = None
    project_id: Optional[int] = None
    uploaded_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
