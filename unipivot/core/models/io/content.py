"""
Book report, notice and blog I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from unipivot.core.models.domain.enums import ReportStatus, Visibility


class BookReportCreate(BaseModel):
    book_title: str = Field(min_length=1, max_length=255)
    book_author: Optional[str] = Field(default=None, max_length=255)
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    visibility: Visibility = Visibility.public
    program_id: Optional[int] = None
    session_id: Optional[int] = None


class BookReportUpdate(BaseModel):
    book_title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    book_author: Optional[str] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    visibility: Optional[Visibility] = None


class BookReportRead(BaseModel):
    id: int
    author_id: int
    program_id: Optional[int] = None
    session_id: Optional[int] = None
    book_title: str
    book_author: Optional[str] = None
    title: str
    content: str
    visibility: Visibility
    status: ReportStatus
    review_note: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookReportReview(BaseModel):
    status: ReportStatus = Field(description="APPROVED or REJECTED")
    review_note: Optional[str] = None


class NoticeCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str
    is_pinned: bool = False
    is_public: bool = True


class NoticeUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = None
    is_pinned: Optional[bool] = None
    is_public: Optional[bool] = None


class NoticeRead(BaseModel):
    id: int
    title: str
    content: str
    is_pinned: bool
    is_public: bool
    views: int
    author_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BlogPostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255, description="Generated from the title when omitted")
    excerpt: Optional[str] = None
    content: str
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    cover_image: Optional[str] = None
    is_published: bool = False


class BlogPostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    cover_image: Optional[str] = None
    is_published: Optional[bool] = None


class BlogPostRead(BaseModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    category: Optional[str] = None
    tags: List[str]
    cover_image: Optional[str] = None
    is_published: bool
    published_at: Optional[datetime] = None
    views: int
    created_at: datetime

    class Config:
        from_attributes = True
