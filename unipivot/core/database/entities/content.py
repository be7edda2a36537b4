"""
Published content entity models.

Notices are short announcements, blog posts are long-form articles addressed
by slug.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class Notice(Base, table=True):
    """Announcement; pinned notices are listed first.

    Table: notices
    """

    __tablename__ = "notices"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    content: str = Field()
    is_pinned: bool = Field(default=False, index=True)
    is_public: bool = Field(default=True)
    views: int = Field(default=0)
    author_id: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)


class BlogPost(Base, table=True):
    """Blog article.

    Table: blog_posts
    """

    __tablename__ = "blog_posts"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    slug: str = Field(max_length=255, unique=True, index=True)
    excerpt: Optional[str] = Field(default=None)
    content: str = Field()
    category: Optional[str] = Field(default=None, max_length=64, index=True)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    cover_image: Optional[str] = Field(default=None, max_length=500)
    is_published: bool = Field(default=False, index=True)
    published_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    views: int = Field(default=0)
    author_id: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)
