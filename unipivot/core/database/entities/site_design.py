"""
Site design entity models.

Banners, popups, floating buttons, SEO metadata, homepage sections and key/value site settings.
Every change to these tables is recorded in the change history, and restore
points snapshot all of them together.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class AnnouncementBanner(Base, table=True):
    """Site-wide announcement bar.

    ``target_pages`` limits the banner to paths with the given prefixes (empty
    means every page); ``exclude_pages`` wins over targets.

    Table: announcement_banners
    """

    __tablename__ = "announcement_banners"
    __table_args__ = ({"extend_existing": True, "sqlite_autoincrement": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    content: Optional[str] = Field(default=None)
    type: str = Field(default="INFO", max_length=16)
    background_color: Optional[str] = Field(default=None, max_length=32)
    text_color: Optional[str] = Field(default=None, max_length=32)
    link_url: Optional[str] = Field(default=None, max_length=500)
    link_text: Optional[str] = Field(default=None, max_length=100)
    position: str = Field(default="TOP", max_length=16)
    priority: int = Field(default=0)
    is_active: bool = Field(default=True)
    start_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    end_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    target_pages: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    exclude_pages: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)


class PopupTemplate(Base, table=True):
    """Reusable popup layout.

    Table: popup_templates
    """

    __tablename__ = "popup_templates"
    __table_args__ = ({"extend_existing": True, "sqlite_autoincrement": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    description: Optional[str] = Field(default=None)
    layout: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)


class Popup(Base, table=True):
    """Popup shown on matching pages.

    The ``*_count`` columns are engagement counters fed by visitor tracking;
    they are not part of the tracked design state.

    Table: popups
    """

    __tablename__ = "popups"
    __table_args__ = ({"extend_existing": True, "sqlite_autoincrement": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    content: Optional[str] = Field(default=None)
    template_id: Optional[int] = Field(default=None, foreign_key="popup_templates.id", ondelete="SET NULL")
    trigger: str = Field(default="ON_LOAD", max_length=32)
    trigger_value: Optional[int] = Field(default=None, description="Delay seconds or scroll percent")
    target_pages: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    exclude_pages: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    show_once: bool = Field(default=False)
    priority: int = Field(default=0)
    is_active: bool = Field(default=True)
    start_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    end_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    impression_count: int = Field(default=0)
    click_count: int = Field(default=0)
    dismiss_count: int = Field(default=0)
    conversion_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)


class SeoSetting(Base, table=True):
    """Search engine and social metadata for one page key.

    Table: seo_settings
    """

    __tablename__ = "seo_settings"
    __table_args__ = ({"extend_existing": True, "sqlite_autoincrement": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    page_key: str = Field(max_length=100, unique=True, index=True)
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None)
    keywords: Optional[str] = Field(default=None)
    canonical_url: Optional[str] = Field(default=None, max_length=500)
    og_title: Optional[str] = Field(default=None, max_length=255)
    og_description: Optional[str] = Field(default=None)
    og_image: Optional[str] = Field(default=None, max_length=500)
    twitter_card: Optional[str] = Field(default="summary_large_image", max_length=32)
    robots: str = Field(default="index,follow", max_length=64)
    priority: int = Field(default=0)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)


class SiteSection(Base, table=True):
    """Editable homepage section.

    Table: site_sections
    """

    __tablename__ = "site_sections"
    __table_args__ = ({"extend_existing": True, "sqlite_autoincrement": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    section_key: str = Field(max_length=100, unique=True, index=True)
    name: str = Field(max_length=100)
    content: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    is_visible: bool = Field(default=True)
    sort_order: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)


class SiteSetting(Base, table=True):
    """Key/value site setting.

    Table: site_settings
    """

    __tablename__ = "site_settings"
    __table_args__ = ({"extend_existing": True, "sqlite_autoincrement": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(max_length=100, unique=True, index=True)
    value: Any = Field(default=None, sa_column=Column(JSON(none_as_null=True), nullable=True))
    category: str = Field(default="general", max_length=64)
    description: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)


class FloatingButton(Base, table=True):
    """Fixed call-to-action button pinned to a corner of the page.

    When ``is_scheduled`` is set the button is shown only between
    ``start_date`` and ``end_date``. ``target_roles`` limits it to visitors of
    the given grades; empty means everyone, anonymous visitors included.

    Table: floating_buttons
    """

    __tablename__ = "floating_buttons"
    __table_args__ = ({"extend_existing": True, "sqlite_autoincrement": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    icon: Optional[str] = Field(default=None, max_length=64)
    color: str = Field(default="#2563eb", max_length=32)
    hover_color: Optional[str] = Field(default=None, max_length=32)
    text_color: str = Field(default="#ffffff", max_length=32)
    link_url: str = Field(max_length=500)
    open_in_new_tab: bool = Field(default=False)
    position: str = Field(default="BOTTOM_RIGHT", max_length=16)
    offset_x: int = Field(default=20)
    offset_y: int = Field(default=20)
    size: str = Field(default="MEDIUM", max_length=16)
    show_label: bool = Field(default=True)
    animation: str = Field(default="NONE", max_length=16)
    animation_delay: int = Field(default=0)
    show_on: str = Field(default="ALL", max_length=16)
    scroll_threshold: Optional[int] = Field(default=None)
    is_scheduled: bool = Field(default=False)
    start_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    end_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    target_pages: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    target_roles: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    exclude_pages: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    is_active: bool = Field(default=True)
    priority: int = Field(default=0)
    max_display_count: Optional[int] = Field(default=None)
    impression_count: int = Field(default=0)
    click_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)
