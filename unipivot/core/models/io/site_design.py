"""
Site design I/O models: banners, popups, floating buttons, SEO, sections and settings.

Read schemas extend the create schemas with identifiers and timestamps.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from unipivot.core.models.domain.enums import ButtonInteraction, PopupInteraction

from .common import UTCDateTime


class BannerCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: Optional[str] = None
    type: str = Field(default="INFO", description="INFO, WARNING, SUCCESS, ERROR or PROMOTION")
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    link_url: Optional[str] = None
    link_text: Optional[str] = None
    position: str = "TOP"
    priority: int = 0
    is_active: bool = True
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    target_pages: List[str] = Field(default_factory=list, description="Path prefixes, empty for every page")
    exclude_pages: List[str] = Field(default_factory=list)


class BannerUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = None
    type: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    link_url: Optional[str] = None
    link_text: Optional[str] = None
    position: Optional[str] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    target_pages: Optional[List[str]] = None
    exclude_pages: Optional[List[str]] = None


class BannerRead(BannerCreate):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PopupTemplateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    layout: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True


class PopupTemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    layout: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None


class PopupTemplateRead(PopupTemplateCreate):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PopupCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: Optional[str] = None
    template_id: Optional[int] = None
    trigger: str = Field(default="ON_LOAD", description="ON_LOAD, ON_DELAY, ON_SCROLL or ON_EXIT")
    trigger_value: Optional[int] = None
    target_pages: List[str] = Field(default_factory=list)
    exclude_pages: List[str] = Field(default_factory=list)
    show_once: bool = False
    priority: int = 0
    is_active: bool = True
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None


class PopupUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = None
    template_id: Optional[int] = None
    trigger: Optional[str] = None
    trigger_value: Optional[int] = None
    target_pages: Optional[List[str]] = None
    exclude_pages: Optional[List[str]] = None
    show_once: Optional[bool] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None


class PopupRead(PopupCreate):
    id: int
    impression_count: int = 0
    click_count: int = 0
    dismiss_count: int = 0
    conversion_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PopupTrack(BaseModel):
    popup_id: int
    interaction_type: PopupInteraction


class PopupStats(BaseModel):
    popup_id: int
    impression_count: int
    click_count: int
    dismiss_count: int
    conversion_count: int
    click_rate: int = Field(description="Clicks per impression, percent")
    conversion_rate: int = Field(description="Conversions per impression, percent")


class FloatingButtonCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    icon: Optional[str] = None
    color: str = "#2563eb"
    hover_color: Optional[str] = None
    text_color: str = "#ffffff"
    link_url: str = Field(min_length=1, max_length=500)
    open_in_new_tab: bool = False
    position: str = Field(
        default="BOTTOM_RIGHT", description="BOTTOM_RIGHT, BOTTOM_LEFT, TOP_RIGHT, TOP_LEFT or CUSTOM"
    )
    offset_x: int = 20
    offset_y: int = 20
    size: str = Field(default="MEDIUM", description="SMALL, MEDIUM or LARGE")
    show_label: bool = True
    animation: str = Field(default="NONE", description="NONE, PULSE, BOUNCE or SHAKE")
    animation_delay: int = 0
    show_on: str = Field(default="ALL", description="ALL, DESKTOP, MOBILE or TABLET")
    scroll_threshold: Optional[int] = Field(default=None, ge=0)
    is_scheduled: bool = False
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    target_pages: List[str] = Field(default_factory=list)
    target_roles: List[str] = Field(default_factory=list, description="Grades the button is shown to, empty for all")
    exclude_pages: List[str] = Field(default_factory=list)
    is_active: bool = True
    priority: int = 0
    max_display_count: Optional[int] = Field(default=None, ge=1)


class FloatingButtonUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    icon: Optional[str] = None
    color: Optional[str] = None
    hover_color: Optional[str] = None
    text_color: Optional[str] = None
    link_url: Optional[str] = Field(default=None, min_length=1, max_length=500)
    open_in_new_tab: Optional[bool] = None
    position: Optional[str] = None
    offset_x: Optional[int] = None
    offset_y: Optional[int] = None
    size: Optional[str] = None
    show_label: Optional[bool] = None
    animation: Optional[str] = None
    animation_delay: Optional[int] = None
    show_on: Optional[str] = None
    scroll_threshold: Optional[int] = Field(default=None, ge=0)
    is_scheduled: Optional[bool] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    target_pages: Optional[List[str]] = None
    target_roles: Optional[List[str]] = None
    exclude_pages: Optional[List[str]] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None
    max_display_count: Optional[int] = Field(default=None, ge=1)


class FloatingButtonRead(FloatingButtonCreate):
    id: int
    impression_count: int = 0
    click_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ButtonTrack(BaseModel):
    action: ButtonInteraction


class SeoSettingCreate(BaseModel):
    page_key: str = Field(min_length=1, max_length=100, description="Page identifier, 'default' is the fallback")
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[str] = None
    canonical_url: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    twitter_card: Optional[str] = "summary_large_image"
    robots: str = "index,follow"
    priority: int = 0
    is_active: bool = True


class SeoSettingUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[str] = None
    canonical_url: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    twitter_card: Optional[str] = None
    robots: Optional[str] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None


class SeoSettingRead(SeoSettingCreate):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SiteSectionCreate(BaseModel):
    section_key: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=100)
    content: Dict[str, Any] = Field(default_factory=dict)
    is_visible: bool = True
    sort_order: int = 0


class SiteSectionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    content: Optional[Dict[str, Any]] = None
    is_visible: Optional[bool] = None
    sort_order: Optional[int] = None


class SiteSectionRead(SiteSectionCreate):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SiteSettingCreate(BaseModel):
    key: str = Field(min_length=1, max_length=100)
    value: Any = None
    category: str = "general"
    description: Optional[str] = None


class SiteSettingUpdate(BaseModel):
    value: Any = None
    category: Optional[str] = None
    description: Optional[str] = None


class SiteSettingRead(SiteSettingCreate):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
