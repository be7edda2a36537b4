"""
Site design service.

Tracked create/update/delete for the design entities, the public lookups
the front end uses to decide which banners, popups and floating buttons to
show, and the visitor engagement counters of popups and floating buttons.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.site_design import (
    AnnouncementBanner,
    FloatingButton,
    Popup,
    SeoSetting,
    SiteSection,
)
from unipivot.core.database.entities.users import User
from unipivot.core.exceptions import BusinessRuleError, ConflictError, NotFoundError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import ButtonInteraction, ChangeAction, PopupInteraction
from unipivot.core.models.io.site_design import PopupStats
from unipivot.core.rules.numbers import round_half_up
from unipivot.server.deps import RequestMeta

from .change_tracker import snapshot, track_change
from .restore import create_auto_backup

logger = get_logger(__name__)

DesignEntity = TypeVar("DesignEntity", bound=SQLModel)

DEFAULT_SEO_KEY = "default"

POPUP_COUNTERS = {
    PopupInteraction.show: "impression_count",
    PopupInteraction.click: "click_count",
    PopupInteraction.close: "dismiss_count",
    PopupInteraction.conversion: "conversion_count",
}

BUTTON_COUNTERS = {
    ButtonInteraction.impression: "impression_count",
    ButtonInteraction.click: "click_count",
}

BUTTON_POSITIONS = ("BOTTOM_RIGHT", "BOTTOM_LEFT", "TOP_RIGHT", "TOP_LEFT", "CUSTOM")


async def get_or_404(session: AsyncSession, model: Type[DesignEntity], entity_id: int, label: str) -> DesignEntity:
    entity = await session.get(model, entity_id)
    if entity is None:
        raise NotFoundError(f"{label} {entity_id} not found")
    return entity


async def _flush_unique(session: AsyncSession, entity_type: str) -> None:
    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        raise ConflictError(f"{entity_type} with the same key already exists") from e


async def _finish(
    session: AsyncSession,
    entity_type: str,
    entity_id: Any,
    action: ChangeAction,
    user: User,
    meta: Optional[RequestMeta],
    previous: Optional[Dict[str, Any]],
    current: Optional[Dict[str, Any]],
) -> None:
    await track_change(
        session,
        entity_type,
        entity_id,
        action,
        previous=previous,
        current=current,
        user_id=user.id,
        ip_address=meta.ip_address if meta else None,
        user_agent=meta.user_agent if meta else None,
    )
    try:
        async with session.begin_nested():
            await create_auto_backup(
                session, entity_type, reason=f"{action.value} {entity_type} #{entity_id}", user_id=user.id
            )
    except SQLAlchemyError as e:
        logger.error(f"Automatic backup after {action.value} of {entity_type} #{entity_id} failed: {e}", exc_info=True)
    await session.commit()


async def create_tracked(
    session: AsyncSession, entity_type: str, entity: DesignEntity, user: User, meta: Optional[RequestMeta] = None
) -> DesignEntity:
    session.add(entity)
    await _flush_unique(session, entity_type)
    await session.refresh(entity)
    await _finish(session, entity_type, entity.id, ChangeAction.create, user, meta, None, snapshot(entity))
    await session.refresh(entity)
    logger.info(f"Created {entity_type} #{entity.id}")
    return entity


async def update_tracked(
    session: AsyncSession,
    entity_type: str,
    entity: DesignEntity,
    changes: Dict[str, Any],
    user: User,
    meta: Optional[RequestMeta] = None,
) -> DesignEntity:
    previous = snapshot(entity)
    for key, value in changes.items():
        setattr(entity, key, value)
    entity.updated_at = utc_now()
    session.add(entity)
    await _flush_unique(session, entity_type)
    await session.refresh(entity)
    await _finish(session, entity_type, entity.id, ChangeAction.update, user, meta, previous, snapshot(entity))
    await session.refresh(entity)
    return entity


async def delete_tracked(
    session: AsyncSession, entity_type: str, entity: SQLModel, user: User, meta: Optional[RequestMeta] = None
) -> None:
    previous = snapshot(entity)
    entity_id = entity.id
    await session.delete(entity)
    await session.flush()
    await _finish(session, entity_type, entity_id, ChangeAction.delete, user, meta, previous, None)
    logger.info(f"Deleted {entity_type} #{entity_id}")


def matches_page(path: str, target_pages: Sequence[str], exclude_pages: Sequence[str]) -> bool:
    """
    Whether a display rule applies to ``path``.

    Rules are path prefixes; an empty target list matches every page and an
    exclusion always wins.
    """

    def hit(rule: str) -> bool:
        rule = rule.rstrip("/") or "/"
        if rule == "/":
            return path == "/"
        return path == rule or path.startswith(rule + "/")

    if any(hit(rule) for rule in exclude_pages or []):
        return False
    return not target_pages or any(hit(rule) for rule in target_pages)


def _in_window(start: Optional[datetime], end: Optional[datetime], now: datetime) -> bool:
    return (start is None or start <= now) and (end is None or end >= now)


def _by_priority(items: Iterable[Any]) -> List[Any]:
    return sorted(items, key=lambda item: (-item.priority, -(item.id or 0)))


async def active_banners(
    session: AsyncSession, path: str = "/", now: Optional[datetime] = None
) -> List[AnnouncementBanner]:
    now = now or utc_now()
    rows = (
        await session.execute(select(AnnouncementBanner).where(AnnouncementBanner.is_active == True))  # noqa: E712
    ).scalars().all()
    return _by_priority(
        banner
        for banner in rows
        if _in_window(banner.start_date, banner.end_date, now)
        and matches_page(path, banner.target_pages, banner.exclude_pages)
    )


async def active_popups(session: AsyncSession, path: str = "/", now: Optional[datetime] = None) -> List[Popup]:
    now = now or utc_now()
    rows = (await session.execute(select(Popup).where(Popup.is_active == True))).scalars().all()  # noqa: E712
    return _by_priority(
        popup
        for popup in rows
        if _in_window(popup.start_date, popup.end_date, now)
        and matches_page(path, popup.target_pages, popup.exclude_pages)
    )


async def active_floating_buttons(
    session: AsyncSession,
    path: str = "/",
    role: Optional[str] = None,
    device: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[FloatingButton]:
    """
    Floating buttons to show on a page right now, highest priority first.

    A scheduled button is shown only inside its date window, and a button
    with ``max_display_count`` disappears once it has been shown that many
    times. ``role`` is the visitor grade (``None`` for anonymous visitors);
    without a ``device`` the ``show_on`` rule is not applied.
    """
    now = now or utc_now()
    rows = (
        await session.execute(select(FloatingButton).where(FloatingButton.is_active == True))  # noqa: E712
    ).scalars().all()
    device = device.upper() if device else None
    return _by_priority(
        button
        for button in rows
        if (not button.is_scheduled or _in_window(button.start_date, button.end_date, now))
        and (button.max_display_count is None or button.impression_count < button.max_display_count)
        and (not button.target_roles or role in button.target_roles)
        and (device is None or button.show_on in ("ALL", device))
        and matches_page(path, button.target_pages, button.exclude_pages)
    )


def check_button_values(values: Dict[str, Any]) -> None:
    """
    Validate the layout and schedule of a floating button.

    Raises:
        BusinessRuleError: Unknown position, a schedule without a start date
            or a start date after the end date
    """
    if values.get("position") not in BUTTON_POSITIONS:
        raise BusinessRuleError(f"Unknown floating button position {values.get('position')!r}")
    start, end = values.get("start_date"), values.get("end_date")
    if values.get("is_scheduled") and start is None:
        raise BusinessRuleError("A scheduled floating button needs a start date")
    if start is not None and end is not None and start > end:
        raise BusinessRuleError("The start date must be before the end date")


async def _increment(session: AsyncSession, model: Type[DesignEntity], entity_id: int, column: str, label: str) -> None:
    # updated_at is pinned so the onupdate hook does not mark a design change
    result = await session.execute(
        update(model)
        .where(model.id == entity_id)  # type: ignore[attr-defined]
        .values({column: getattr(model, column) + 1, "updated_at": model.updated_at})  # type: ignore[attr-defined]
    )
    if result.rowcount == 0:
        await session.rollback()
        raise NotFoundError(f"{label} {entity_id} not found")
    await session.commit()


async def record_popup_interaction(session: AsyncSession, popup_id: int, interaction: PopupInteraction) -> Popup:
    """Count a visitor interaction with a popup; the change history is not touched."""
    await _increment(session, Popup, popup_id, POPUP_COUNTERS[interaction], "Popup")
    logger.debug(f"Popup #{popup_id} {interaction.value}")
    return await session.get(Popup, popup_id, populate_existing=True)


async def record_button_interaction(
    session: AsyncSession, button_id: int, interaction: ButtonInteraction
) -> FloatingButton:
    await _increment(session, FloatingButton, button_id, BUTTON_COUNTERS[interaction], "Floating button")
    logger.debug(f"Floating button #{button_id} {interaction.value}")
    return await session.get(FloatingButton, button_id, populate_existing=True)


def popup_stats(popup: Popup) -> PopupStats:
    def rate(count: int) -> int:
        return round_half_up(count * 100 / popup.impression_count) if popup.impression_count else 0

    return PopupStats(
        popup_id=popup.id,
        impression_count=popup.impression_count,
        click_count=popup.click_count,
        dismiss_count=popup.dismiss_count,
        conversion_count=popup.conversion_count,
        click_rate=rate(popup.click_count),
        conversion_rate=rate(popup.conversion_count),
    )


async def seo_for_page(session: AsyncSession, page_key: str) -> SeoSetting:
    """Active SEO metadata of a page, falling back to the ``default`` entry."""
    for key in (page_key, DEFAULT_SEO_KEY):
        result = await session.execute(
            select(SeoSetting).where(SeoSetting.page_key == key, SeoSetting.is_active == True)  # noqa: E712
        )
        setting = result.scalars().first()
        if setting is not None:
            return setting
    raise NotFoundError(f"No SEO settings for page '{page_key}'")


async def visible_sections(session: AsyncSession) -> List[SiteSection]:
    result = await session.execute(
        select(SiteSection)
        .where(SiteSection.is_visible == True)  # noqa: E712
        .order_by(SiteSection.sort_order.asc(), SiteSection.id.asc())
    )
    return list(result.scalars().all())


async def list_all(session: AsyncSession, model: Type[DesignEntity], *order_by: Any) -> List[DesignEntity]:
    stmt = select(model).order_by(*(order_by or (model.id.desc(),)))  # type: ignore[attr-defined]
    return list((await session.execute(stmt)).scalars().all())
