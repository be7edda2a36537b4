"""Service tests for automatic backups and their cleanup."""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.history import BackupConfig, RestorePoint
from unipivot.core.database.entities.site_design import SiteSetting
from unipivot.server.services.restore import build_snapshot, cleanup_old_backups, create_auto_backup

pytestmark = pytest.mark.asyncio


async def _point(session: AsyncSession, name: str, age: timedelta, automatic: bool = True) -> RestorePoint:
    point = RestorePoint(name=name, snapshot={}, is_automatic=automatic, created_at=utc_now() - age)
    session.add(point)
    await session.flush()
    return point


async def _names(session: AsyncSession):
    result = await session.execute(select(RestorePoint.name).order_by(RestorePoint.id))
    return list(result.scalars().all())


async def test_snapshot_contains_every_design_table(session: AsyncSession):
    session.add(SiteSetting(key="theme", value="dark"))
    await session.flush()

    data = await build_snapshot(session)
    assert set(data) == {
        "timestamp",
        "sections",
        "settings",
        "banners",
        "seo_settings",
        "popup_templates",
        "popups",
        "floating_buttons",
    }
    assert [s["key"] for s in data["settings"]] == ["theme"]
    assert data["banners"] == []


async def test_cleanup_by_retention(session: AsyncSession):
    await _point(session, "fresh", timedelta(days=1))
    await _point(session, "stale", timedelta(days=40))
    await _point(session, "manual", timedelta(days=400), automatic=False)

    assert await cleanup_old_backups(session, retention_days=30, max_versions=50) == 1
    assert await _names(session) == ["fresh", "manual"]


async def test_cleanup_by_max_versions(session: AsyncSession):
    for days in (3, 2, 1):
        await _point(session, f"{days} days", timedelta(days=days))

    assert await cleanup_old_backups(session, retention_days=30, max_versions=2) == 1
    assert await _names(session) == ["2 days", "1 days"]


async def test_auto_backup_respects_interval(session: AsyncSession):
    first = await create_auto_backup(session, "SiteSettings")
    assert first is not None and first.is_automatic
    assert await create_auto_backup(session, "SiteSettings") is None


async def test_auto_backup_after_interval(session: AsyncSession):
    await _point(session, "old", timedelta(hours=25))
    assert await create_auto_backup(session, "Popup", reason="UPDATE Popup #1") is not None


async def test_entity_policy_overrides_default(session: AsyncSession):
    session.add(BackupConfig(entity_type="SiteSettings", enable_auto_backup=False))
    session.add(BackupConfig(entity_type="ALL", backup_interval=0))
    await session.flush()

    assert await create_auto_backup(session, "SiteSettings") is None
    assert await create_auto_backup(session, "Popup") is not None
    assert await create_auto_backup(session, "Popup") is not None
