from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import text

from unipivot.core.database.base import utc_now

pytestmark = pytest.mark.asyncio


async def _create(client: AsyncClient, headers, **fields):
    payload = {"title": "Banner", **fields}
    response = await client.post("/api/v1/banners", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_active_banners_follow_page_rules(client: AsyncClient, admin):
    _, headers = admin
    await _create(client, headers, title="Everywhere")
    await _create(client, headers, title="Programs", target_pages=["/programs"])
    await _create(client, headers, title="Not on apply", exclude_pages=["/programs/apply"])

    response = await client.get("/api/v1/banners/active", params={"path": "/programs/bookclub"})
    assert response.status_code == 200
    assert sorted(b["title"] for b in response.json()) == ["Everywhere", "Not on apply", "Programs"]

    response = await client.get("/api/v1/banners/active", params={"path": "/programs/apply"})
    assert sorted(b["title"] for b in response.json()) == ["Everywhere", "Programs"]

    response = await client.get("/api/v1/banners/active", params={"path": "/programsx"})
    assert sorted(b["title"] for b in response.json()) == ["Everywhere", "Not on apply"]


async def test_active_banners_by_priority_and_window(client: AsyncClient, admin):
    _, headers = admin
    now = utc_now()
    await _create(client, headers, title="Low", priority=1)
    await _create(client, headers, title="High", priority=10)
    await _create(client, headers, title="Later", start_date=(now + timedelta(days=1)).isoformat())
    await _create(client, headers, title="Over", end_date=(now - timedelta(days=1)).isoformat())
    await _create(client, headers, title="Off", is_active=False, priority=99)

    response = await client.get("/api/v1/banners/active")
    assert [b["title"] for b in response.json()] == ["High", "Low"]


async def test_banner_admin_endpoints(client: AsyncClient, admin, staff):
    _, headers = admin
    _, staff_headers = staff

    response = await client.post("/api/v1/banners", json={"title": "x"}, headers=staff_headers)
    assert response.status_code == 403
    response = await client.get("/api/v1/banners", headers=staff_headers)
    assert response.status_code == 403

    banner = await _create(client, headers, type="WARNING")
    response = await client.patch(f"/api/v1/banners/{banner['id']}", json={"priority": 5}, headers=headers)
    assert response.status_code == 200
    assert response.json()["priority"] == 5
    assert response.json()["type"] == "WARNING"

    response = await client.get("/api/v1/banners", headers=headers)
    assert [b["id"] for b in response.json()] == [banner["id"]]

    response = await client.delete(f"/api/v1/banners/{banner['id']}", headers=headers)
    assert response.status_code == 204
    response = await client.get(f"/api/v1/banners/{banner['id']}", headers=headers)
    assert response.status_code == 404
    assert response.json()["error_type"] == "NotFoundError"


async def test_banner_changes_are_recorded(client: AsyncClient, admin):
    _, headers = admin
    banner = await _create(client, headers)
    await client.patch(f"/api/v1/banners/{banner['id']}", json={"title": "Renamed"}, headers=headers)

    response = await client.get(f"/api/v1/history/entity/AnnouncementBanner/{banner['id']}", headers=headers)
    assert response.status_code == 200
    assert [e["action"] for e in response.json()] == ["UPDATE", "CREATE"]


@pytest.mark.parametrize("table", ["change_histories", "restore_points"])
async def test_banner_saved_when_history_cannot_be_written(client: AsyncClient, session, admin, table):
    _, headers = admin
    await session.execute(text(f"DROP TABLE {table}"))
    await session.commit()

    banner = await _create(client, headers, title="Still saved")

    response = await client.get(f"/api/v1/banners/{banner['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["title"] == "Still saved"
