from datetime import timedelta

import pytest
from httpx import AsyncClient

from unipivot.core.database.entities.site_design import AnnouncementBanner

pytestmark = pytest.mark.asyncio


async def _banner(client: AsyncClient, headers, title="Banner"):
    response = await client.post("/api/v1/banners", json={"title": title}, headers=headers)
    assert response.status_code == 201
    return response.json()


async def _latest(client: AsyncClient, headers, action):
    params = {"entity_type": "AnnouncementBanner", "action": action}
    response = await client.get("/api/v1/history", params=params, headers=headers)
    assert response.status_code == 200
    return response.json()["items"][0]


async def test_search_history(client: AsyncClient, admin, staff):
    user, headers = admin
    user_id = user.id
    _, staff_headers = staff
    banner = await _banner(client, headers)
    await client.patch(f"/api/v1/banners/{banner['id']}", json={"title": "Renamed"}, headers=headers)
    await client.post("/api/v1/seo", json={"page_key": "default"}, headers=headers)

    response = await client.get("/api/v1/history", headers=staff_headers)
    assert response.status_code == 403

    response = await client.get("/api/v1/history", headers=headers)
    body = response.json()
    assert body["total"] == 3
    assert [e["entity_type"] for e in body["items"]] == ["SEOSettings", "AnnouncementBanner", "AnnouncementBanner"]
    assert body["items"][0]["user_id"] == user_id

    response = await client.get("/api/v1/history", params={"entity_type": "AnnouncementBanner"}, headers=headers)
    assert response.json()["total"] == 2
    response = await client.get("/api/v1/history", params={"search": "title"}, headers=headers)
    assert [e["action"] for e in response.json()["items"]] == ["UPDATE"]


async def test_change_detail(client: AsyncClient, admin):
    _, headers = admin
    banner = await _banner(client, headers)
    await client.patch(f"/api/v1/banners/{banner['id']}", json={"title": "Renamed"}, headers=headers)
    entry = await _latest(client, headers, "UPDATE")
    assert entry["field_name"] == "title"

    response = await client.get(f"/api/v1/history/{entry['id']}", headers=headers)
    detail = response.json()
    assert detail["changes"] == [{"field": "title", "previous_value": "Banner", "new_value": "Renamed"}]
    assert detail["rolled_back"] is False

    response = await client.get("/api/v1/history/999", headers=headers)
    assert response.status_code == 404


async def test_rollback_update(client: AsyncClient, admin):
    _, headers = admin
    banner = await _banner(client, headers)
    await client.patch(f"/api/v1/banners/{banner['id']}", json={"title": "Renamed"}, headers=headers)
    entry = await _latest(client, headers, "UPDATE")

    response = await client.post(f"/api/v1/history/{entry['id']}/rollback", json={"reason": "typo"}, headers=headers)
    assert response.status_code == 200
    rollback = response.json()
    assert rollback["rollback_type"] == "SINGLE"
    assert rollback["target_history_id"] == entry["id"]
    assert rollback["affected_entities"][0]["action"] == "UPDATE"

    response = await client.get(f"/api/v1/banners/{banner['id']}", headers=headers)
    assert response.json()["title"] == "Banner"

    response = await client.get(f"/api/v1/history/{entry['id']}", headers=headers)
    assert response.json()["rolled_back"] is True

    response = await client.post(f"/api/v1/history/{entry['id']}/rollback", json={}, headers=headers)
    assert response.status_code == 400


async def test_rollback_create_and_delete(client: AsyncClient, admin):
    _, headers = admin
    created = await _banner(client, headers, "Created")
    entry = await _latest(client, headers, "CREATE")
    response = await client.post(f"/api/v1/history/{entry['id']}/rollback", json={}, headers=headers)
    assert response.status_code == 200
    response = await client.get(f"/api/v1/banners/{created['id']}", headers=headers)
    assert response.status_code == 404

    removed = await _banner(client, headers, "Removed")
    await client.delete(f"/api/v1/banners/{removed['id']}", headers=headers)
    entry = await _latest(client, headers, "DELETE")
    response = await client.post(f"/api/v1/history/{entry['id']}/rollback", json={}, headers=headers)
    assert response.status_code == 200
    response = await client.get(f"/api/v1/banners/{removed['id']}", headers=headers)
    assert response.json()["title"] == "Removed"

    response = await client.get(f"/api/v1/history/entity/AnnouncementBanner/{removed['id']}", headers=headers)
    assert [e["action"] for e in response.json()] == ["CREATE", "DELETE", "CREATE"]


async def test_restore_point_round_trip(client: AsyncClient, admin):
    _, headers = admin
    original = await _banner(client, headers, "Original")

    payload = {"name": "Before campaign", "description": "Clean design"}
    response = await client.post("/api/v1/history/restore-points", json=payload, headers=headers)
    assert response.status_code == 201
    point = response.json()
    assert point["is_automatic"] is False

    await _banner(client, headers, "Campaign")
    await client.patch(f"/api/v1/banners/{original['id']}", json={"title": "Edited"}, headers=headers)

    response = await client.get(f"/api/v1/history/restore-points/{point['id']}", headers=headers)
    assert [b["title"] for b in response.json()["snapshot"]["banners"]] == ["Original"]

    url = f"/api/v1/history/restore-points/{point['id']}/restore"
    response = await client.post(url, json={"confirm_restore": False}, headers=headers)
    assert response.status_code == 400

    response = await client.post(url, json={"confirm_restore": True}, headers=headers)
    assert response.status_code == 200
    result = response.json()
    assert result["restored"]["banners"] == 1
    assert result["backup_id"] is not None

    response = await client.get("/api/v1/banners", headers=headers)
    assert [(b["id"], b["title"]) for b in response.json()] == [(original["id"], "Original")]

    response = await client.get(f"/api/v1/history/restore-points/{result['backup_id']}", headers=headers)
    assert sorted(b["title"] for b in response.json()["snapshot"]["banners"]) == ["Campaign", "Edited"]


async def test_list_and_delete_restore_points(client: AsyncClient, admin):
    _, headers = admin
    await _banner(client, headers)
    response = await client.post("/api/v1/history/restore-points", json={"name": "Manual"}, headers=headers)
    point = response.json()

    response = await client.get("/api/v1/history/restore-points", headers=headers)
    assert [p["is_automatic"] for p in response.json()] == [False, True]
    response = await client.get("/api/v1/history/restore-points", params={"include_automatic": False}, headers=headers)
    assert [p["name"] for p in response.json()] == ["Manual"]

    response = await client.delete(f"/api/v1/history/restore-points/{point['id']}", headers=headers)
    assert response.status_code == 204
    response = await client.get(f"/api/v1/history/restore-points/{point['id']}", headers=headers)
    assert response.status_code == 404


async def test_backup_config(client: AsyncClient, admin):
    _, headers = admin
    response = await client.get("/api/v1/history/backup-config", headers=headers)
    assert response.json() == {
        "entity_type": "ALL",
        "enable_auto_backup": True,
        "backup_interval": 24,
        "retention_days": 30,
        "max_versions": 50,
        "auto_cleanup": True,
    }

    response = await client.put(
        "/api/v1/history/backup-config", json={"enable_auto_backup": False}, headers=headers
    )
    assert response.json()["enable_auto_backup"] is False
    assert response.json()["backup_interval"] == 24

    await _banner(client, headers)
    response = await client.get("/api/v1/history/restore-points", headers=headers)
    assert response.json() == []


async def test_deleted_ids_are_not_reused(client: AsyncClient, admin):
    _, headers = admin
    first = await _banner(client, headers, "First")
    create_entry = await _latest(client, headers, "CREATE")
    await client.delete(f"/api/v1/banners/{first['id']}", headers=headers)
    second = await _banner(client, headers, "Second")
    assert second["id"] != first["id"]

    response = await client.post(f"/api/v1/history/{create_entry['id']}/rollback", json={}, headers=headers)
    assert response.status_code == 400
    response = await client.get(f"/api/v1/banners/{second['id']}", headers=headers)
    assert response.status_code == 200

    response = await client.get(f"/api/v1/history/entity/AnnouncementBanner/{first['id']}", headers=headers)
    assert [e["action"] for e in response.json()] == ["CREATE", "DELETE"]


async def test_rollback_refuses_a_different_row_under_the_same_id(client: AsyncClient, session, admin):
    _, headers = admin
    banner = await _banner(client, headers, "Recorded")
    entry = await _latest(client, headers, "CREATE")

    row = await session.get(AnnouncementBanner, banner["id"])
    row.created_at = row.created_at + timedelta(days=1)
    session.add(row)
    await session.commit()

    response = await client.post(f"/api/v1/history/{entry['id']}/rollback", json={}, headers=headers)
    assert response.status_code == 409
    response = await client.get(f"/api/v1/banners/{banner['id']}", headers=headers)
    assert response.status_code == 200
