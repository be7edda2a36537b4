from datetime import timedelta

import pytest
from httpx import AsyncClient

from unipivot.core.database.base import utc_now

pytestmark = pytest.mark.asyncio

LINK = "https://unipivot.kr/donate"


async def _create(client: AsyncClient, headers, **fields):
    payload = {"title": "Donate", "link_url": LINK, **fields}
    response = await client.post("/api/v1/floating-buttons", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _active(client: AsyncClient, headers=None, **params):
    response = await client.get("/api/v1/floating-buttons/active", params=params, headers=headers or {})
    assert response.status_code == 200
    return [b["title"] for b in response.json()]


async def test_button_admin_endpoints(client: AsyncClient, admin, staff):
    _, headers = admin
    _, staff_headers = staff

    response = await client.post(
        "/api/v1/floating-buttons", json={"title": "x", "link_url": LINK}, headers=staff_headers
    )
    assert response.status_code == 403

    button = await _create(client, headers, position="TOP_LEFT", animation="PULSE")
    assert button["color"] == "#2563eb"
    assert button["size"] == "MEDIUM"

    response = await client.patch(
        f"/api/v1/floating-buttons/{button['id']}", json={"priority": 4}, headers=headers
    )
    assert response.status_code == 200
    assert (response.json()["priority"], response.json()["position"]) == (4, "TOP_LEFT")

    response = await client.get("/api/v1/floating-buttons", headers=headers)
    assert [b["id"] for b in response.json()] == [button["id"]]

    response = await client.delete(f"/api/v1/floating-buttons/{button['id']}", headers=headers)
    assert response.status_code == 204
    response = await client.get(f"/api/v1/floating-buttons/{button['id']}", headers=headers)
    assert response.status_code == 404


@pytest.mark.parametrize(
    "fields",
    [
        {"position": "MIDDLE"},
        {"is_scheduled": True},
        {"start_date": "2026-05-02T00:00:00", "end_date": "2026-05-01T00:00:00"},
    ],
)
async def test_invalid_layout_or_schedule(client: AsyncClient, admin, fields):
    _, headers = admin
    payload = {"title": "Donate", "link_url": LINK, **fields}
    response = await client.post("/api/v1/floating-buttons", json=payload, headers=headers)
    assert response.status_code == 400


async def test_update_checks_schedule_against_stored_values(client: AsyncClient, admin):
    _, headers = admin
    button = await _create(client, headers)
    url = f"/api/v1/floating-buttons/{button['id']}"

    response = await client.patch(url, json={"is_scheduled": True}, headers=headers)
    assert response.status_code == 400
    start = (utc_now() - timedelta(days=1)).isoformat()
    response = await client.patch(url, json={"is_scheduled": True, "start_date": start}, headers=headers)
    assert response.status_code == 200


async def test_active_buttons(client: AsyncClient, admin, member):
    _, headers = admin
    _, member_headers = member
    now = utc_now()
    await _create(client, headers, title="Everyone", priority=1)
    await _create(client, headers, title="Admins", target_roles=["ADMIN"], priority=5)
    await _create(client, headers, title="Mobile", show_on="MOBILE")
    await _create(client, headers, title="Blog", target_pages=["/blog"])
    await _create(client, headers, title="Off", is_active=False)
    await _create(client, headers, title="Soon", is_scheduled=True, start_date=(now + timedelta(days=2)).isoformat())
    await _create(client, headers, title="Unscheduled window", start_date=(now + timedelta(days=2)).isoformat())

    assert await _active(client) == ["Everyone", "Unscheduled window", "Mobile"]
    assert await _active(client, member_headers, device="desktop") == ["Everyone", "Unscheduled window"]
    assert await _active(client, headers, device="MOBILE") == ["Admins", "Everyone", "Unscheduled window", "Mobile"]
    assert "Blog" in await _active(client, path="/blog/3")


async def test_button_hidden_after_max_display_count(client: AsyncClient, admin):
    _, headers = admin
    button = await _create(client, headers, max_display_count=2)
    url = f"/api/v1/floating-buttons/{button['id']}/track"

    response = await client.post(url, json={"action": "impression"})
    assert response.json()["impression_count"] == 1
    assert await _active(client) == ["Donate"]

    await client.post(url, json={"action": "impression"})
    response = await client.post(url, json={"action": "click"})
    assert (response.json()["impression_count"], response.json()["click_count"]) == (2, 1)
    assert await _active(client) == []

    response = await client.post("/api/v1/floating-buttons/999/track", json={"action": "click"})
    assert response.status_code == 404


async def test_button_history_and_rollback(client: AsyncClient, admin):
    _, headers = admin
    button = await _create(client, headers)
    await client.patch(f"/api/v1/floating-buttons/{button['id']}", json={"title": "Give"}, headers=headers)
    await client.post(f"/api/v1/floating-buttons/{button['id']}/track", json={"action": "click"})

    response = await client.get(f"/api/v1/history/entity/FloatingButton/{button['id']}", headers=headers)
    entries = response.json()
    assert [e["action"] for e in entries] == ["UPDATE", "CREATE"]

    response = await client.post(f"/api/v1/history/{entries[0]['id']}/rollback", json={}, headers=headers)
    assert response.status_code == 200

    response = await client.get(f"/api/v1/floating-buttons/{button['id']}", headers=headers)
    assert response.json()["title"] == "Donate"
    assert response.json()["click_count"] == 1

    await client.delete(f"/api/v1/floating-buttons/{button['id']}", headers=headers)
    response = await client.get(f"/api/v1/history/entity/FloatingButton/{button['id']}", headers=headers)
    delete_entry = response.json()[0]
    assert delete_entry["action"] == "DELETE"

    response = await client.post(f"/api/v1/history/{delete_entry['id']}/rollback", json={}, headers=headers)
    assert response.status_code == 200
    response = await client.get(f"/api/v1/floating-buttons/{button['id']}", headers=headers)
    assert response.json()["title"] == "Donate"


async def test_restore_point_includes_buttons(client: AsyncClient, admin):
    _, headers = admin
    kept = await _create(client, headers, title="Kept")
    response = await client.post("/api/v1/history/restore-points", json={"name": "Before"}, headers=headers)
    point = response.json()
    response = await client.get(f"/api/v1/history/restore-points/{point['id']}", headers=headers)
    assert [b["title"] for b in response.json()["snapshot"]["floating_buttons"]] == ["Kept"]

    await _create(client, headers, title="Added later")
    url = f"/api/v1/history/restore-points/{point['id']}/restore"
    response = await client.post(url, json={"confirm_restore": True}, headers=headers)
    assert response.status_code == 200
    assert response.json()["restored"]["floating_buttons"] == 1

    response = await client.get("/api/v1/floating-buttons", headers=headers)
    assert [(b["id"], b["title"]) for b in response.json()] == [(kept["id"], "Kept")]
