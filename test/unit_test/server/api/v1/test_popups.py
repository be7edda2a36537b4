import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_popup_with_template(client: AsyncClient, admin):
    _, headers = admin
    response = await client.post(
        "/api/v1/popups/templates", json={"name": "Centered", "layout": {"width": 480}}, headers=headers
    )
    assert response.status_code == 201
    template = response.json()

    payload = {"title": "Welcome", "template_id": template["id"], "trigger": "ON_DELAY", "trigger_value": 3}
    response = await client.post("/api/v1/popups", json=payload, headers=headers)
    assert response.status_code == 201
    assert response.json()["template_id"] == template["id"]
    assert response.json()["trigger_value"] == 3

    response = await client.get("/api/v1/popups/templates", headers=headers)
    assert [t["layout"] for t in response.json()] == [{"width": 480}]


async def test_popup_with_unknown_template(client: AsyncClient, admin):
    _, headers = admin
    response = await client.post("/api/v1/popups", json={"title": "x", "template_id": 999}, headers=headers)
    assert response.status_code == 404


async def test_active_popups(client: AsyncClient, admin):
    _, headers = admin
    for payload in (
        {"title": "Home only", "target_pages": ["/"]},
        {"title": "Blog", "target_pages": ["/blog"], "priority": 3},
        {"title": "Disabled", "is_active": False},
    ):
        response = await client.post("/api/v1/popups", json=payload, headers=headers)
        assert response.status_code == 201

    response = await client.get("/api/v1/popups/active", params={"path": "/"})
    assert [p["title"] for p in response.json()] == ["Home only"]
    response = await client.get("/api/v1/popups/active", params={"path": "/blog/42"})
    assert [p["title"] for p in response.json()] == ["Blog"]


async def test_update_and_delete_popup(client: AsyncClient, admin, member):
    _, headers = admin
    _, member_headers = member
    response = await client.post("/api/v1/popups", json={"title": "Sale"}, headers=headers)
    popup = response.json()

    response = await client.patch(f"/api/v1/popups/{popup['id']}", json={"show_once": True}, headers=member_headers)
    assert response.status_code == 403

    response = await client.patch(f"/api/v1/popups/{popup['id']}", json={"show_once": True}, headers=headers)
    assert response.json()["show_once"] is True

    response = await client.delete(f"/api/v1/popups/{popup['id']}", headers=headers)
    assert response.status_code == 204
    response = await client.get(f"/api/v1/popups/{popup['id']}", headers=headers)
    assert response.status_code == 404


async def test_track_popup_interactions(client: AsyncClient, admin, member):
    _, headers = admin
    _, member_headers = member
    response = await client.post("/api/v1/popups", json={"title": "Newsletter"}, headers=headers)
    popup = response.json()
    assert popup["impression_count"] == 0

    for interaction in ("show", "show", "show", "click", "close", "conversion"):
        response = await client.post(
            "/api/v1/popups/track", json={"popup_id": popup["id"], "interaction_type": interaction}
        )
        assert response.status_code == 200, response.text

    stats = response.json()
    assert (stats["impression_count"], stats["click_count"], stats["dismiss_count"], stats["conversion_count"]) == (
        3,
        1,
        1,
        1,
    )
    assert stats["click_rate"] == 33
    assert stats["conversion_rate"] == 33

    response = await client.get(f"/api/v1/popups/{popup['id']}/stats", headers=member_headers)
    assert response.status_code == 403
    response = await client.get(f"/api/v1/popups/{popup['id']}/stats", headers=headers)
    assert response.json()["impression_count"] == 3


async def test_track_rejects_unknown_popup_and_interaction(client: AsyncClient):
    response = await client.post("/api/v1/popups/track", json={"popup_id": 999, "interaction_type": "show"})
    assert response.status_code == 404
    response = await client.post("/api/v1/popups/track", json={"popup_id": 1, "interaction_type": "hover"})
    assert response.status_code == 422


async def test_tracking_is_not_a_design_change(client: AsyncClient, admin):
    _, headers = admin
    response = await client.post("/api/v1/popups", json={"title": "Quiet"}, headers=headers)
    popup = response.json()
    await client.post("/api/v1/popups/track", json={"popup_id": popup["id"], "interaction_type": "show"})

    response = await client.get(f"/api/v1/history/entity/Popup/{popup['id']}", headers=headers)
    assert [e["action"] for e in response.json()] == ["CREATE"]
    response = await client.get(f"/api/v1/popups/{popup['id']}", headers=headers)
    assert response.json()["updated_at"] == popup["updated_at"]
