import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_page_falls_back_to_default(client: AsyncClient, admin):
    _, headers = admin
    response = await client.get("/api/v1/seo/pages/about")
    assert response.status_code == 404

    for payload in ({"page_key": "default", "title": "UniPivot"}, {"page_key": "programs", "title": "Programs"}):
        response = await client.post("/api/v1/seo", json=payload, headers=headers)
        assert response.status_code == 201

    response = await client.get("/api/v1/seo/pages/programs")
    assert response.json()["title"] == "Programs"
    response = await client.get("/api/v1/seo/pages/about")
    assert response.json()["title"] == "UniPivot"
    assert response.json()["robots"] == "index,follow"


async def test_duplicate_page_key_conflicts(client: AsyncClient, admin):
    _, headers = admin
    response = await client.post("/api/v1/seo", json={"page_key": "home"}, headers=headers)
    assert response.status_code == 201

    response = await client.post("/api/v1/seo", json={"page_key": "home"}, headers=headers)
    assert response.status_code == 409
    assert response.json()["error_type"] == "ConflictError"

    response = await client.get("/api/v1/seo", headers=headers)
    assert [s["page_key"] for s in response.json()] == ["home"]


async def test_inactive_setting_is_skipped(client: AsyncClient, admin):
    _, headers = admin
    await client.post("/api/v1/seo", json={"page_key": "default", "title": "Site"}, headers=headers)
    response = await client.post("/api/v1/seo", json={"page_key": "blog", "title": "Blog"}, headers=headers)
    setting = response.json()

    response = await client.patch(f"/api/v1/seo/{setting['id']}", json={"is_active": False}, headers=headers)
    assert response.status_code == 200

    response = await client.get("/api/v1/seo/pages/blog")
    assert response.json()["title"] == "Site"
