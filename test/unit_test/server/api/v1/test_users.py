import pytest
from httpx import AsyncClient

from unipivot.core.models.domain.enums import UserRole

pytestmark = pytest.mark.asyncio


async def test_list_users_requires_admin(client: AsyncClient, staff):
    _, headers = staff
    response = await client.get("/api/v1/users", headers=headers)
    assert response.status_code == 403


async def test_list_users_search_and_filter(client: AsyncClient, admin, make_user):
    _, headers = admin
    await make_user(name="Kim Minji")
    await make_user(UserRole.staff, name="Lee Staff")

    response = await client.get("/api/v1/users", params={"search": "minji"}, headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["name"] == "Kim Minji"

    response = await client.get("/api/v1/users", params={"role": "STAFF"}, headers=headers)
    assert [u["name"] for u in response.json()["items"]] == ["Lee Staff"]


async def test_get_user_not_found(client: AsyncClient, admin):
    _, headers = admin
    response = await client.get("/api/v1/users/9999", headers=headers)
    assert response.status_code == 404


async def test_admin_promotes_user_to_staff(client: AsyncClient, admin, member):
    _, headers = admin
    user, _ = member
    response = await client.patch(f"/api/v1/users/{user.id}/role", json={"role": "STAFF"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["role"] == "STAFF"

    response = await client.get("/api/v1/admin/activity", params={"action": "ROLE_CHANGED"}, headers=headers)
    entry = response.json()["items"][0]
    assert entry["details"] == {"from": "USER", "to": "STAFF"}


async def test_admin_cannot_grant_super_admin(client: AsyncClient, admin, member):
    _, headers = admin
    user, _ = member
    response = await client.patch(f"/api/v1/users/{user.id}/role", json={"role": "SUPER_ADMIN"}, headers=headers)
    assert response.status_code == 403


async def test_admin_cannot_change_other_admin(client: AsyncClient, admin, make_user):
    _, headers = admin
    other, _ = await make_user(UserRole.admin)
    response = await client.patch(f"/api/v1/users/{other.id}/role", json={"role": "USER"}, headers=headers)
    assert response.status_code == 403


async def test_super_admin_can_demote_admin(client: AsyncClient, make_user):
    _, headers = await make_user(UserRole.super_admin)
    other, _ = await make_user(UserRole.admin)
    response = await client.patch(f"/api/v1/users/{other.id}/role", json={"role": "STAFF"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["role"] == "STAFF"


async def test_cannot_change_own_role(client: AsyncClient, admin):
    user, headers = admin
    response = await client.patch(f"/api/v1/users/{user.id}/role", json={"role": "USER"}, headers=headers)
    assert response.status_code == 400


async def test_delete_user(client: AsyncClient, admin, make_user):
    _, headers = admin
    target, _ = await make_user()
    response = await client.delete(f"/api/v1/users/{target.id}", headers=headers)
    assert response.status_code == 204

    response = await client.get(f"/api/v1/users/{target.id}", headers=headers)
    assert response.status_code == 404


async def test_cannot_delete_user_at_same_grade(client: AsyncClient, admin, make_user):
    _, headers = admin
    other, _ = await make_user(UserRole.admin)
    response = await client.delete(f"/api/v1/users/{other.id}", headers=headers)
    assert response.status_code == 403
