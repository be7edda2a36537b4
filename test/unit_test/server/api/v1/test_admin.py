import pytest
from httpx import AsyncClient

from unipivot.core.models.domain.enums import ProgramStatus

pytestmark = pytest.mark.asyncio


async def test_dashboard_statistics(client: AsyncClient, admin, member, make_user, make_program):
    _, admin_headers = admin
    _, member_headers = member
    program = await make_program(capacity=1)
    await make_program(ProgramStatus.draft)
    for _ in range(2):
        _, headers = await make_user()
        await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)

    response = await client.post("/api/v1/donations", json={"amount": 30000}, headers=member_headers)
    await client.patch(
        f"/api/v1/donations/{response.json()['id']}/status", json={"status": "COMPLETED"}, headers=admin_headers
    )
    await client.post("/api/v1/donations", json={"amount": 10000}, headers=member_headers)

    response = await client.get("/api/v1/admin/dashboard", headers=admin_headers)
    assert response.status_code == 200
    stats = response.json()
    assert stats["total_users"] == 4
    assert stats["active_programs"] == 1
    assert stats["monthly_donations"] == 30000
    assert stats["monthly_donation_count"] == 1
    assert stats["pending_registrations"] == 1
    assert len(stats["recent_users"]) == 4
    assert stats["recent_activities"][0]["action"] == "DONATION"


async def test_dashboard_requires_admin(client: AsyncClient, staff):
    _, headers = staff
    response = await client.get("/api/v1/admin/dashboard", headers=headers)
    assert response.status_code == 403
    response = await client.get("/api/v1/admin/dashboard")
    assert response.status_code == 401


async def test_activity_filters(client: AsyncClient, admin, member, make_program):
    _, admin_headers = admin
    user, headers = member
    user_id = user.id
    program = await make_program()
    await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
    await client.post("/api/v1/donations", json={"amount": 5000}, headers=headers)

    response = await client.get("/api/v1/admin/activity", params={"user_id": user_id}, headers=admin_headers)
    body = response.json()
    assert body["total"] == 2
    assert [a["action"] for a in body["items"]] == ["DONATION", "PROGRAM_REGISTER"]

    response = await client.get("/api/v1/admin/activity", params={"action": "DONATION"}, headers=admin_headers)
    assert response.json()["items"][0]["details"] == {"amount": 5000, "type": "ONE_TIME"}
