import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _register(client: AsyncClient, program_id: int, headers) -> int:
    response = await client.post(f"/api/v1/programs/{program_id}/registrations", json={}, headers=headers)
    return response.json()["id"]


async def test_third_warning_forfeits_paid_deposit(client: AsyncClient, staff, make_program, member):
    program = await make_program(deposit_amount=20000)
    user, headers = member
    user_id = user.id
    _, staff_headers = staff
    registration_id = await _register(client, program.id, headers)
    await client.post(f"/api/v1/registrations/{registration_id}/deposit-paid", headers=staff_headers)

    card = {"user_id": user_id, "type": "WARNING", "title": "Late again"}
    for expected in (1, 2):
        response = await client.post(
            f"/api/v1/evaluation/programs/{program.id}/cards", json=card, headers=staff_headers
        )
        assert response.status_code == 201
        assert response.json()["warning_count"] == expected
        assert response.json()["deposit_forfeited"] is False

    response = await client.post(f"/api/v1/evaluation/programs/{program.id}/cards", json=card, headers=staff_headers)
    assert response.json()["deposit_forfeited"] is True

    response = await client.get(f"/api/v1/refunds/programs/{program.id}/me", headers=headers)
    assert response.json()["deposit_status"] == "FORFEITED"
    assert response.json()["refund_amount"] == 0

    response = await client.post(f"/api/v1/refunds/registrations/{registration_id}", headers=staff_headers)
    assert response.status_code == 400


async def test_third_praise_awards_badge(client: AsyncClient, admin, staff, make_program, member):
    _, admin_headers = admin
    await client.post("/api/v1/badges/seed", headers=admin_headers)
    program = await make_program()
    user, headers = member
    _, staff_headers = staff
    await _register(client, program.id, headers)

    card = {"user_id": user.id, "type": "PRAISE", "title": "Great discussion"}
    results = []
    for _ in range(3):
        response = await client.post(
            f"/api/v1/evaluation/programs/{program.id}/cards", json=card, headers=staff_headers
        )
        results.append(response.json()["badge_awarded"])
    assert results == [False, False, True]

    response = await client.get("/api/v1/badges/me", headers=headers)
    badges = response.json()
    assert badges[0]["badge"]["code"] == "PRAISED_PARTICIPANT"
    assert badges[0]["program_id"] == program.id


async def test_card_requires_registration(client: AsyncClient, staff, make_program, member):
    program = await make_program()
    user, _ = member
    _, staff_headers = staff
    response = await client.post(
        f"/api/v1/evaluation/programs/{program.id}/cards",
        json={"user_id": user.id, "type": "PRAISE", "title": "Hi"},
        headers=staff_headers,
    )
    assert response.status_code == 404


async def test_participant_summary(client: AsyncClient, staff, make_program, member):
    program = await make_program()
    user, headers = member
    _, staff_headers = staff
    await _register(client, program.id, headers)
    for card_type in ("WARNING", "PRAISE", "PRAISE"):
        await client.post(
            f"/api/v1/evaluation/programs/{program.id}/cards",
            json={"user_id": user.id, "type": card_type, "title": card_type.lower()},
            headers=staff_headers,
        )

    response = await client.get(
        f"/api/v1/evaluation/programs/{program.id}/participants/{user.id}/summary", headers=staff_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["warning_count"] == 1
    assert data["praise_count"] == 2
    assert len(data["cards"]) == 3
    assert data["permission"]["allowed"] is True

    response = await client.get(
        f"/api/v1/evaluation/programs/{program.id}/cards", params={"user_id": user.id}, headers=staff_headers
    )
    assert len(response.json()) == 3


async def test_program_restriction_blocks_registration(client: AsyncClient, staff, make_program, member):
    program = await make_program()
    other = await make_program()
    user, headers = member
    _, staff_headers = staff

    response = await client.put(
        "/api/v1/evaluation/permissions",
        json={"user_id": user.id, "program_id": program.id, "status": "RESTRICTED", "reason": "No-shows"},
        headers=staff_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "RESTRICTED"

    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
    assert response.status_code == 403
    assert "No-shows" in response.json()["detail"]

    response = await client.post(f"/api/v1/programs/{other.id}/registrations", json={}, headers=headers)
    assert response.status_code == 201

    response = await client.get("/api/v1/evaluation/me/permission", params={"program_id": program.id}, headers=headers)
    assert response.json()["status"] == "RESTRICTED"


async def test_global_permission_requires_admin(client: AsyncClient, admin, staff, member):
    user, headers = member
    _, staff_headers = staff
    _, admin_headers = admin
    payload = {"user_id": user.id, "status": "BANNED"}

    response = await client.put("/api/v1/evaluation/permissions", json=payload, headers=staff_headers)
    assert response.status_code == 403

    response = await client.put("/api/v1/evaluation/permissions", json=payload, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["program_id"] is None

    response = await client.get(
        "/api/v1/evaluation/permissions/check", params={"user_id": user.id, "program_id": 1}, headers=staff_headers
    )
    assert response.json()["status"] == "BANNED"
    assert response.json()["allowed"] is False


async def test_expired_permission_is_ignored(client: AsyncClient, admin, member):
    user, headers = member
    _, admin_headers = admin
    await client.put(
        "/api/v1/evaluation/permissions",
        json={"user_id": user.id, "status": "BANNED", "expires_at": "2020-01-01T00:00:00Z"},
        headers=admin_headers,
    )
    response = await client.get("/api/v1/evaluation/me/permission", headers=headers)
    assert response.json()["status"] == "ALLOWED"
