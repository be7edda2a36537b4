import pytest
from httpx import AsyncClient

from unipivot.core.models.domain.enums import ProgramStatus

pytestmark = pytest.mark.asyncio


async def test_register_approves_while_seats_remain(client: AsyncClient, make_program, make_user):
    program = await make_program(capacity=1)
    _, first = await make_user()
    _, second = await make_user()

    response = await client.post(
        f"/api/v1/programs/{program.id}/registrations", json={"motivation": "I love books"}, headers=first
    )
    assert response.status_code == 201
    assert response.json()["status"] == "APPROVED"
    assert response.json()["motivation"] == "I love books"

    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=second)
    assert response.status_code == 201
    assert response.json()["status"] == "PENDING"


async def test_register_twice_conflicts(client: AsyncClient, make_program, member):
    program = await make_program()
    _, headers = member
    await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
    assert response.status_code == 409


async def test_register_for_closed_program(client: AsyncClient, make_program, member):
    program = await make_program(ProgramStatus.closed)
    _, headers = member
    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
    assert response.status_code == 400


async def test_register_requires_login(client: AsyncClient, make_program):
    program = await make_program()
    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={})
    assert response.status_code == 401


async def test_cancel_and_register_again_reuses_row(client: AsyncClient, make_program, member):
    program = await make_program()
    _, headers = member
    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
    registration_id = response.json()["id"]

    response = await client.delete(f"/api/v1/programs/{program.id}/registrations/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"

    response = await client.delete(f"/api/v1/programs/{program.id}/registrations/me", headers=headers)
    assert response.status_code == 404

    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
    assert response.status_code == 201
    assert response.json()["id"] == registration_id
    assert response.json()["status"] == "APPROVED"


async def test_my_registrations(client: AsyncClient, make_program, member):
    first = await make_program()
    second = await make_program()
    _, headers = member
    await client.post(f"/api/v1/programs/{first.id}/registrations", json={}, headers=headers)
    await client.post(f"/api/v1/programs/{second.id}/registrations", json={}, headers=headers)

    response = await client.get("/api/v1/registrations/me", headers=headers)
    assert response.status_code == 200
    assert {r["program_id"] for r in response.json()} == {first.id, second.id}


async def test_staff_lists_registrations_with_counts(client: AsyncClient, staff, make_program, make_user):
    program = await make_program(capacity=1)
    for _ in range(3):
        _, headers = await make_user()
        await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)

    _, staff_headers = staff
    response = await client.get(f"/api/v1/programs/{program.id}/registrations", headers=staff_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["status_counts"]["APPROVED"] == 1
    assert data["status_counts"]["PENDING"] == 2
    assert data["status_counts"]["REJECTED"] == 0

    response = await client.get(
        f"/api/v1/programs/{program.id}/registrations", params={"status": "PENDING"}, headers=staff_headers
    )
    assert response.json()["total"] == 2


async def test_member_cannot_list_registrations(client: AsyncClient, make_program, member):
    program = await make_program()
    _, headers = member
    response = await client.get(f"/api/v1/programs/{program.id}/registrations", headers=headers)
    assert response.status_code == 403


async def test_reject_registration_stores_reason(client: AsyncClient, staff, make_program, member):
    program = await make_program()
    _, headers = member
    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
    registration_id = response.json()["id"]

    staff_user, staff_headers = staff
    response = await client.patch(
        f"/api/v1/registrations/{registration_id}/status",
        json={"status": "REJECTED", "reason": "Schedule conflict", "note": "call later"},
        headers=staff_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "REJECTED"
    assert data["reject_reason"] == "Schedule conflict"
    assert data["note"] == "call later"
    assert data["processed_by"] == staff_user.id
    assert data["processed_at"] is not None


async def test_bulk_status_skips_unknown_ids(client: AsyncClient, staff, make_program, make_user):
    program = await make_program(capacity=0)
    ids = []
    for _ in range(2):
        _, headers = await make_user()
        response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
        ids.append(response.json()["id"])

    _, staff_headers = staff
    response = await client.patch(
        "/api/v1/registrations/bulk-status", json={"ids": ids + [9999], "status": "APPROVED"}, headers=staff_headers
    )
    assert response.status_code == 200
    assert response.json() == {"updated": 2}


async def test_confirm_deposit(client: AsyncClient, staff, make_program, member):
    program = await make_program(deposit_amount=20000)
    _, headers = member
    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
    registration_id = response.json()["id"]

    _, staff_headers = staff
    response = await client.post(f"/api/v1/registrations/{registration_id}/deposit-paid", headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["deposit_status"] == "PAID"

    response = await client.post(f"/api/v1/registrations/{registration_id}/deposit-paid", headers=staff_headers)
    assert response.status_code == 400


async def test_confirm_deposit_without_deposit(client: AsyncClient, staff, make_program, member):
    program = await make_program()
    _, headers = member
    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)

    _, staff_headers = staff
    response = await client.post(
        f"/api/v1/registrations/{response.json()['id']}/deposit-paid", headers=staff_headers
    )
    assert response.status_code == 400


async def test_export_csv(client: AsyncClient, staff, make_program, make_user):
    program = await make_program(deposit_amount=10000)
    _, headers = await make_user(name="Park Jiwoo")
    await client.post(f"/api/v1/programs/{program.id}/registrations", json={"motivation": "hi"}, headers=headers)

    _, staff_headers = staff
    response = await client.get(f"/api/v1/programs/{program.id}/registrations/export", headers=staff_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert f"program-{program.id}-registrations.csv" in response.headers["content-disposition"]

    lines = response.content.decode("utf-8-sig").splitlines()
    assert lines[0].split(",")[0] == "이름"
    assert lines[1].startswith("Park Jiwoo,")
    assert "승인" in lines[1]
