import pytest
from httpx import AsyncClient

from unipivot.core.models.domain.enums import ProgramStatus

pytestmark = pytest.mark.asyncio


async def test_create_program_starts_as_draft(client: AsyncClient, admin):
    _, headers = admin
    payload = {"title": "Spring Book Club", "type": "BOOKCLUB", "capacity": 10, "deposit_amount": 20000}
    response = await client.post("/api/v1/programs", json=payload, headers=headers)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "DRAFT"
    assert data["slug"].startswith("spring-book-club-")
    assert data["refund_policy_type"] == "ATTENDANCE_ONLY"


async def test_non_ascii_title_falls_back_to_prefix_slug(client: AsyncClient, admin):
    _, headers = admin
    response = await client.post("/api/v1/programs", json={"title": "독서 모임"}, headers=headers)
    assert response.status_code == 201
    assert response.json()["slug"].startswith("program-")


async def test_create_program_requires_admin(client: AsyncClient, staff):
    _, headers = staff
    response = await client.post("/api/v1/programs", json={"title": "Nope"}, headers=headers)
    assert response.status_code == 403


async def test_draft_hidden_from_public(client: AsyncClient, make_program, staff):
    program = await make_program(ProgramStatus.draft)

    response = await client.get(f"/api/v1/programs/{program.id}")
    assert response.status_code == 404

    response = await client.get(f"/api/v1/programs/slug/{program.slug}")
    assert response.status_code == 404

    _, headers = staff
    response = await client.get(f"/api/v1/programs/{program.id}", headers=headers)
    assert response.status_code == 200


async def test_public_list_only_open_programs(client: AsyncClient, make_program):
    open_program = await make_program()
    await make_program(ProgramStatus.draft)
    await make_program(ProgramStatus.closed)

    response = await client.get("/api/v1/programs/public")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["id"] == open_program.id


async def test_admin_list_filters_by_status(client: AsyncClient, admin, make_program):
    _, headers = admin
    await make_program()
    await make_program(ProgramStatus.draft)

    response = await client.get("/api/v1/programs", params={"status": "DRAFT"}, headers=headers)
    assert response.status_code == 200
    assert [p["status"] for p in response.json()["items"]] == ["DRAFT"]


async def test_program_detail_counts_remaining_seats(client: AsyncClient, make_program, member):
    program = await make_program(capacity=3)
    _, headers = member
    await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)

    response = await client.get(f"/api/v1/programs/slug/{program.slug}")
    assert response.status_code == 200
    data = response.json()
    assert data["approved_count"] == 1
    assert data["remaining_seats"] == 2


async def test_update_program_cannot_complete(client: AsyncClient, admin, make_program):
    _, headers = admin
    program = await make_program()
    response = await client.patch(f"/api/v1/programs/{program.id}", json={"status": "COMPLETED"}, headers=headers)
    assert response.status_code == 400

    response = await client.patch(f"/api/v1/programs/{program.id}", json={"status": "CLOSED"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "CLOSED"


async def test_complete_program_rewards_and_promotes(client: AsyncClient, admin, make_user, make_program):
    _, admin_headers = admin
    program = await make_program()
    user, user_headers = await make_user()
    user_id = user.id
    await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=user_headers)

    response = await client.post(f"/api/v1/programs/{program.id}/complete", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["program"]["status"] == "COMPLETED"
    assert data["completed_participants"] == 1
    assert data["promoted_members"] == 1

    response = await client.get(f"/api/v1/users/{user_id}", headers=admin_headers)
    assert response.json()["role"] == "MEMBER"
    assert response.json()["points"] == 500

    response = await client.post(f"/api/v1/programs/{program.id}/complete", headers=admin_headers)
    assert response.status_code == 400


async def test_session_crud(client: AsyncClient, admin, make_program):
    _, headers = admin
    program = await make_program()
    program_id = program.id
    payload = {"session_no": 1, "title": "Chapter 1", "starts_at": "2026-03-02T19:00:00Z"}

    response = await client.post(f"/api/v1/programs/{program_id}/sessions", json=payload, headers=headers)
    assert response.status_code == 201
    session_id = response.json()["id"]

    response = await client.post(
        f"/api/v1/programs/{program_id}/sessions", json={**payload, "session_no": 2}, headers=headers
    )
    assert response.status_code == 201

    response = await client.get(f"/api/v1/programs/{program_id}/sessions")
    assert [s["session_no"] for s in response.json()] == [1, 2]

    response = await client.patch(
        f"/api/v1/programs/{program_id}/sessions/{session_id}", json={"location": "Room 3"}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["location"] == "Room 3"

    response = await client.delete(f"/api/v1/programs/{program_id}/sessions/{session_id}", headers=headers)
    assert response.status_code == 204

    response = await client.get(f"/api/v1/programs/{program_id}/sessions")
    assert len(response.json()) == 1


async def test_session_of_other_program_not_found(client: AsyncClient, admin, make_program, make_program_session):
    _, headers = admin
    first = await make_program()
    second = await make_program()
    program_session = await make_program_session(first)
    response = await client.patch(
        f"/api/v1/programs/{second.id}/sessions/{program_session.id}", json={"title": "x"}, headers=headers
    )
    assert response.status_code == 404


async def test_delete_program(client: AsyncClient, admin, make_program):
    _, headers = admin
    program = await make_program()
    program_id = program.id
    response = await client.delete(f"/api/v1/programs/{program_id}", headers=headers)
    assert response.status_code == 204

    response = await client.get(f"/api/v1/programs/{program_id}", headers=headers)
    assert response.status_code == 404
