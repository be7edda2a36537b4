from datetime import timedelta

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _approved_participant(client: AsyncClient, make_program, make_user):
    program = await make_program()
    user, headers = await make_user()
    response = await client.post(f"/api/v1/programs/{program.id}/registrations", json={}, headers=headers)
    assert response.json()["status"] == "APPROVED"
    return program, user, headers


async def test_check_in_on_time_awards_points(client: AsyncClient, make_program, make_program_session, make_user):
    program, _, headers = await _approved_participant(client, make_program, make_user)
    program_session = await make_program_session(program, offset=timedelta(minutes=-2))

    response = await client.post(f"/api/v1/attendance/sessions/{program_session.id}/check-in", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["attendance"]["status"] == "PRESENT"
    assert data["points_awarded"] == 100
    assert data["message"]

    response = await client.get("/api/v1/points/me", headers=headers)
    assert response.json()["balance"] == 100


async def test_check_in_late(client: AsyncClient, make_program, make_program_session, make_user):
    program, _, headers = await _approved_participant(client, make_program, make_user)
    program_session = await make_program_session(program, offset=timedelta(minutes=-12))

    response = await client.post(f"/api/v1/attendance/sessions/{program_session.id}/check-in", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["attendance"]["status"] == "LATE"
    assert data["attendance"]["late_minutes"] >= 12


async def test_check_in_twice_conflicts(client: AsyncClient, make_program, make_program_session, make_user):
    program, _, headers = await _approved_participant(client, make_program, make_user)
    program_session = await make_program_session(program)

    await client.post(f"/api/v1/attendance/sessions/{program_session.id}/check-in", headers=headers)
    response = await client.post(f"/api/v1/attendance/sessions/{program_session.id}/check-in", headers=headers)
    assert response.status_code == 409


async def test_check_in_outside_window(client: AsyncClient, make_program, make_program_session, make_user):
    program, _, headers = await _approved_participant(client, make_program, make_user)
    program_session = await make_program_session(program, offset=timedelta(hours=3))

    response = await client.get(f"/api/v1/attendance/sessions/{program_session.id}/window")
    assert response.status_code == 200
    assert response.json()["is_open"] is False

    response = await client.post(f"/api/v1/attendance/sessions/{program_session.id}/check-in", headers=headers)
    assert response.status_code == 400


async def test_check_in_requires_approved_registration(
    client: AsyncClient, make_program, make_program_session, member
):
    program = await make_program()
    program_session = await make_program_session(program)
    _, headers = member
    response = await client.post(f"/api/v1/attendance/sessions/{program_session.id}/check-in", headers=headers)
    assert response.status_code == 403


async def test_window_is_open_at_start(client: AsyncClient, make_program, make_program_session):
    program = await make_program()
    program_session = await make_program_session(program)
    response = await client.get(f"/api/v1/attendance/sessions/{program_session.id}/window")
    data = response.json()
    assert data["is_open"] is True
    assert data["remaining_seconds"] > 0


async def test_staff_marks_attendance_and_lists(
    client: AsyncClient, staff, make_program, make_program_session, member
):
    program = await make_program()
    program_session = await make_program_session(program)
    user, _ = member
    _, staff_headers = staff

    response = await client.put(
        f"/api/v1/attendance/sessions/{program_session.id}",
        json={"user_id": user.id, "status": "EXCUSED", "note": "sick"},
        headers=staff_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "EXCUSED"

    response = await client.put(
        f"/api/v1/attendance/sessions/{program_session.id}",
        json={"user_id": user.id, "status": "PRESENT"},
        headers=staff_headers,
    )
    assert response.json()["status"] == "PRESENT"

    response = await client.get(f"/api/v1/attendance/sessions/{program_session.id}", headers=staff_headers)
    assert response.status_code == 200
    assert len(response.json()) == 1


async def test_mark_attendance_unknown_user(client: AsyncClient, staff, make_program, make_program_session):
    program = await make_program()
    program_session = await make_program_session(program)
    _, staff_headers = staff
    response = await client.put(
        f"/api/v1/attendance/sessions/{program_session.id}",
        json={"user_id": 9999, "status": "PRESENT"},
        headers=staff_headers,
    )
    assert response.status_code == 404


async def test_my_attendance_stats(client: AsyncClient, staff, make_program, make_program_session, member):
    program = await make_program()
    first = await make_program_session(program, session_no=1)
    second = await make_program_session(program, session_no=2)
    user, headers = member
    _, staff_headers = staff
    for program_session, status in ((first, "PRESENT"), (second, "ABSENT")):
        await client.put(
            f"/api/v1/attendance/sessions/{program_session.id}",
            json={"user_id": user.id, "status": status},
            headers=staff_headers,
        )

    response = await client.get(f"/api/v1/attendance/programs/{program.id}/me", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert [r["status"] for r in data["records"]] == ["PRESENT", "ABSENT"]
    assert data["stats"]["total"] == 2
    assert data["stats"]["present"] == 1
    assert data["stats"]["attendance_rate"] == 50
