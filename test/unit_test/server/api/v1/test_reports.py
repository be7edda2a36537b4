import pytest
from httpx import AsyncClient

from unipivot.core.models.domain.enums import UserRole

pytestmark = pytest.mark.asyncio

REPORT = {"book_title": "Demian", "book_author": "Hermann Hesse", "title": "Breaking the shell", "content": "..."}


async def test_user_grade_cannot_write_reports(client: AsyncClient, member):
    _, headers = member
    response = await client.post("/api/v1/reports", json=REPORT, headers=headers)
    assert response.status_code == 403


async def test_write_report_earns_points(client: AsyncClient, make_user):
    _, headers = await make_user(UserRole.member)
    response = await client.post("/api/v1/reports", json=REPORT, headers=headers)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "DRAFT"
    assert data["visibility"] == "PUBLIC"

    response = await client.get("/api/v1/points/me", headers=headers)
    assert response.json()["balance"] == 200

    response = await client.get("/api/v1/badges/me/profile", headers=headers)
    assert response.json()["xp"] > 0


async def test_report_for_unknown_program(client: AsyncClient, make_user):
    _, headers = await make_user(UserRole.member)
    response = await client.post("/api/v1/reports", json={**REPORT, "program_id": 9999}, headers=headers)
    assert response.status_code == 404


async def test_drafts_are_not_public(client: AsyncClient, make_user):
    _, headers = await make_user(UserRole.member)
    response = await client.post("/api/v1/reports", json=REPORT, headers=headers)
    report_id = response.json()["id"]

    response = await client.get("/api/v1/reports")
    assert response.json()["total"] == 0
    response = await client.get(f"/api/v1/reports/{report_id}")
    assert response.status_code == 404
    response = await client.get(f"/api/v1/reports/{report_id}", headers=headers)
    assert response.status_code == 200

    await client.post(f"/api/v1/reports/{report_id}/submit", headers=headers)
    response = await client.get("/api/v1/reports")
    assert response.json()["total"] == 1
    response = await client.get(f"/api/v1/reports/{report_id}")
    assert response.status_code == 200


async def test_private_report_hidden_from_others(client: AsyncClient, make_user, staff):
    _, headers = await make_user(UserRole.member)
    _, other_headers = await make_user(UserRole.member)
    response = await client.post("/api/v1/reports", json={**REPORT, "visibility": "PRIVATE"}, headers=headers)
    report_id = response.json()["id"]
    await client.post(f"/api/v1/reports/{report_id}/submit", headers=headers)

    response = await client.get(f"/api/v1/reports/{report_id}", headers=other_headers)
    assert response.status_code == 404

    _, staff_headers = staff
    response = await client.get(f"/api/v1/reports/{report_id}", headers=staff_headers)
    assert response.status_code == 200


async def test_review_flow(client: AsyncClient, make_user, staff):
    _, headers = await make_user(UserRole.member)
    _, staff_headers = staff
    response = await client.post("/api/v1/reports", json=REPORT, headers=headers)
    report_id = response.json()["id"]

    response = await client.post(
        f"/api/v1/reports/{report_id}/review", json={"status": "APPROVED"}, headers=staff_headers
    )
    assert response.status_code == 400

    response = await client.post(f"/api/v1/reports/{report_id}/submit", headers=headers)
    assert response.json()["status"] == "SUBMITTED"
    response = await client.post(f"/api/v1/reports/{report_id}/submit", headers=headers)
    assert response.status_code == 400

    response = await client.get("/api/v1/reports/review-queue", headers=staff_headers)
    assert [r["id"] for r in response.json()] == [report_id]

    response = await client.post(
        f"/api/v1/reports/{report_id}/review", json={"status": "DRAFT"}, headers=staff_headers
    )
    assert response.status_code == 400

    response = await client.post(
        f"/api/v1/reports/{report_id}/review",
        json={"status": "REJECTED", "review_note": "Please expand"},
        headers=staff_headers,
    )
    assert response.status_code == 200
    assert response.json()["review_note"] == "Please expand"

    response = await client.post(f"/api/v1/reports/{report_id}/submit", headers=headers)
    assert response.status_code == 200
    response = await client.post(
        f"/api/v1/reports/{report_id}/review", json={"status": "APPROVED"}, headers=staff_headers
    )
    assert response.json()["status"] == "APPROVED"
    assert response.json()["reviewed_at"] is not None


async def test_only_author_edits_and_deletes(client: AsyncClient, make_user):
    _, headers = await make_user(UserRole.member)
    _, other_headers = await make_user(UserRole.member)
    response = await client.post("/api/v1/reports", json=REPORT, headers=headers)
    report_id = response.json()["id"]

    response = await client.patch(f"/api/v1/reports/{report_id}", json={"title": "Mine"}, headers=other_headers)
    assert response.status_code == 403
    response = await client.patch(f"/api/v1/reports/{report_id}", json={"title": "Updated"}, headers=headers)
    assert response.json()["title"] == "Updated"

    response = await client.delete(f"/api/v1/reports/{report_id}", headers=other_headers)
    assert response.status_code == 403
    response = await client.delete(f"/api/v1/reports/{report_id}", headers=headers)
    assert response.status_code == 204

    response = await client.get("/api/v1/reports/me", headers=headers)
    assert response.json() == []
