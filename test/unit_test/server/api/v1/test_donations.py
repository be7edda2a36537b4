import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_anonymous_donation(client: AsyncClient):
    response = await client.post(
        "/api/v1/donations",
        json={"amount": 50000, "donor_name": "Friend", "donor_email": "friend@example.com", "anonymous": True},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["user_id"] is None
    assert data["donor_name"] == "Friend"
    assert data["anonymous"] is True


async def test_donation_amount_must_be_positive(client: AsyncClient):
    response = await client.post("/api/v1/donations", json={"amount": 0})
    assert response.status_code == 422


async def test_signed_in_donation_uses_account_name(client: AsyncClient, member):
    user, headers = member
    response = await client.post("/api/v1/donations", json={"amount": 10000, "type": "REGULAR"}, headers=headers)
    assert response.status_code == 201
    assert response.json()["user_id"] == user.id
    assert response.json()["donor_name"] == user.name

    response = await client.get("/api/v1/donations/me", headers=headers)
    assert len(response.json()) == 1


async def test_completing_donation_credits_points_once(client: AsyncClient, admin, member):
    _, admin_headers = admin
    _, headers = member
    response = await client.post("/api/v1/donations", json={"amount": 30000}, headers=headers)
    donation_id = response.json()["id"]

    for _ in range(2):
        response = await client.patch(
            f"/api/v1/donations/{donation_id}/status", json={"status": "COMPLETED"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "COMPLETED"

    response = await client.get("/api/v1/points/me", headers=headers)
    assert response.json()["balance"] == 3000


async def test_summary_and_list(client: AsyncClient, admin):
    _, admin_headers = admin
    ids = []
    for amount in (10000, 20000, 5000):
        response = await client.post("/api/v1/donations", json={"amount": amount, "donor_name": "Guest"})
        ids.append(response.json()["id"])
    for donation_id in ids[:2]:
        await client.patch(
            f"/api/v1/donations/{donation_id}/status", json={"status": "COMPLETED"}, headers=admin_headers
        )

    response = await client.get("/api/v1/donations/summary", headers=admin_headers)
    assert response.json() == {"completed_total": 30000, "completed_count": 2, "pending_count": 1}

    response = await client.get("/api/v1/donations", params={"status": "PENDING"}, headers=admin_headers)
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["amount"] == 5000
    assert data["summary"]["completed_total"] == 30000


async def test_receipt_is_issued_once(client: AsyncClient, admin, member):
    _, admin_headers = admin
    _, headers = member
    response = await client.post("/api/v1/donations", json={"amount": 100000}, headers=headers)
    donation_id = response.json()["id"]

    response = await client.post(f"/api/v1/donations/{donation_id}/receipt", headers=headers)
    assert response.status_code == 400

    await client.patch(f"/api/v1/donations/{donation_id}/status", json={"status": "COMPLETED"}, headers=admin_headers)

    response = await client.post(f"/api/v1/donations/{donation_id}/receipt", headers=headers)
    assert response.status_code == 200
    receipt = response.json()
    assert receipt["formatted_amount"] == "₩100,000"
    assert receipt["receipt_number"].endswith(f"-{donation_id}")
    assert receipt["organization_name"]

    response = await client.post(f"/api/v1/donations/{donation_id}/receipt", headers=admin_headers)
    assert response.json()["receipt_number"] == receipt["receipt_number"]


async def test_receipt_only_for_donor(client: AsyncClient, admin, member, make_user):
    _, admin_headers = admin
    _, headers = member
    _, other_headers = await make_user()
    response = await client.post("/api/v1/donations", json={"amount": 1000}, headers=headers)
    donation_id = response.json()["id"]
    await client.patch(f"/api/v1/donations/{donation_id}/status", json={"status": "COMPLETED"}, headers=admin_headers)

    response = await client.post(f"/api/v1/donations/{donation_id}/receipt", headers=other_headers)
    assert response.status_code == 403
