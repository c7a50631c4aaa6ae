"""Tests for the admin surface: user moderation, KYC review and reports."""

import pytest
from sqlalchemy import select

from models import Notification


@pytest.fixture
def admin(make_user):
    async def _admin():
        return await make_user("admin", is_verified=True)
    return _admin


@pytest.mark.asyncio
async def test_admin_routes_require_admin_role(client, make_user, auth_headers):
    buyer = await make_user("buyer")
    seller = await make_user("seller")

    response = await client.get("/admin/users")
    assert response.status_code in (401, 403)

    for user in (buyer, seller):
        response = await client.get("/admin/users", headers=auth_headers(user))
        assert response.status_code == 403
        response = await client.get("/admin/kyc", headers=auth_headers(user))
        assert response.status_code == 403
        response = await client.post(f"/admin/users/{buyer.id}/block", json={"blocked": True}, headers=auth_headers(user))
        assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_users_paginates(client, make_user, admin, auth_headers):
    root = await admin()
    for _ in range(3):
        await make_user("buyer")
    await make_user("seller")

    response = await client.get("/admin/users", params={"page": 1, "limit": 2}, headers=auth_headers(root))
    assert response.status_code == 200
    body = response.json()
    assert len(body["users"]) == 2
    assert body["total"] == 5

    response = await client.get("/admin/users", params={"role": "buyer"}, headers=auth_headers(root))
    body = response.json()
    assert body["total"] == 3
    assert all(u["role"] == "buyer" for u in body["users"])


@pytest.mark.asyncio
async def test_block_and_verify_user(client, make_user, admin, auth_headers):
    root = await admin()
    buyer = await make_user("buyer", email="target@example.com", password="pw")

    response = await client.post(f"/admin/users/{buyer.id}/block", json={"blocked": True}, headers=auth_headers(root))
    assert response.status_code == 200
    assert response.json()["is_blocked"] is True

    response = await client.post("/auth/login", json={"email": "target@example.com", "password": "pw"})
    assert response.status_code == 403

    response = await client.post(f"/admin/users/{buyer.id}/block", json={"blocked": False}, headers=auth_headers(root))
    assert response.json()["is_blocked"] is False

    response = await client.post(f"/admin/users/{buyer.id}/verify", json={"verified": True}, headers=auth_headers(root))
    assert response.json()["is_verified"] is True

    response = await client.post("/admin/users/9999/verify", json={"verified": True}, headers=auth_headers(root))
    assert response.status_code == 404

    response = await client.post(f"/admin/users/{root.id}/block", json={"blocked": True}, headers=auth_headers(root))
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_kyc_approval_flow(client, make_user, admin, auth_headers, session_factory):
    root = await admin()
    seller = await make_user("seller", email="kyc@example.com", first_name="Kemi", last_name="Ade")

    response = await client.post("/kyc/upload", json={"userId": seller.id, "documentUrl": "https://example.com/id.jpg"})
    assert response.status_code == 201
    document = response.json()
    assert document["status"] == "pending"

    response = await client.get("/admin/kyc", headers=auth_headers(root))
    queue = response.json()
    assert len(queue) == 1
    assert queue[0]["email"] == "kyc@example.com"
    assert queue[0]["first_name"] == "Kemi"

    response = await client.post(f"/admin/kyc/{document['id']}/approve", headers=auth_headers(root))
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert response.json()["user_verified"] is True

    response = await client.post(f"/admin/kyc/{document['id']}/reject", headers=auth_headers(root))
    assert response.status_code == 409

    assert (await client.get("/admin/kyc", headers=auth_headers(root))).json() == []

    response = await client.get(f"/kyc/{seller.id}")
    assert [d["status"] for d in response.json()] == ["approved"]

    async with session_factory() as session:
        messages = (await session.execute(
            select(Notification.message).where(Notification.user_id == seller.id)
        )).scalars().all()
    assert messages == ["Your identity verification has been approved. Your account is now verified."]


@pytest.mark.asyncio
async def test_kyc_rejection(client, make_user, admin, auth_headers):
    root = await admin()
    buyer = await make_user("buyer")

    response = await client.post("/kyc/upload", json={"userId": buyer.id, "documentUrl": "https://example.com/id.jpg"})
    document_id = response.json()["id"]

    response = await client.post(f"/admin/kyc/{document_id}/reject", headers=auth_headers(root))
    assert response.json()["status"] == "rejected"
    assert response.json()["user_verified"] is False

    response = await client.get(f"/notifications/{buyer.id}")
    assert len(response.json()) == 1
    assert "rejected" in response.json()[0]["message"]

    response = await client.post("/admin/kyc/9999/approve", headers=auth_headers(root))
    assert response.status_code == 404

    response = await client.post("/kyc/upload", json={"userId": 9999, "documentUrl": "https://example.com/id.jpg"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reports_moderation(client, make_user, make_listing, admin, auth_headers):
    root = await admin()
    seller = await make_user("seller")
    buyer = await make_user("buyer")
    listing = await make_listing(seller)

    response = await client.post("/reports", json={
        "reporterId": buyer.id, "targetType": "listing", "targetId": listing.id, "reason": "Photos are stock images"
    })
    assert response.status_code == 201
    report = response.json()
    assert report["status"] == "pending"

    response = await client.post("/reports", json={"reporterId": buyer.id, "targetType": "order", "targetId": 1})
    assert response.status_code == 422

    response = await client.post("/reports", json={"reporterId": 9999, "targetType": "user", "targetId": seller.id})
    assert response.status_code == 404

    response = await client.get("/admin/reports", params={"status": "pending"}, headers=auth_headers(root))
    assert [r["id"] for r in response.json()] == [report["id"]]

    response = await client.patch(f"/admin/reports/{report['id']}", json={"status": "dismissed"}, headers=auth_headers(root))
    assert response.status_code == 200
    assert response.json()["status"] == "dismissed"

    response = await client.get("/admin/reports", params={"status": "pending"}, headers=auth_headers(root))
    assert response.json() == []

    response = await client.patch(f"/admin/reports/{report['id']}", json={"status": "closed"}, headers=auth_headers(root))
    assert response.status_code == 422

    response = await client.get("/admin/reports", headers=auth_headers(buyer))
    assert response.status_code == 403
