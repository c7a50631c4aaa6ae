"""Tests for listing status transitions and auction settlement."""

import pytest
from sqlalchemy import select

from models import Bid, Listing, Notification
from utils.exceptions import ConflictError, ValidationError


async def won_notifications(session_factory):
    async with session_factory() as session:
        result = await session.execute(
            select(Notification).where(Notification.message.like("Congratulations!%"))
        )
        return result.scalars().all()


@pytest.mark.asyncio
async def test_settle_fixed_listing_notifies_nobody(client, make_user, make_listing, session_factory):
    seller = await make_user("seller")
    listing = await make_listing(seller, price_type="fixed")

    response = await client.patch(f"/listings/{listing.id}/status", json={"status": "sold"})
    assert response.status_code == 200
    assert response.json()["winning_bid"] is None
    assert await won_notifications(session_factory) == []


@pytest.mark.asyncio
async def test_settle_auction_without_bids(client, make_user, make_listing, session_factory):
    seller = await make_user("seller")
    listing = await make_listing(seller)

    response = await client.patch(f"/listings/{listing.id}/status", json={"status": "sold"})
    assert response.status_code == 200
    assert response.json()["status"] == "sold"
    assert response.json()["winning_bid"] is None
    assert await won_notifications(session_factory) == []


@pytest.mark.asyncio
async def test_settling_twice_is_a_no_op(client, make_user, make_listing, session_factory):
    seller = await make_user("seller")
    buyer = await make_user("buyer")
    listing = await make_listing(seller, price=100)
    await client.post("/bids", json={"listingId": listing.id, "buyerId": buyer.id, "amount": 150})

    first = await client.patch(f"/listings/{listing.id}/status", json={"status": "sold"})
    second = await client.patch(f"/listings/{listing.id}/status", json={"status": "sold"})

    assert first.json()["changed"] is True
    assert second.status_code == 200
    assert second.json()["changed"] is False
    assert second.json()["winning_bid"] is None
    assert len(await won_notifications(session_factory)) == 1


@pytest.mark.asyncio
async def test_terminal_status_cannot_change(client, make_user, make_listing):
    seller = await make_user("seller")
    sold = await make_listing(seller, status="sold")
    deactivated = await make_listing(seller, status="deactivated")

    response = await client.patch(f"/listings/{sold.id}/status", json={"status": "active"})
    assert response.status_code == 409

    response = await client.patch(f"/listings/{deactivated.id}/status", json={"status": "sold"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_active_pending_round_trip(client, make_user, make_listing):
    seller = await make_user("seller")
    listing = await make_listing(seller)

    response = await client.patch(f"/listings/{listing.id}/status", json={"status": "pending"})
    assert response.json()["previous_status"] == "active"
    assert response.json()["status"] == "pending"

    response = await client.patch(f"/listings/{listing.id}/status", json={"status": "active"})
    assert response.json()["status"] == "active"


@pytest.mark.asyncio
async def test_unknown_status_and_listing(client, make_user, make_listing):
    seller = await make_user("seller")
    listing = await make_listing(seller)

    response = await client.patch(f"/listings/{listing.id}/status", json={"status": "archived"})
    assert response.status_code == 400

    response = await client.patch("/listings/9999/status", json={"status": "sold"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_bids_closed_after_settlement(client, make_user, make_listing):
    seller = await make_user("seller")
    buyer = await make_user("buyer")
    listing = await make_listing(seller, price=100)

    await client.patch(f"/listings/{listing.id}/status", json={"status": "sold"})
    response = await client.post("/bids", json={"listingId": listing.id, "buyerId": buyer.id, "amount": 500})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_settle_listing_helper(db, make_user, make_listing, bidding, session_factory):
    seller = await make_user("seller")
    buyer = await make_user("buyer")
    listing = await make_listing(seller, price=100)
    await bidding.place_bid(db, listing.id, buyer.id, 120)

    change = await bidding.settle_listing(db, listing.id)
    assert change.changed is True
    assert change.previous_status == "active"
    assert change.winning_bid.amount == 120
    assert change.winner.id == buyer.id

    with pytest.raises(ValidationError):
        await bidding.update_status(db, listing.id, "archived")

    deactivated = await make_listing(seller, status="deactivated")
    with pytest.raises(ConflictError):
        await bidding.settle_listing(db, deactivated.id)

    async with session_factory() as session:
        assert (await session.get(Listing, deactivated.id)).status == "deactivated"
        bids = (await session.execute(select(Bid))).scalars().all()
        assert len(bids) == 1


@pytest.mark.asyncio
async def test_failed_settlement_rolls_back_status(client, make_user, make_listing, session_factory, monkeypatch):
    import routers.bids.helpers as bids_helpers

    seller = await make_user("seller")
    buyer = await make_user("buyer")
    listing = await make_listing(seller, price=100)
    await client.post("/bids", json={"listingId": listing.id, "buyerId": buyer.id, "amount": 150})

    def failing_add_notification(db, user_id, message):
        raise RuntimeError("notification store unavailable")

    monkeypatch.setattr(bids_helpers, "add_notification", failing_add_notification)

    response = await client.patch(f"/listings/{listing.id}/status", json={"status": "sold"})
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to update listing status"}

    async with session_factory() as session:
        assert (await session.get(Listing, listing.id)).status == "active"
    assert await won_notifications(session_factory) == []

    monkeypatch.undo()
    response = await client.patch(f"/listings/{listing.id}/status", json={"status": "sold"})
    assert response.json()["changed"] is True
    assert len(await won_notifications(session_factory)) == 1
