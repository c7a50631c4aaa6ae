"""
Auction state machine for bidding listings.

Placing a bid and settling a listing are each one read-modify-write unit:
read the current leader, write the bid or the sold status, stage the
notifications, commit. Both run under a per-listing asyncio.Lock (one
process) and a SELECT ... FOR UPDATE on the listing row (PostgreSQL), so
two requests against the same listing never act on a stale leader. Any
failure rolls back the bid, the status change and every staged notification.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from models import Listing, Bid, User, LISTING_STATUSES, TERMINAL_LISTING_STATUSES
from utils.exceptions import (
    BidRejectedError, ConflictError, ForbiddenError, NotFoundError, ValidationError
)
from utils.notifications import (
    add_notification, format_amount,
    get_new_bid_message, get_outbid_message, get_won_message
)
from dataclasses import dataclass
from typing import List, Optional, Tuple
import asyncio
import weakref
import logging

logger = logging.getLogger(__name__)


@dataclass
class StatusChange:
    listing: Listing
    previous_status: str
    changed: bool
    winning_bid: Optional[Bid] = None
    winner: Optional[User] = None


class BiddingHelpers:
    """Helper functions for bid placement and listing settlement"""

    def __init__(self):
        self._locks = weakref.WeakValueDictionary()

    def listing_lock(self, listing_id: int) -> asyncio.Lock:
        lock = self._locks.get(listing_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[listing_id] = lock
        return lock

    async def _get_listing_for_update(self, db: AsyncSession, listing_id: int) -> Listing:
        result = await db.execute(
            select(Listing).where(Listing.id == listing_id).with_for_update()
        )
        listing = result.scalar_one_or_none()
        if not listing:
            raise NotFoundError("Listing not found")
        return listing

    async def leading_bid(self, db: AsyncSession, listing_id: int) -> Optional[Bid]:
        """Highest bid; the earliest placed wins a tie"""
        result = await db.execute(
            select(Bid)
            .where(Bid.listing_id == listing_id)
            .order_by(Bid.amount.desc(), Bid.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_bids(self, db: AsyncSession, listing_id: int) -> List[Tuple[Bid, str]]:
        """Leaderboard: amount descending, ties in placement order"""
        result = await db.execute(
            select(Bid, User)
            .join(User, Bid.buyer_id == User.id)
            .where(Bid.listing_id == listing_id)
            .order_by(Bid.amount.desc(), Bid.id.asc())
        )
        return [(bid, buyer.display_name) for bid, buyer in result.all()]

    async def place_bid(self, db: AsyncSession, listing_id: int, buyer_id: int, amount: float) -> Bid:
        if amount is None or amount <= 0:
            raise BidRejectedError("Bid amount must be greater than zero")

        async with self.listing_lock(listing_id):
            try:
                listing = await self._get_listing_for_update(db, listing_id)

                if listing.price_type != "bidding":
                    raise BidRejectedError("This listing is sold at a fixed price and does not accept bids")
                if listing.status in TERMINAL_LISTING_STATUSES:
                    raise BidRejectedError(f"Listing is {listing.status} and no longer accepts bids")

                buyer = await db.get(User, buyer_id)
                if not buyer:
                    raise NotFoundError("Buyer not found")
                if buyer.is_blocked:
                    raise ForbiddenError("Account blocked")
                if buyer.id == listing.seller_id:
                    raise BidRejectedError("Sellers cannot bid on their own listing")
                if buyer.role != "buyer":
                    raise ForbiddenError("Only buyers can place bids")

                previous_leader = await self.leading_bid(db, listing.id)
                floor = previous_leader.amount if previous_leader else listing.price
                if amount <= floor:
                    what = "current highest bid" if previous_leader else "starting price"
                    raise BidRejectedError(f"Bid must exceed the {what} of {format_amount(floor)}")

                bid = Bid(listing_id=listing.id, buyer_id=buyer.id, amount=amount)
                db.add(bid)
                await db.flush()

                add_notification(
                    db,
                    listing.seller_id,
                    get_new_bid_message(listing.title, amount, buyer.display_name)
                )
                if previous_leader and previous_leader.buyer_id != buyer.id:
                    add_notification(
                        db,
                        previous_leader.buyer_id,
                        get_outbid_message(listing.title, amount)
                    )

                await db.commit()
            except Exception:
                await db.rollback()
                raise

        await db.refresh(bid)
        logger.info(f"Bid {bid.id} of {format_amount(amount)} by user {buyer_id} leads listing {listing_id}")
        return bid

    async def update_status(self, db: AsyncSession, listing_id: int, new_status: str) -> StatusChange:
        """
        Move a listing to new_status. sold and deactivated are terminal:
        repeating the current status is a no-op, anything else from a terminal
        state is a conflict. Selling a bidding listing notifies the leader.
        """
        if new_status not in LISTING_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(LISTING_STATUSES)}")

        async with self.listing_lock(listing_id):
            try:
                listing = await self._get_listing_for_update(db, listing_id)
                previous_status = listing.status

                if previous_status == new_status:
                    await db.commit()
                    return StatusChange(listing=listing, previous_status=previous_status, changed=False)
                if previous_status in TERMINAL_LISTING_STATUSES:
                    raise ConflictError(f"Listing is already {previous_status}")

                listing.status = new_status

                winning_bid = None
                winner = None
                if new_status == "sold" and listing.price_type == "bidding":
                    winning_bid = await self.leading_bid(db, listing.id)
                    if winning_bid:
                        winner = await db.get(User, winning_bid.buyer_id)
                        add_notification(
                            db,
                            winning_bid.buyer_id,
                            get_won_message(listing.title, winning_bid.amount)
                        )

                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(f"Listing {listing_id} moved from {previous_status} to {new_status}")
        return StatusChange(
            listing=listing,
            previous_status=previous_status,
            changed=True,
            winning_bid=winning_bid,
            winner=winner
        )

    async def settle_listing(self, db: AsyncSession, listing_id: int) -> StatusChange:
        """Mark a listing sold and resolve its auction"""
        return await self.update_status(db, listing_id, "sold")


bidding_helpers = BiddingHelpers()

def get_bidding() -> BiddingHelpers:
    return bidding_helpers
