from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from config import get_db, get_session_factory
from utils.ai_assist import AIAssist, get_ai_assist
from utils.exceptions import MarketplaceError
from utils.notifications import send_email, get_auction_won_email
from utils.response_helpers import bid_to_dict
from utils.storage import storage_helpers, is_data_url
from routers.bids.helpers import BiddingHelpers, get_bidding
from routers.bids.schemas import BidResponse
from .helpers import listing_helpers
from .schemas import (
    ListingCreate, ListingFilters, ListingResponse, ListingCreatedResponse,
    StatusUpdate, StatusUpdateResponse
)
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/listings", tags=["Listings"])


@router.get("", response_model=List[ListingResponse])
async def search_listings(
    category: Optional[str] = Query(None),
    quality: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    search: Optional[str] = Query(None),
    sort: str = Query("newest", description="newest, price_low or price_high"),
    seller_id: Optional[int] = Query(None, alias="sellerId"),
    db: AsyncSession = Depends(get_db)
):
    """
    Browse listings. Only active listings are returned unless sellerId is given,
    in which case all of that seller's listings are returned regardless of status.
    """
    try:
        filters = ListingFilters(
            category=category,
            quality=quality,
            min_price=min_price,
            max_price=max_price,
            search=search,
            seller_id=seller_id,
            sort=sort
        )
        listings = await listing_helpers.search_listings(db, filters)
        return [ListingResponse.model_validate(listing) for listing in listings]

    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        logger.error(f"Error searching listings: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to search listings"
        )


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get a listing with its images"""
    listing = await listing_helpers.get_listing(db, listing_id)
    return ListingResponse.model_validate(listing)


@router.post("", response_model=ListingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    listing_data: ListingCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    ai: AIAssist = Depends(get_ai_assist),
    session_factory = Depends(get_session_factory)
):
    """
    Create a listing (sellers only).
    The AI audit runs after the response is sent; its failure never fails the listing.
    """
    try:
        listing = await listing_helpers.create_listing(db, listing_data, storage_helpers)

        audit_queued = False
        if ai.enabled and listing_data.images and is_data_url(listing_data.images[0]):
            background_tasks.add_task(
                listing_helpers.run_listing_audit,
                listing.id,
                listing.title,
                listing.description,
                listing.category,
                listing.quality,
                listing_data.images[0],
                ai,
                session_factory
            )
            audit_queued = True

        return ListingCreatedResponse(id=listing.id, status=listing.status, ai_audit_queued=audit_queued)

    except (HTTPException, MarketplaceError):
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating listing: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create listing"
        )


@router.patch("/{listing_id}/status", response_model=StatusUpdateResponse)
async def update_listing_status(
    listing_id: int,
    status_data: StatusUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    bidding: BiddingHelpers = Depends(get_bidding)
):
    """
    Change a listing's status. Marking a bidding listing as sold settles the
    auction and notifies the highest bidder.
    """
    try:
        change = await bidding.update_status(db, listing_id, status_data.status)

        winning_bid = None
        if change.winning_bid:
            winning_bid = BidResponse.model_validate(
                bid_to_dict(change.winning_bid, change.winner.display_name if change.winner else None)
            )
            if change.winner and change.winner.email:
                subject, body = get_auction_won_email(
                    change.listing.title, change.winning_bid.amount, change.winner.display_name
                )
                background_tasks.add_task(send_email, change.winner.email, subject, body)

        return StatusUpdateResponse(
            listing_id=listing_id,
            previous_status=change.previous_status,
            status=change.listing.status,
            changed=change.changed,
            winning_bid=winning_bid
        )

    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        logger.error(f"Error updating status of listing {listing_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update listing status"
        )


@router.get("/{listing_id}/bids", response_model=List[BidResponse])
async def list_bids(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
    bidding: BiddingHelpers = Depends(get_bidding)
):
    """Bids on a listing, highest first; equal amounts in the order they were placed"""
    bids = await bidding.list_bids(db, listing_id)
    return [BidResponse.model_validate(bid_to_dict(bid, buyer_name)) for bid, buyer_name in bids]
