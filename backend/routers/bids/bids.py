from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from config import get_db
from utils.exceptions import MarketplaceError
from utils.response_helpers import bid_to_dict
from .helpers import BiddingHelpers, get_bidding
from .schemas import BidCreate, BidResponse, BidPlacedResponse
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bids", tags=["Bids"])


@router.post("", response_model=BidPlacedResponse)
async def place_bid(
    bid_data: BidCreate,
    db: AsyncSession = Depends(get_db),
    bidding: BiddingHelpers = Depends(get_bidding)
):
    """
    Place a bid on a bidding listing.
    The amount must exceed the current highest bid, or the starting price when there is none.
    """
    try:
        bid = await bidding.place_bid(db, bid_data.listing_id, bid_data.buyer_id, bid_data.amount)
        return BidPlacedResponse(bid=BidResponse.model_validate(bid_to_dict(bid)))

    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        logger.error(f"Error placing bid on listing {bid_data.listing_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to place bid"
        )
