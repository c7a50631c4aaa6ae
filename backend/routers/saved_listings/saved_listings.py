from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
from config import get_db
from models import Listing, SavedListing, User
from utils.exceptions import MarketplaceError, ConflictError, NotFoundError
from utils.response_helpers import CamelRequestModel
from routers.listings.helpers import listing_helpers
from routers.listings.schemas import ListingResponse
from typing import List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/saved-listings", tags=["Saved Listings"])


class SaveListingRequest(CamelRequestModel):
    user_id: int
    listing_id: int


@router.get("/{user_id}", response_model=List[ListingResponse])
async def get_saved_listings(
    user_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Listings a user has saved, most recently saved first"""
    result = await db.execute(
        select(Listing, User)
        .join(SavedListing, SavedListing.listing_id == Listing.id)
        .join(User, Listing.seller_id == User.id)
        .where(SavedListing.user_id == user_id)
        .order_by(SavedListing.id.desc())
    )
    listings = await listing_helpers.with_images(db, result.all())
    return [ListingResponse.model_validate(listing) for listing in listings]


@router.post("", status_code=status.HTTP_201_CREATED)
async def save_listing(
    request_data: SaveListingRequest,
    db: AsyncSession = Depends(get_db)
):
    try:
        if not await db.get(User, request_data.user_id):
            raise NotFoundError("User not found")
        if not await db.get(Listing, request_data.listing_id):
            raise NotFoundError("Listing not found")

        existing = await db.execute(
            select(SavedListing).where(
                SavedListing.user_id == request_data.user_id,
                SavedListing.listing_id == request_data.listing_id
            )
        )
        if existing.scalar_one_or_none():
            raise ConflictError("Listing already saved")

        saved = SavedListing(user_id=request_data.user_id, listing_id=request_data.listing_id)
        db.add(saved)
        await db.commit()
        await db.refresh(saved)

        return {"success": True, "id": saved.id}

    except IntegrityError:
        await db.rollback()
        raise ConflictError("Listing already saved")
    except (HTTPException, MarketplaceError):
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to save listing: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save listing"
        )


@router.delete("/{user_id}/{listing_id}")
async def unsave_listing(
    user_id: int,
    listing_id: int,
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(SavedListing).where(
            SavedListing.user_id == user_id,
            SavedListing.listing_id == listing_id
        )
    )
    saved = result.scalar_one_or_none()
    if not saved:
        raise NotFoundError("Saved listing not found")

    await db.delete(saved)
    await db.commit()
    return {"success": True}
