from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from models import Listing, ListingImage, User
from config import AI_VERIFY_CONFIDENCE
from utils.ai_assist import AIAssist
from utils.exceptions import MarketplaceError, NotFoundError, ForbiddenError
from utils.response_helpers import listing_to_dict
from utils.storage import StorageHelpers, is_data_url
from .schemas import ListingCreate, ListingFilters
from typing import Any, Dict, Iterable, List, Optional
import logging

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    "price_low": (Listing.price.asc(), Listing.id.desc()),
    "price_high": (Listing.price.desc(), Listing.id.desc()),
    "newest": (Listing.created_at.desc(), Listing.id.desc()),
}


class ListingHelpers:
    """Helper functions for listing retrieval, creation and AI audit results"""

    async def images_for(self, db: AsyncSession, listing_ids: Iterable[int]) -> Dict[int, List[str]]:
        """Image references per listing, in insertion order"""
        listing_ids = list(listing_ids)
        images: Dict[int, List[str]] = {listing_id: [] for listing_id in listing_ids}
        if not listing_ids:
            return images

        result = await db.execute(
            select(ListingImage)
            .where(ListingImage.listing_id.in_(listing_ids))
            .order_by(ListingImage.id)
        )
        for image in result.scalars().all():
            images[image.listing_id].append(image.image_url)
        return images

    async def with_images(self, db: AsyncSession, rows) -> List[Dict[str, Any]]:
        rows = list(rows)
        images = await self.images_for(db, [listing.id for listing, _ in rows])
        return [listing_to_dict(listing, images[listing.id], seller) for listing, seller in rows]

    async def search_listings(self, db: AsyncSession, filters: ListingFilters) -> List[Dict[str, Any]]:
        """
        Filtered retrieval. Without seller_id only active listings are returned;
        with it, every listing of that seller regardless of status.
        """
        query = select(Listing, User).join(User, Listing.seller_id == User.id)

        if filters.seller_id is None:
            query = query.where(Listing.status == "active")
        else:
            query = query.where(Listing.seller_id == filters.seller_id)

        if filters.category:
            query = query.where(Listing.category == filters.category)
        if filters.quality:
            query = query.where(Listing.quality == filters.quality)
        if filters.min_price is not None:
            query = query.where(Listing.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.where(Listing.price <= filters.max_price)
        if filters.search:
            term = filters.search.lower()
            query = query.where(
                or_(
                    func.lower(Listing.title).contains(term, autoescape=True),
                    func.lower(func.coalesce(Listing.description, "")).contains(term, autoescape=True)
                )
            )

        query = query.order_by(*SORT_ORDERS.get(filters.sort, SORT_ORDERS["newest"]))

        result = await db.execute(query)
        return await self.with_images(db, result.all())

    async def get_listing(self, db: AsyncSession, listing_id: int) -> Dict[str, Any]:
        result = await db.execute(
            select(Listing, User)
            .join(User, Listing.seller_id == User.id)
            .where(Listing.id == listing_id)
        )
        row = result.first()
        if not row:
            raise NotFoundError("Listing not found")
        return (await self.with_images(db, [row]))[0]

    async def create_listing(self, db: AsyncSession, data: ListingCreate, storage: StorageHelpers) -> Listing:
        seller = await db.get(User, data.seller_id)
        if not seller:
            raise NotFoundError("Seller not found")
        if seller.role != "seller":
            raise ForbiddenError("Only sellers can create listings")
        if seller.is_blocked:
            raise ForbiddenError("Account blocked")

        listing = Listing(
            seller_id=seller.id,
            **data.model_dump(exclude={"seller_id", "images"})
        )
        db.add(listing)
        await db.flush()

        for reference in data.images:
            db.add(ListingImage(
                listing_id=listing.id,
                image_url=storage.store_reference(reference, f"listings/{listing.id}")
            ))

        await db.commit()
        await db.refresh(listing)
        logger.info(f"Seller {seller.id} created {listing.price_type} listing {listing.id}")
        return listing

    async def apply_audit_result(
        self,
        db: AsyncSession,
        listing_id: int,
        verdict: Dict[str, Any],
        threshold: float = AI_VERIFY_CONFIDENCE
    ) -> bool:
        """
        Write an AI verdict onto the listing. Notes are always stored; the
        verified flag is only set when the verdict is positive and confident.
        Re-applying the same verdict leaves the listing unchanged.
        """
        listing = await db.get(Listing, listing_id)
        if not listing:
            logger.warning(f"Audit result for missing listing {listing_id} dropped")
            return False

        confidence = verdict.get("confidence") or 0.0
        if verdict.get("is_verified") and confidence > threshold:
            listing.is_verified = True
        listing.verification_notes = verdict.get("notes")

        await db.commit()
        logger.info(f"Applied AI audit to listing {listing_id}: verified={listing.is_verified}, confidence={confidence}")
        return True

    async def run_listing_audit(
        self,
        listing_id: int,
        title: str,
        description: Optional[str],
        category: Optional[str],
        quality: Optional[str],
        image_data: str,
        ai: AIAssist,
        session_factory
    ):
        """Background task: ask the AI auditor, then apply its verdict. Never raises."""
        if not is_data_url(image_data):
            logger.info(f"AI audit for listing {listing_id} skipped: first image is not inline data")
            return

        try:
            verdict = await ai.audit_listing(title, description, category, quality, image_data)
        except MarketplaceError as e:
            logger.warning(f"AI audit for listing {listing_id} failed, listing stays unverified: {e.message}")
            return

        async with session_factory() as db:
            try:
                await self.apply_audit_result(db, listing_id, verdict)
            except Exception as e:
                await db.rollback()
                logger.error(f"Failed to store AI audit for listing {listing_id}: {str(e)}")


listing_helpers = ListingHelpers()
