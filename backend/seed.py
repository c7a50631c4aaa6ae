"""
Populate an empty database with a demo seller and a handful of fixed-price listings.

    python seed.py
"""
import asyncio
import logging
from sqlalchemy import select, func
from config import ADMIN_EMAIL, ADMIN_PASSWORD, AsyncSessionLocal, init_db
from models import Listing, ListingImage, User
from routers.auth.helpers import auth_helpers

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_SELLER = {
    "email": "seller@example.com",
    "password": "password",
    "first_name": "John",
    "last_name": "Doe",
    "role": "seller",
    "is_verified": True,
}

DEMO_VERIFICATION_NOTES = "AI Verified: Material matches description and category."

DEMO_LISTINGS = [
    {
        "title": "500kg Clean PET Flakes",
        "description": "High-quality PET flakes, sorted and washed. Ready for industrial processing. Minimal contamination.",
        "category": "Plastic",
        "quality": "Sorted/Clean",
        "price": 450,
        "quantity": "500kg",
        "images": ["https://loremflickr.com/800/600/plastic,recycling", "https://loremflickr.com/800/600/bottles,plastic"],
    },
    {
        "title": "Mixed Aluminum Scrap",
        "description": "Industrial aluminum scrap from manufacturing offcuts. Mostly 6061 and 7075 alloys.",
        "category": "Metal",
        "quality": "Industrial Grade",
        "price": 1200,
        "quantity": "1 Ton",
        "images": ["https://loremflickr.com/800/600/metal,scrap"],
    },
    {
        "title": "Bulk Cardboard Bales",
        "description": "OCC (Old Corrugated Containers) bales. Dry and tightly packed. 20 bales available.",
        "category": "Paper",
        "quality": "Sorted/Clean",
        "price": 150,
        "quantity": "5 Tons",
        "images": ["https://loremflickr.com/800/600/paper,cardboard"],
    },
    {
        "title": "E-Waste: Mixed Circuit Boards",
        "description": "Assorted circuit boards from consumer electronics. Untested, sold for precious metal recovery.",
        "category": "Electronic",
        "quality": "Raw/Contaminated",
        "price": 800,
        "quantity": "100kg",
        "images": ["https://loremflickr.com/800/600/electronics,circuit"],
    },
    {
        "title": "Crushed Clear Glass Cullet",
        "description": "Clear glass cullet, crushed to 10-20mm size. Free from ceramics and organics.",
        "category": "Glass",
        "quality": "Sorted/Clean",
        "price": 300,
        "quantity": "2 Tons",
        "images": ["https://loremflickr.com/800/600/glass,bottles"],
    },
    {
        "title": "Organic Compost Material",
        "description": "Pre-processed organic waste suitable for large-scale composting facilities.",
        "category": "Organic",
        "quality": "Unsorted/Mixed",
        "price": 50,
        "quantity": "10 Tons",
        "images": ["https://loremflickr.com/800/600/compost,soil"],
    },
    {
        "title": "Cotton Textile Scraps",
        "description": "100% cotton textile scraps from garment factory. Sorted by color (mostly white).",
        "category": "Textile",
        "quality": "Industrial Grade",
        "price": 200,
        "quantity": "250kg",
        "images": ["https://loremflickr.com/800/600/fabric,textile"],
    },
]


async def seed_demo_data(db) -> int:
    """Insert the demo seller and listings unless a seller already exists. Returns listings created."""
    seller_count = (await db.execute(
        select(func.count(User.id)).where(User.role == "seller")
    )).scalar_one()
    if seller_count:
        logger.info("Sellers already present, skipping demo data")
        return 0

    seller = User(**DEMO_SELLER)
    db.add(seller)
    await db.flush()

    for entry in DEMO_LISTINGS:
        listing = Listing(
            seller_id=seller.id,
            title=entry["title"],
            description=entry["description"],
            category=entry["category"],
            quality=entry["quality"],
            price_type="fixed",
            price=entry["price"],
            quantity=entry["quantity"],
            latitude=0,
            longitude=0,
            is_verified=True,
            verification_notes=DEMO_VERIFICATION_NOTES,
        )
        db.add(listing)
        await db.flush()
        for url in entry["images"]:
            db.add(ListingImage(listing_id=listing.id, image_url=url))

    await db.commit()
    logger.info(f"Seeded demo seller {seller.id} with {len(DEMO_LISTINGS)} listings")
    return len(DEMO_LISTINGS)


async def main():
    await init_db()
    async with AsyncSessionLocal() as db:
        await auth_helpers.ensure_admin(db, ADMIN_EMAIL, ADMIN_PASSWORD)
        await seed_demo_data(db)


if __name__ == "__main__":
    asyncio.run(main())
