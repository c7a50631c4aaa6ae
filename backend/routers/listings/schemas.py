from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime
from utils.response_helpers import CamelRequestModel
from routers.bids.schemas import BidResponse


class ListingCreate(CamelRequestModel):
    seller_id: int
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=50)
    quality: Optional[str] = Field(default=None, max_length=50)
    quality_notes: Optional[str] = None
    price_type: Literal["fixed", "bidding"] = "fixed"
    price: float = Field(ge=0)
    quantity: Optional[str] = Field(default=None, max_length=100)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    images: List[str] = Field(default_factory=list)


class ListingFilters(BaseModel):
    category: Optional[str] = None
    quality: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    search: Optional[str] = None
    seller_id: Optional[int] = None
    sort: str = "newest"


class ListingResponse(BaseModel):
    id: int
    seller_id: int
    seller_name: Optional[str] = None
    seller_verified: bool = False
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    quality: Optional[str] = None
    quality_notes: Optional[str] = None
    price_type: str
    price: float
    quantity: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: str
    is_verified: bool = False
    verification_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    images: List[str] = []


class ListingCreatedResponse(BaseModel):
    id: int
    status: str
    ai_audit_queued: bool = False


class StatusUpdate(CamelRequestModel):
    status: str


class StatusUpdateResponse(BaseModel):
    success: bool = True
    listing_id: int
    previous_status: str
    status: str
    changed: bool
    winning_bid: Optional[BidResponse] = None
