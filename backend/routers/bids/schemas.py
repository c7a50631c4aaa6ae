from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from utils.response_helpers import CamelRequestModel


class BidCreate(CamelRequestModel):
    listing_id: int
    buyer_id: int
    amount: float = Field(gt=0)


class BidResponse(BaseModel):
    id: int
    listing_id: int
    buyer_id: int
    buyer_name: Optional[str] = None
    amount: float
    created_at: Optional[datetime] = None


class BidPlacedResponse(BaseModel):
    success: bool = True
    bid: BidResponse
