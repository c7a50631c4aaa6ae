from pydantic import BaseModel
from typing import List, Literal, Optional
from routers.auth.schemas import UserResponse
from utils.response_helpers import CamelRequestModel


class UserListResponse(BaseModel):
    users: List[UserResponse]
    page: int
    limit: int
    total: int


class BlockUserRequest(CamelRequestModel):
    blocked: bool


class VerifyUserRequest(CamelRequestModel):
    verified: bool


class ReportStatusUpdate(CamelRequestModel):
    status: Literal["pending", "reviewed", "dismissed"]


class KYCReviewResponse(BaseModel):
    success: bool = True
    document_id: int
    user_id: int
    status: str
    user_verified: Optional[bool] = None
