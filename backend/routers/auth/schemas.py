from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional
from datetime import datetime
from utils.response_helpers import CamelRequestModel

# Request schemas
class UserRegister(CamelRequestModel):
    email: EmailStr
    password: str = Field(min_length=1)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    role: Literal["buyer", "seller", "admin"]
    id_number: Optional[str] = None

class UserLogin(CamelRequestModel):
    email: EmailStr
    password: str

# Response schemas
class UserResponse(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    id_number: Optional[str] = None
    is_verified: bool = False
    is_blocked: bool = False
    created_at: Optional[datetime] = None

class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
