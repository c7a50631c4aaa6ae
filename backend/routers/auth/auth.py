from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
from config import get_db
from models import User
from utils.exceptions import MarketplaceError, ConflictError, ForbiddenError
from utils.response_helpers import user_to_dict
from .schemas import UserRegister, UserLogin, UserResponse, AuthResponse
from .helpers import auth_helpers
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

security = HTTPBearer()

async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
):
    """Get current user from JWT token; the role is re-read from the database"""
    payload = auth_helpers.verify_token(credentials.credentials)

    user = await db.get(User, payload["user_id"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists"
        )
    if user.is_blocked:
        logger.warning(f"Blocked user {user.id} presented a valid token")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account blocked"
        )

    current_user = {
        "user_id": user.id,
        "email": user.email,
        "role": user.role
    }
    request.state.current_user = current_user
    return current_user

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    try:
        if user_data.role == "admin":
            raise ForbiddenError("Admin accounts cannot be created publicly")

        existing_user = await db.execute(
            select(User).where(User.email == user_data.email)
        )
        if existing_user.scalar_one_or_none():
            raise ConflictError("Email already registered")

        new_user = User(
            email=user_data.email,
            password=user_data.password,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            role=user_data.role,
            id_number=user_data.id_number
        )
        db.add(new_user)
        await db.commit()
        await db.refresh(new_user)

        logger.info(f"Registered {new_user.role} account {new_user.id}")
        return UserResponse.model_validate(user_to_dict(new_user))

    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already registered")
    except (HTTPException, MarketplaceError):
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Registration failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )

@router.post("/login", response_model=AuthResponse)
async def login(
    user_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(User).where(User.email == user_data.email, User.password == user_data.password)
    )
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )
    if user.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account blocked"
        )

    return AuthResponse(
        user=UserResponse.model_validate(user_to_dict(user)),
        access_token=auth_helpers.create_access_token(user)
    )

@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the authenticated user's account"""
    user = await db.get(User, current_user["user_id"])
    return UserResponse.model_validate(user_to_dict(user))
