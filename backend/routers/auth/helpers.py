from fastapi import HTTPException, status
from config import JWT_SECRET_KEY, JWT_ALGORITHM, JWT_ACCESS_TOKEN_EXPIRE_MINUTES
from sqlalchemy import select
from models import User
from datetime import datetime, timedelta, timezone
import jwt
import logging

logger = logging.getLogger(__name__)

class AuthHelpers:
    """Helper functions for authentication operations"""

    def create_access_token(self, user: User, expires_delta: timedelta = None) -> str:
        """Issue an HS256 access token carrying the user id and role"""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=JWT_ACCESS_TOKEN_EXPIRE_MINUTES))
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> dict:
        """
        Verify JWT token locally
        Returns the decoded payload with the user id as an int
        """
        try:
            payload = jwt.decode(
                token,
                JWT_SECRET_KEY,
                algorithms=[JWT_ALGORITHM],
                options={
                    "verify_exp": True,
                    "verify_iat": True,
                    "verify_signature": True,
                    "verify_aud": False
                }
            )

            user_id = payload.get("sub")
            if not user_id or not str(user_id).isdigit():
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid token: missing user ID"
                )

            payload["user_id"] = int(user_id)
            return payload

        except jwt.ExpiredSignatureError:
            logger.warning("JWT token expired")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token expired"
            )
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid JWT token: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token"
            )

    async def ensure_admin(self, db, email: str, password: str) -> User:
        """Create the bootstrap admin account if no account uses its email yet"""
        result = await db.execute(select(User).where(User.email == email))
        admin = result.scalar_one_or_none()
        if admin:
            return admin

        admin = User(
            email=email,
            password=password,
            first_name="Admin",
            role="admin",
            is_verified=True
        )
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        logger.info(f"Created bootstrap admin account {admin.id}")
        return admin

auth_helpers = AuthHelpers()
