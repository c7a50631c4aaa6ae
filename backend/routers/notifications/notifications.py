from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from config import get_db
from dependencies.rbac import require_notifications_write
from models import Notification
from routers.auth.auth import get_current_user
from utils.exceptions import ForbiddenError
from utils.response_helpers import notification_to_dict
from typing import List
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    message: str
    is_read: bool
    created_at: datetime


@router.get("/{user_id}", response_model=List[NotificationResponse])
async def get_notifications(
    user_id: int,
    db: AsyncSession = Depends(get_db)
):
    """A user's notifications, newest first"""
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return [NotificationResponse.model_validate(notification_to_dict(n)) for n in result.scalars().all()]


@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_notifications_write)
):
    """Mark one of the caller's own notifications as read"""
    notification = await db.get(Notification, notification_id)
    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )
    if notification.user_id != current_user["user_id"]:
        logger.warning(f"User {current_user['user_id']} tried to mark notification {notification_id} of user {notification.user_id}")
        raise ForbiddenError("Notification belongs to another user")

    notification.is_read = True
    await db.commit()
    return {"success": True}


@router.patch("/{user_id}/read-all")
async def mark_all_notifications_read(
    user_id: int,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_notifications_write)
):
    if user_id != current_user["user_id"]:
        raise ForbiddenError("Notifications belong to another user")

    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read == False)
        .values(is_read=True)
    )
    await db.commit()
    return {"success": True, "updated": result.rowcount}
