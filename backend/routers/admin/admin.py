from fastapi import APIRouter, Depends, HTTPException, status, Query
from dependencies.rbac import (
    require_user_management, require_user_management_write,
    require_kyc_review, require_kyc_review_write,
    require_reports, require_reports_write
)
from routers.auth.auth import get_current_user
from routers.auth.schemas import UserResponse
from routers.kyc.kyc import KYCDocumentResponse
from routers.reports.reports import ReportResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from config import get_db
from models import User, KYCDocument, Report
from utils.exceptions import MarketplaceError, ConflictError, NotFoundError
from utils.notifications import add_notification, get_kyc_approved_message, get_kyc_rejected_message
from utils.response_helpers import user_to_dict, kyc_to_dict, report_to_dict
from .schemas import (
    UserListResponse, BlockUserRequest, VerifyUserRequest,
    ReportStatusUpdate, KYCReviewResponse
)
from typing import List, Literal, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


# =================
# USER MANAGEMENT ROUTES
# =================

@router.get("/users", response_model=UserListResponse)
async def list_all_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    role: Optional[str] = None,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_user_management)
):
    """
    Admin only: List all users with pagination and optional role filter
    """
    try:
        offset = (page - 1) * limit

        query = select(User)
        count_query = select(func.count(User.id))
        if role:
            query = query.where(User.role == role)
            count_query = count_query.where(User.role == role)

        total = (await db.execute(count_query)).scalar_one()
        result = await db.execute(query.order_by(User.id).offset(offset).limit(limit))
        users = result.scalars().all()

        return UserListResponse(
            users=[UserResponse.model_validate(user_to_dict(user)) for user in users],
            page=page,
            limit=limit,
            total=total
        )

    except Exception as e:
        logger.error(f"List users failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve users"
        )


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.post("/users/{user_id}/block", response_model=UserResponse)
async def set_user_blocked(
    user_id: int,
    request_data: BlockUserRequest,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_user_management_write)
):
    """
    Admin only: Block or unblock an account. Blocked users cannot log in, bid or list.
    """
    user = await _get_user_or_404(db, user_id)
    if user.id == current_user["user_id"] and request_data.blocked:
        raise ConflictError("Admins cannot block their own account")

    user.is_blocked = request_data.blocked
    await db.commit()
    await db.refresh(user)

    logger.info(f"Admin {current_user['user_id']} set blocked={user.is_blocked} on user {user.id}")
    return UserResponse.model_validate(user_to_dict(user))


@router.post("/users/{user_id}/verify", response_model=UserResponse)
async def set_user_verified(
    user_id: int,
    request_data: VerifyUserRequest,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_user_management_write)
):
    """
    Admin only: Set or clear the verified badge on an account
    """
    user = await _get_user_or_404(db, user_id)
    user.is_verified = request_data.verified
    await db.commit()
    await db.refresh(user)

    logger.info(f"Admin {current_user['user_id']} set verified={user.is_verified} on user {user.id}")
    return UserResponse.model_validate(user_to_dict(user))


# =================
# KYC REVIEW ROUTES
# =================

@router.get("/kyc", response_model=List[KYCDocumentResponse])
async def list_pending_kyc(
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_kyc_review)
):
    """
    Admin only: Pending KYC documents, oldest first, with the owner's contact fields
    """
    result = await db.execute(
        select(KYCDocument, User)
        .join(User, KYCDocument.user_id == User.id)
        .where(KYCDocument.status == "pending")
        .order_by(KYCDocument.id.asc())
    )
    return [
        KYCDocumentResponse.model_validate(kyc_to_dict(document, user))
        for document, user in result.all()
    ]


async def _review_kyc(db: AsyncSession, document_id: int, decision: Literal["approved", "rejected"]) -> KYCReviewResponse:
    try:
        document = await db.get(KYCDocument, document_id)
        if not document:
            raise NotFoundError("KYC document not found")
        if document.status != "pending":
            raise ConflictError(f"KYC document already {document.status}")

        user = await db.get(User, document.user_id)
        document.status = decision
        if decision == "approved":
            user.is_verified = True
            add_notification(db, user.id, get_kyc_approved_message())
        else:
            add_notification(db, user.id, get_kyc_rejected_message())

        await db.commit()
        logger.info(f"KYC document {document.id} for user {user.id} {decision}")

        return KYCReviewResponse(
            document_id=document.id,
            user_id=user.id,
            status=document.status,
            user_verified=user.is_verified
        )

    except (HTTPException, MarketplaceError):
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"KYC review of document {document_id} failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to review KYC document"
        )


@router.post("/kyc/{document_id}/approve", response_model=KYCReviewResponse)
async def approve_kyc(
    document_id: int,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_kyc_review_write)
):
    """
    Admin only: Approve a KYC document; the owner becomes verified and is notified
    """
    return await _review_kyc(db, document_id, "approved")


@router.post("/kyc/{document_id}/reject", response_model=KYCReviewResponse)
async def reject_kyc(
    document_id: int,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_kyc_review_write)
):
    """
    Admin only: Reject a KYC document and notify the owner
    """
    return await _review_kyc(db, document_id, "rejected")


# =================
# REPORT MODERATION ROUTES
# =================

@router.get("/reports", response_model=List[ReportResponse])
async def list_reports(
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_reports)
):
    """
    Admin only: Reports, newest first, optionally filtered by status
    """
    query = select(Report)
    if status_filter:
        query = query.where(Report.status == status_filter)

    result = await db.execute(query.order_by(Report.id.desc()))
    return [ReportResponse.model_validate(report_to_dict(report)) for report in result.scalars().all()]


@router.patch("/reports/{report_id}", response_model=ReportResponse)
async def update_report_status(
    report_id: int,
    request_data: ReportStatusUpdate,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_reports_write)
):
    report = await db.get(Report, report_id)
    if not report:
        raise NotFoundError("Report not found")

    report.status = request_data.status
    await db.commit()
    await db.refresh(report)

    logger.info(f"Admin {current_user['user_id']} marked report {report.id} {report.status}")
    return ReportResponse.model_validate(report_to_dict(report))
