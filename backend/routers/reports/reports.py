from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from config import get_db
from models import Report, User
from utils.exceptions import MarketplaceError, NotFoundError
from utils.response_helpers import CamelRequestModel, report_to_dict
from typing import Literal, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


class ReportCreate(CamelRequestModel):
    reporter_id: int
    target_type: Literal["listing", "user"]
    target_id: int
    reason: Optional[str] = Field(None, max_length=2000)


class ReportResponse(BaseModel):
    id: int
    reporter_id: int
    target_type: str
    target_id: int
    reason: Optional[str] = None
    status: str
    created_at: datetime


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    report_data: ReportCreate,
    db: AsyncSession = Depends(get_db)
):
    """Flag a listing or user for admin review"""
    try:
        if not await db.get(User, report_data.reporter_id):
            raise NotFoundError("Reporter not found")

        report = Report(
            reporter_id=report_data.reporter_id,
            target_type=report_data.target_type,
            target_id=report_data.target_id,
            reason=report_data.reason
        )
        db.add(report)
        await db.commit()
        await db.refresh(report)

        logger.info(f"User {report.reporter_id} reported {report.target_type} {report.target_id}")
        return ReportResponse.model_validate(report_to_dict(report))

    except (HTTPException, MarketplaceError):
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to create report: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create report"
        )
