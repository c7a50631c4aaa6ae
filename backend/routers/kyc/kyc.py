from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from config import get_db
from models import KYCDocument, User
from utils.exceptions import MarketplaceError, NotFoundError
from utils.response_helpers import CamelRequestModel, kyc_to_dict
from utils.storage import storage_helpers
from typing import List, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kyc", tags=["KYC"])


class KYCUpload(CamelRequestModel):
    user_id: int
    document_url: str = Field(min_length=1)


class KYCDocumentResponse(BaseModel):
    id: int
    user_id: int
    document_url: str
    status: str
    created_at: datetime
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


@router.post("/upload", response_model=KYCDocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_kyc_document(
    upload: KYCUpload,
    db: AsyncSession = Depends(get_db)
):
    """Submit an identity document for admin review"""
    try:
        user = await db.get(User, upload.user_id)
        if not user:
            raise NotFoundError("User not found")

        document = KYCDocument(
            user_id=user.id,
            document_url=storage_helpers.store_reference(upload.document_url, f"kyc/{user.id}")
        )
        db.add(document)
        await db.commit()
        await db.refresh(document)

        logger.info(f"User {user.id} submitted KYC document {document.id}")
        return KYCDocumentResponse.model_validate(kyc_to_dict(document))

    except (HTTPException, MarketplaceError):
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"KYC upload failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload KYC document"
        )


@router.get("/{user_id}", response_model=List[KYCDocumentResponse])
async def get_user_kyc_documents(
    user_id: int,
    db: AsyncSession = Depends(get_db)
):
    """A user's submitted documents, newest first"""
    result = await db.execute(
        select(KYCDocument)
        .where(KYCDocument.user_id == user_id)
        .order_by(KYCDocument.id.desc())
    )
    return [KYCDocumentResponse.model_validate(kyc_to_dict(d)) for d in result.scalars().all()]
