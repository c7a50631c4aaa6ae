from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from utils.ai_assist import AIAssist, get_ai_assist
from utils.exceptions import ExternalServiceError, ValidationError
from utils.response_helpers import CamelRequestModel
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI Assist"])


class CategorySuggestionRequest(CamelRequestModel):
    image_data: str = Field(min_length=1, description="data:image/...;base64,... or a bare base64 payload")


class CategorySuggestionResponse(BaseModel):
    category: str
    confidence: Optional[float] = None
    reasoning: Optional[str] = None


@router.post("/suggest-category", response_model=CategorySuggestionResponse)
async def suggest_category(
    request_data: CategorySuggestionRequest,
    ai: AIAssist = Depends(get_ai_assist)
):
    """Suggest a waste category for an image"""
    if not ai.enabled:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="AI Key missing"
        )

    try:
        suggestion = await ai.suggest_category(request_data.image_data)
        return CategorySuggestionResponse(**suggestion)

    except ValidationError:
        raise
    except ExternalServiceError as e:
        logger.error(f"AI suggestion error: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )
