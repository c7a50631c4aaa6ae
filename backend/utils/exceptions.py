"""
Domain errors raised by helpers and rendered as {"detail": message} responses
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base exception for marketplace operations."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(MarketplaceError):
    """Malformed or missing input."""
    status_code = status.HTTP_400_BAD_REQUEST


class BidRejectedError(ValidationError):
    """Bid violates the auction rules for its listing."""


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(MarketplaceError):
    """Duplicate unique key or a state change the entity no longer allows."""
    status_code = status.HTTP_409_CONFLICT


class ForbiddenError(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN


class ExternalServiceError(MarketplaceError):
    """AI-assist or storage call failed or timed out."""
    status_code = status.HTTP_502_BAD_GATEWAY


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
