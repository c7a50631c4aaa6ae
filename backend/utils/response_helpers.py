"""
Response helper utilities for turning ORM rows into API payloads
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelRequestModel(BaseModel):
    """
    Request body base that accepts the web client's camelCase keys
    (listingId, buyerId) as well as snake_case
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def user_to_dict(user) -> Dict[str, Any]:
    """Public user fields; the stored credential is never returned"""
    return {
        'id': user.id,
        'email': user.email,
        'first_name': user.first_name,
        'last_name': user.last_name,
        'role': user.role,
        'id_number': user.id_number,
        'is_verified': user.is_verified,
        'is_blocked': user.is_blocked,
        'created_at': user.created_at
    }


def listing_to_dict(listing, images: Optional[List[str]] = None, seller=None) -> Dict[str, Any]:
    """Convert Listing model to dict with embedded image references and seller display fields"""
    return {
        'id': listing.id,
        'seller_id': listing.seller_id,
        'seller_name': seller.display_name if seller else None,
        'seller_verified': seller.is_verified if seller else False,
        'title': listing.title,
        'description': listing.description,
        'category': listing.category,
        'quality': listing.quality,
        'quality_notes': listing.quality_notes,
        'price_type': listing.price_type,
        'price': listing.price,
        'quantity': listing.quantity,
        'latitude': listing.latitude,
        'longitude': listing.longitude,
        'status': listing.status,
        'is_verified': listing.is_verified,
        'verification_notes': listing.verification_notes,
        'created_at': listing.created_at,
        'images': images or []
    }


def bid_to_dict(bid, buyer_name: Optional[str] = None) -> Dict[str, Any]:
    return {
        'id': bid.id,
        'listing_id': bid.listing_id,
        'buyer_id': bid.buyer_id,
        'buyer_name': buyer_name,
        'amount': bid.amount,
        'created_at': bid.created_at
    }


def notification_to_dict(notification) -> Dict[str, Any]:
    return {
        'id': notification.id,
        'user_id': notification.user_id,
        'message': notification.message,
        'is_read': notification.is_read,
        'created_at': notification.created_at
    }


def kyc_to_dict(document, user=None) -> Dict[str, Any]:
    """Convert KYCDocument model to dict, with owner contact fields for the admin queue"""
    data = {
        'id': document.id,
        'user_id': document.user_id,
        'document_url': document.document_url,
        'status': document.status,
        'created_at': document.created_at
    }
    if user is not None:
        data['email'] = user.email
        data['first_name'] = user.first_name
        data['last_name'] = user.last_name
    return data


def report_to_dict(report) -> Dict[str, Any]:
    return {
        'id': report.id,
        'reporter_id': report.reporter_id,
        'target_type': report.target_type,
        'target_id': report.target_id,
        'reason': report.reason,
        'status': report.status,
        'created_at': report.created_at
    }
