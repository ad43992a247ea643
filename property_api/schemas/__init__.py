"""
Pydantic schemas for response validation.
"""

from .property import (
    Category,
    SubPurpose,
    Purpose,
    Address,
    ListingSummary,
    ListingDetail,
    PropertyListResponse,
    PropertyDetailResults,
    PropertyDetailResponse,
    ErrorResponse
)

__all__ = [
    "Category",
    "SubPurpose",
    "Purpose",
    "Address",
    "ListingSummary",
    "ListingDetail",
    "PropertyListResponse",
    "PropertyDetailResults",
    "PropertyDetailResponse",
    "ErrorResponse"
]
