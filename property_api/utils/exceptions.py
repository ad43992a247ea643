"""
Custom exception classes for the property listing API.
Every exception carries a user-safe message and the HTTP status it maps to.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Property"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
            error_code="NOT_FOUND"
        )


class PropertyNotFoundError(NotFoundError):
    """Listing lookup found nothing for the identifier."""

    def __init__(self, property_id: str):
        super().__init__("Property")
        self.property_id = property_id


class StoreError(APIException):
    """Store call failed; the underlying error is logged, never returned."""

    def __init__(
        self,
        detail: str = "Failed to fetch property",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    ):
        super().__init__(
            status_code=status_code,
            detail=detail,
            error_code="STORE_ERROR"
        )


class ListingQueryError(StoreError):
    """Listing search failed."""

    def __init__(self, status_code: int = status.HTTP_200_OK):
        super().__init__("Failed to fetch properties", status_code=status_code)


class ServiceUnavailableError(APIException):
    """Service unavailable exception."""

    def __init__(self, detail: str = "Service temporarily unavailable"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code="SERVICE_UNAVAILABLE"
        )
