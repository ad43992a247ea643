"""
Utility modules for the property listing API.
"""

from .exceptions import (
    APIException,
    NotFoundError,
    PropertyNotFoundError,
    StoreError,
    ListingQueryError,
    ServiceUnavailableError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    "APIException",
    "NotFoundError",
    "PropertyNotFoundError",
    "StoreError",
    "ListingQueryError",
    "ServiceUnavailableError",
]
