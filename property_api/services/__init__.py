"""
Service layer for listing search and error handling.
"""

from .property import PropertyService, ListingPage, RelatedPolicy
from .error_handler import ErrorHandlerService

__all__ = [
    "PropertyService",
    "ListingPage",
    "RelatedPolicy",
    "ErrorHandlerService"
]
