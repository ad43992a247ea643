"""
Repository layer for data access operations.
"""

from property_api.repositories.base import BaseRepository
from property_api.repositories.property import PropertyRepository, UnsupportedFieldError

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "UnsupportedFieldError",
]
