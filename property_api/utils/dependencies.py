"""
FastAPI dependency injection utilities for store sessions and services.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from property_api.config import Settings, get_settings
from property_api.database import get_db
from property_api.services.property import PropertyService


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> PropertyService:
    """
    Get property service instance.

    Args:
        db: Database session for the current request
        settings: Application settings

    Returns:
        PropertyService instance
    """
    return PropertyService(db, settings)
