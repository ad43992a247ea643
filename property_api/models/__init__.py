"""
Database models for the property listing API.
"""

from property_api.models.property import Property, PropertyKeyword, LISTING_SUMMARY_COLUMNS

__all__ = [
    "Property",
    "PropertyKeyword",
    "LISTING_SUMMARY_COLUMNS",
]
