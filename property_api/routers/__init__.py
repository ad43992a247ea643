"""
API route handlers for the property listing API.
"""

from .properties import router as properties_router

__all__ = ["properties_router"]
