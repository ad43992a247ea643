"""
Read-only property listing API.
"""

__version__ = "1.0.0"
