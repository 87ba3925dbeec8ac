"""
Routers package for FastAPI endpoints.

Organized by domain:
- books: Inventory create/list endpoints
- extract: Cover metadata extraction endpoint
"""

from . import books, extract

__all__ = ["books", "extract"]
