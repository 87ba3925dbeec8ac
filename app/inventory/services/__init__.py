"""
Services package for the book inventory application.

Contains:
- image_service: validation and resizing of uploaded cover images
- ai: OpenAI integration for cover metadata extraction
- book_store: persistence of book records
- book_service: create/list operations over the store
"""

from .ai import AIService
from .book_service import BookService
from .image_service import ImageService

__all__ = ["AIService", "BookService", "ImageService"]
