"""
Inventory operations: create a book record, list all records.
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from fastapi import Depends

from ..exceptions import BookValidationError
from ..models import BookCreateRequest, BookRecord
from .book_store import BookStore, get_book_store

logger = logging.getLogger(__name__)

# Keys the server owns; client-supplied values for them are dropped
RESERVED_KEYS = frozenset({"id", "_id", "bookId", "createdAt", "updatedAt"})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookService:
    """
    Create and list book records.

    Title/author validation lives here rather than in the store, so any
    BookStore implementation gets the same rules.
    """

    def __init__(self, store: BookStore, clock: Callable[[], datetime] = utc_now):
        """
        Args:
            store: Where records are written and read.
            clock: Source of creation timestamps.
        """
        self.store = store
        self.clock = clock

    def create_book(self, request: BookCreateRequest) -> str:
        """
        Validate and insert a candidate record.

        Args:
            request: Submitted record. Unknown keys are kept.

        Returns:
            The generated record ID.

        Raises:
            BookValidationError: If title or author is missing or empty.
            StoreError: If the insert fails.
        """
        title = request.title
        author = request.author
        if not title or not author:
            raise BookValidationError("Title and Author are required")

        document = {
            key: value
            for key, value in (request.model_extra or {}).items()
            if key not in RESERVED_KEYS
        }
        now = self.clock()
        document.update(
            title=title,
            author=author,
            gradeLevel=request.grade_level or "",
            subject=request.subject or "",
            series=request.series or "",
            createdAt=now,
            updatedAt=now,
        )

        book_id = self.store.insert(document)
        logger.info("Saved book %s: %r by %r", book_id, title, author)
        return book_id

    def list_books(self) -> list[BookRecord]:
        """
        Return every record, newest first.

        Raises:
            StoreError: If the read fails.
        """
        books = [BookRecord.model_validate(doc) for doc in self.store.find_all()]
        logger.info("Listed %d books", len(books))
        return books


def get_book_service(store: BookStore = Depends(get_book_store)) -> BookService:
    """FastAPI dependency providing the inventory service."""
    return BookService(store)
