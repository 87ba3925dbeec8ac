"""
Persistence for book records.

``BookStore`` is the interface the inventory service writes through. Records
cross it as plain documents keyed by their wire names (``gradeLevel``,
``createdAt``...), the way a document database would hold them.
``SQLBookStore`` keeps them in the ``books`` table via SQLAlchemy.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import StoreError
from ..models_db import Book

logger = logging.getLogger(__name__)

# Wire name -> column attribute for the fields with their own columns
_COLUMN_FIELDS: dict[str, str] = {
    "title": "title",
    "author": "author",
    "gradeLevel": "grade_level",
    "subject": "subject",
    "series": "series",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


class BookStore(ABC):
    """A collection of book documents."""

    @abstractmethod
    def insert(self, document: dict[str, Any]) -> str:
        """
        Insert one document and return its newly assigned ID.

        Raises:
            StoreError: If the write fails.
        """

    @abstractmethod
    def find_all(self) -> list[dict[str, Any]]:
        """
        Return every document, newest ``createdAt`` first.

        Raises:
            StoreError: If the read fails.
        """


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way back; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLBookStore(BookStore):
    """BookStore backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, document: dict[str, Any]) -> str:
        columns = {
            attr: document[key] for key, attr in _COLUMN_FIELDS.items() if key in document
        }
        extra = {k: v for k, v in document.items() if k not in _COLUMN_FIELDS}
        book = Book(**columns, extra=extra)

        try:
            self.db.add(book)
            self.db.flush()
            book_id = str(book.id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to insert book")
            raise StoreError(f"Failed to insert book: {e}") from e

        return book_id

    def find_all(self) -> list[dict[str, Any]]:
        try:
            books = self.db.query(Book).order_by(Book.created_at.desc()).all()
        except SQLAlchemyError as e:
            logger.exception("Failed to query books")
            raise StoreError(f"Failed to query books: {e}") from e

        return [self._to_document(book) for book in books]

    @staticmethod
    def _to_document(book: Book) -> dict[str, Any]:
        document = dict(book.extra or {})
        document.update(
            id=str(book.id),
            title=book.title,
            author=book.author,
            gradeLevel=book.grade_level,
            subject=book.subject,
            series=book.series,
            createdAt=_as_utc(book.created_at),
            updatedAt=_as_utc(book.updated_at),
        )
        return document


def get_book_store(db: Session = Depends(get_db)) -> BookStore:
    """FastAPI dependency providing the request's book store."""
    return SQLBookStore(db)
