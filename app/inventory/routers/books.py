"""
Router for inventory endpoints.

Handles:
- Saving a reviewed book record
- Listing every saved record, newest first
"""

import logging

from fastapi import APIRouter, Body, Depends, status

from ..exceptions import InventoryError, StoreError
from ..models import BookCreatedResponse, BookCreateRequest, BookRecord, ErrorResponse
from ..services.book_service import BookService, get_book_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/books", tags=["books"])


@router.post(
    "",
    response_model=BookCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
def create_book(
    request: BookCreateRequest = Body(...),
    service: BookService = Depends(get_book_service),
) -> BookCreatedResponse:
    """
    Save a book record.

    Title and author are required; grade level, subject and series may be
    empty. The server stamps createdAt/updatedAt and assigns the ID.
    """
    try:
        book_id = service.create_book(request)
    except InventoryError:
        raise
    except Exception as e:
        logger.exception("Failed to save book")
        raise StoreError(f"Failed to save book: {e}") from e

    return BookCreatedResponse(message="Book saved successfully", book_id=book_id)


@router.get(
    "",
    response_model=list[BookRecord],
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
)
def list_books(
    service: BookService = Depends(get_book_service),
) -> list[BookRecord]:
    """List all saved books, newest first."""
    try:
        return service.list_books()
    except InventoryError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch books")
        raise StoreError(f"Failed to fetch books: {e}") from e
