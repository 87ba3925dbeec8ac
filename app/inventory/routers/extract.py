"""
Router for cover extraction.

Accepts a cover photo as multipart form data and returns the metadata the
AI model read from it, for the user to review before saving.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status

from ..exceptions import InputError, InventoryError, UpstreamError
from ..models import BookMetadata, ErrorResponse
from ..services.ai import AIService, get_ai_service
from ..services.image_service import ImageService, get_image_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["extract"])


@router.post(
    "/extract",
    response_model=BookMetadata,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def extract_book_details(
    ai_service: Annotated[AIService, Depends(get_ai_service)],
    image_service: Annotated[ImageService, Depends(get_image_service)],
    image: Annotated[UploadFile | None, File(description="Book cover (JPEG or PNG)")] = None,
) -> BookMetadata:
    """
    Extract title, author, grade level, subject and series from a cover photo.

    Every field in the response is a string; fields the model could not
    read are empty.
    """
    if image is None:
        raise InputError("No image file found")

    try:
        file_bytes = await image.read()
        logger.info(
            "Processing cover: %s (%s, %d bytes)",
            image.filename,
            image.content_type,
            len(file_bytes),
        )

        prepared = image_service.prepare_image(file_bytes, image.content_type)
        return await ai_service.extract_metadata(prepared)

    except InventoryError:
        raise
    except Exception as e:
        logger.exception("Unexpected error extracting cover metadata")
        raise UpstreamError(str(e)) from e
    finally:
        await image.close()
