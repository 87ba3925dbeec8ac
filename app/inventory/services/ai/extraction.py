"""
Cover metadata extraction.

Sends a cover image with a fixed instruction to a vision model and turns
the free-text reply into the five metadata fields.
"""

import json
import logging
import re
from typing import Any

from fastapi.concurrency import run_in_threadpool

from ...exceptions import ParseError, UpstreamError
from ...models import BOOK_FIELDS, BookMetadata
from ..image_service import PreparedImage
from .vision import VisionModel

logger = logging.getLogger(__name__)


# =============================================================================
# Extraction Prompt
# =============================================================================

EXTRACTION_PROMPT = """Analyze the following image of a book cover.
Extract the following details:
- Title: The main title of the book
- Author(s): The author name(s)
- Grade Level: Any grade level information if visible (e.g., "Grades 3-5", "Ages 8-12")
- Subject: The subject or genre (e.g., Fantasy, Science Fiction, History, Education, Fiction, Non-Fiction, Mystery, Romance, Biography)
- Series: If this book is part of a series, the series name

Return the response ONLY as a valid JSON object with the following keys:
"title", "author", "gradeLevel", "subject", "series".
If a piece of information is not found or not applicable, return an empty string "" for that key.
Do not include any other text, explanations, or markdown formatting in your response.
The response must be valid JSON that can be parsed directly."""

# Opening fence with optional language tag, or a bare closing fence
_CODE_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


# =============================================================================
# Response Handling
# =============================================================================


def clean_response_text(text: str) -> str:
    """Strip markdown code fences the model may wrap its JSON in."""
    return _CODE_FENCE_RE.sub("", text).strip()


def _coerce_field(value: Any) -> str:
    """Only non-empty strings survive; anything else becomes ""."""
    if not value or not isinstance(value, str):
        return ""
    return value


def normalize_metadata(parsed: Any) -> BookMetadata:
    """
    Build a BookMetadata from parsed model output.

    Missing keys, falsy values and non-string values become empty strings;
    keys outside the five metadata fields are dropped.
    """
    if not isinstance(parsed, dict):
        logger.warning("Model returned %s instead of a JSON object", type(parsed).__name__)
        parsed = {}

    fields: dict[str, str] = {}
    for key in BOOK_FIELDS:
        value = parsed.get(key)
        fields[key] = _coerce_field(value)
        if value and not isinstance(value, str):
            logger.debug("Dropped non-string value for %s: %r", key, value)

    return BookMetadata.model_validate(fields)


# =============================================================================
# Main Extraction Function
# =============================================================================


async def extract_book_metadata(
    image: PreparedImage,
    model: VisionModel,
) -> BookMetadata:
    """
    Extract bibliographic metadata from a cover image.

    Each call is independent: no retries, no caching of repeated images.
    The blocking model call runs in the threadpool.

    Args:
        image: Validated cover image.
        model: Vision model to query.

    Returns:
        BookMetadata with all five fields set (possibly to "").

    Raises:
        UpstreamError: If the model call fails.
        ParseError: If the reply is not valid JSON once fences are removed.
    """
    try:
        text = await run_in_threadpool(
            model.generate, EXTRACTION_PROMPT, image.data, image.mime_type
        )
    except UpstreamError:
        raise
    except Exception as e:
        logger.exception("Cover extraction request failed")
        raise UpstreamError(f"AI model request failed: {e}") from e

    cleaned = clean_response_text(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse extraction response: %s", cleaned[:500])
        raise ParseError(f"Invalid JSON in extraction response: {e}") from e

    metadata = normalize_metadata(parsed)
    logger.info(
        "Extracted cover metadata: title=%r, author=%r",
        metadata.title,
        metadata.author,
    )
    return metadata
