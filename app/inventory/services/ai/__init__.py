"""
AI service package for book cover metadata extraction.

This package is split into:
- vision: the VisionModel interface and its OpenAI implementation
- extraction: prompt, response cleanup and field normalization

The AIService class ties them together and adds a mock mode for
development without an API key.
"""

import logging

from ...models import BookMetadata
from ..image_service import PreparedImage
from .extraction import (
    EXTRACTION_PROMPT,
    clean_response_text,
    extract_book_metadata,
    normalize_metadata,
)
from .vision import OpenAIVisionModel, VisionModel

logger = logging.getLogger(__name__)

__all__ = [
    "AIService",
    "EXTRACTION_PROMPT",
    "OpenAIVisionModel",
    "VisionModel",
    "clean_response_text",
    "extract_book_metadata",
    "get_ai_service",
    "normalize_metadata",
]


class AIService:
    """
    Service for AI-powered cover analysis.

    Uses an OpenAI vision model unless another VisionModel is supplied.
    Without an API key (and without an explicit model) it runs in mock
    mode and returns canned metadata.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        use_mock: bool = False,
        vision_model: VisionModel | None = None,
    ):
        """
        Initialize the AI service.

        Args:
            api_key: OpenAI API key. If None, reads from config/environment.
            model: OpenAI model name (must support vision). If None, reads from config.
            use_mock: If True, return mock data instead of calling the model.
            vision_model: Pre-built model client, mainly for tests.
        """
        if api_key is None or model is None:
            from ...config import get_settings

            settings = get_settings()
            if api_key is None:
                api_key = settings.openai_api_key
            if model is None:
                model = settings.openai_model

        self.api_key = api_key
        self.model = model
        self.use_mock = use_mock or (vision_model is None and not self.api_key)
        self._vision_model = vision_model

        if self.use_mock:
            logger.warning(
                "AI Service running in MOCK MODE. Set OPENAI_API_KEY in .env for real extraction."
            )

    @property
    def vision_model(self) -> VisionModel:
        """Lazy-load the OpenAI-backed model."""
        if self._vision_model is None:
            self._vision_model = OpenAIVisionModel(api_key=self.api_key, model=self.model)
        return self._vision_model

    async def extract_metadata(self, image: PreparedImage) -> BookMetadata:
        """
        Extract title, author, grade level, subject and series from a cover.

        Args:
            image: Validated cover image.

        Returns:
            BookMetadata with every field a string.
        """
        if self.use_mock:
            logger.info("Extracting cover metadata (MOCK MODE)")
            return self._get_mock_metadata()
        return await extract_book_metadata(image, self.vision_model)

    def _get_mock_metadata(self) -> BookMetadata:
        """Return mock metadata for development."""
        return BookMetadata(
            title="MOCK TITLE",
            author="MOCK AUTHOR",
            grade_level="",
            subject="Fiction",
            series="",
        )


# =============================================================================
# Singleton Factory
# =============================================================================

_ai_service: AIService | None = None


def get_ai_service() -> AIService:
    """Get or create the AI service singleton."""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService()
    return _ai_service
