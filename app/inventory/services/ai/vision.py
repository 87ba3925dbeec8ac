"""
Image-understanding model clients.

``VisionModel`` is the seam the extraction code talks to; tests swap in
fakes, production uses ``OpenAIVisionModel``.
"""

import base64
import logging
from abc import ABC, abstractmethod

from ...exceptions import UpstreamError

logger = logging.getLogger(__name__)


class VisionModel(ABC):
    """A model that answers a text prompt about a single image."""

    @abstractmethod
    def generate(self, prompt: str, image_data: bytes, mime_type: str) -> str:
        """
        Send one image and an instruction, return the model's raw text.

        Raises:
            UpstreamError: If the model cannot be reached or returns nothing.
        """


class OpenAIVisionModel(VisionModel):
    """Vision model backed by OpenAI chat completions with an image part."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        self.api_key = api_key
        self.model = model
        self._client = None

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise UpstreamError(
                    "OpenAI API key not provided. Set OPENAI_API_KEY environment variable."
                )
            from openai import OpenAI

            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def generate(self, prompt: str, image_data: bytes, mime_type: str) -> str:
        encoded = base64.b64encode(image_data).decode("utf-8")
        logger.info(
            "Sending cover to %s (%s, %d bytes)", self.model, mime_type, len(image_data)
        )

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{encoded}"},
                        },
                    ],
                },
            ],
        )

        content = response.choices[0].message.content
        if not content:
            raise UpstreamError("Empty response from OpenAI")
        return content
