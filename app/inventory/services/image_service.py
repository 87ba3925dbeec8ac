"""
Cover image processing service using Pillow.

Checks that uploads are real JPEG or PNG images and downsizes oversized
photographs before they are sent to the AI model.
"""

import io
import logging
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from ..exceptions import InputError

logger = logging.getLogger(__name__)

# Pillow format name -> MIME type
SUPPORTED_FORMATS: dict[str, str] = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
}


class ImageConversionError(InputError):
    """Raised when an upload is not a usable JPEG or PNG image."""

    pass


class PreparedImage:
    """Image bytes ready to send upstream, with their resolved MIME type."""

    def __init__(self, data: bytes, mime_type: str, size: tuple[int, int]):
        self.data = data
        self.mime_type = mime_type
        self.size = size

    def __repr__(self) -> str:
        return f"<PreparedImage(mime_type='{self.mime_type}', size={self.size}, bytes={len(self.data)})>"


class ImageService:
    """
    Service for cover image handling.

    The MIME type sent upstream is always the one Pillow detects from the
    bytes; a declared type that disagrees is logged and ignored.
    """

    def __init__(self, max_size: int = 2048, jpeg_quality: int = 90):
        """
        Initialize the image service.

        Args:
            max_size: Longest allowed side in pixels. Larger images are downscaled.
            jpeg_quality: Quality used when a JPEG has to be re-encoded (1-100).
        """
        self.max_size = max_size
        self.jpeg_quality = jpeg_quality

    def prepare_image(
        self,
        file_bytes: bytes | BinaryIO,
        declared_mime_type: str | None = None,
    ) -> PreparedImage:
        """
        Validate an uploaded cover and return bytes suitable for the model.

        Args:
            file_bytes: Image as bytes or file-like object.
            declared_mime_type: Content type the client sent, if any.

        Returns:
            PreparedImage with the (possibly resized) bytes and MIME type.

        Raises:
            InputError: If no bytes were supplied.
            ImageConversionError: If the bytes are not a decodable JPEG/PNG.
        """
        if hasattr(file_bytes, "read"):
            image_bytes = file_bytes.read()
        else:
            image_bytes = file_bytes

        if not image_bytes:
            raise InputError("No image file found")

        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            logger.error("Could not decode uploaded image: %s", e)
            raise ImageConversionError(f"Invalid image file: {e}") from e

        image_format = image.format
        if image_format not in SUPPORTED_FORMATS:
            raise ImageConversionError(
                f"Unsupported image format: {image_format}. Only JPEG and PNG are accepted"
            )

        mime_type = SUPPORTED_FORMATS[image_format]
        if declared_mime_type and declared_mime_type != mime_type:
            logger.warning(
                "Declared content type %s does not match detected %s",
                declared_mime_type,
                mime_type,
            )

        if max(image.size) > self.max_size:
            original_size = image.size
            image = self.resize_image(image)
            image_bytes = self.image_to_bytes(image, format=image_format)
            logger.info("Downscaled cover from %s to %s", original_size, image.size)

        return PreparedImage(image_bytes, mime_type, image.size)

    def resize_image(self, image: Image.Image) -> Image.Image:
        """Scale an image so its longest side equals ``max_size``."""
        ratio = self.max_size / max(image.size)
        new_size = (int(image.size[0] * ratio), int(image.size[1] * ratio))
        return image.resize(new_size, Image.Resampling.LANCZOS)

    def image_to_bytes(self, image: Image.Image, format: str = "PNG") -> bytes:
        """
        Convert a PIL Image to bytes.

        Args:
            image: PIL Image to convert.
            format: Output format (PNG or JPEG).

        Returns:
            Image as bytes.
        """
        buffer = io.BytesIO()
        save_kwargs = {"format": format}
        if format.upper() in ("JPEG", "JPG"):
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            save_kwargs["quality"] = self.jpeg_quality
        image.save(buffer, **save_kwargs)
        return buffer.getvalue()


# Singleton instance for convenience
_image_service: ImageService | None = None


def get_image_service() -> ImageService:
    """Get or create the image service singleton."""
    global _image_service
    if _image_service is None:
        from ..config import get_settings

        _image_service = ImageService(max_size=get_settings().max_image_size)
    return _image_service
