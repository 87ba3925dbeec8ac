"""Helpers shared by tests."""

import io

from PIL import Image


def make_image_bytes(format: str = "PNG", size: tuple[int, int] = (60, 90)) -> bytes:
    """Render a solid-colour image in the given format."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color="navy").save(buffer, format=format)
    return buffer.getvalue()
