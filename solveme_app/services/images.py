from __future__ import annotations
import io
from typing import Optional
from PIL import Image, UnidentifiedImageError


def sniff_content_type(file_bytes: bytes) -> Optional[str]:
    """Return the MIME type Pillow detects for the bytes, or None if they are not an image."""
    try:
        with Image.open(io.BytesIO(file_bytes)) as img:
            return Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return None
