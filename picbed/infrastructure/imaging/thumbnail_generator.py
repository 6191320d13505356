"""
ThumbnailGenerator - decodes uploads and derives bounded-size thumbnails.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ...exceptions import DecodeError


@dataclass
class ProcessedImage:
    width: int
    height: int
    format: str
    mime_type: str
    thumbnail: bytes
    thumbnail_mime_type: str


class ThumbnailGenerator:
    """
    Generates thumbnails from uploaded images using Pillow.

    The thumbnail keeps the original's format where Pillow can write it, so
    the backend receives a content type that matches the bytes.
    """

    CONTENT_TYPES = {
        "JPEG": "image/jpeg",
        "PNG": "image/png",
        "GIF": "image/gif",
        "WEBP": "image/webp",
    }
    FALLBACK_FORMAT = "JPEG"
    # Multi-picture JPEGs from phones and cameras; the first frame is a plain JPEG
    FORMAT_ALIASES = {"MPO": "JPEG"}

    def __init__(
        self,
        size: int = 200,
        quality: int = 85,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize thumbnail generator.

        Args:
            size: Maximum dimension for thumbnails (default: 200)
            quality: JPEG/WEBP quality for output (default: 85)
            logger: Optional logger instance
        """
        self.size = size
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    def process(self, image_data: bytes) -> ProcessedImage:
        """
        Decode ``image_data`` and build its thumbnail.

        Raises:
            DecodeError: the bytes are not an image Pillow can read
        """
        try:
            with Image.open(io.BytesIO(image_data)) as img:
                img.load()
                detected = img.format or self.FALLBACK_FORMAT
                detected = self.FORMAT_ALIASES.get(detected, detected)
                width, height = img.size

                thumb = img.copy()
                thumb.thumbnail((self.size, self.size), Image.Resampling.LANCZOS)
                output_format = detected if detected in self.CONTENT_TYPES else self.FALLBACK_FORMAT
                thumbnail = self._encode(thumb, output_format)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
            self.logger.warning(f"Could not decode uploaded image: {e}")
            raise DecodeError() from e

        return ProcessedImage(
            width=width,
            height=height,
            format=detected,
            mime_type=Image.MIME.get(detected, "application/octet-stream"),
            thumbnail=thumbnail,
            thumbnail_mime_type=self.CONTENT_TYPES[output_format],
        )

    def output_mime_type(self, source_mime_type: str) -> str:
        """Content type of the thumbnail derived from an original of ``source_mime_type``."""
        if source_mime_type in self.CONTENT_TYPES.values():
            return source_mime_type
        return self.CONTENT_TYPES[self.FALLBACK_FORMAT]

    def _encode(self, img: Image.Image, output_format: str) -> bytes:
        output = io.BytesIO()
        if output_format == "JPEG":
            if img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            img.save(output, format="JPEG", quality=self.quality, optimize=True)
        elif output_format == "WEBP":
            img.save(output, format="WEBP", quality=self.quality)
        elif output_format == "PNG":
            img.save(output, format="PNG", optimize=True)
        else:
            img.save(output, format=output_format)
        return output.getvalue()
