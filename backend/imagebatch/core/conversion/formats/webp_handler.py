"""WebP format handler."""

from io import BytesIO
from typing import BinaryIO

import structlog
from PIL import Image, features

from imagebatch.core.conversion.formats.base import BaseFormatHandler
from imagebatch.core.exceptions import EncodeError

logger = structlog.get_logger()


class WebPHandler(BaseFormatHandler):
    """Handler for WebP format."""

    def __init__(self):
        """Initialize WebP handler."""
        super().__init__()
        self.supported_formats = ["webp"]
        self.format_name = "WEBP"

    def validate_image(self, image_data: bytes) -> bool:
        """Validate that the image data is valid WebP."""
        if len(image_data) < 12:
            return False

        # RIFF container with a WEBP form type
        if image_data[0:4] != b"RIFF" or image_data[8:12] != b"WEBP":
            return False

        try:
            with BytesIO(image_data) as buffer:
                with Image.open(buffer) as img:
                    return img.format == "WEBP"
        except Exception:
            return False

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, quality: int
    ) -> None:
        """Save image as WebP."""
        if not features.check("webp"):
            raise EncodeError(
                "WebP encoding is not available in this Pillow build",
                details={"format": "WEBP"},
            )

        try:
            image = self.prepare_image(image)
            save_params = self.get_quality_param(quality)
            save_params["method"] = 4  # Balanced speed/compression
            image.save(output_buffer, format="WEBP", **save_params)
            output_buffer.seek(0)

        except Exception as e:
            raise EncodeError(
                f"Failed to save image as WebP: {str(e)}",
                details={"format": "WEBP", "quality": quality, "error": str(e)},
            )

    def _supports_transparency(self) -> bool:
        """WebP supports transparency."""
        return True
