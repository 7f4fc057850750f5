"""PNG format handler."""

from io import BytesIO
from typing import Any, BinaryIO, Dict

import structlog
from PIL import Image

from imagebatch.core.conversion.formats.base import BaseFormatHandler
from imagebatch.core.exceptions import EncodeError

logger = structlog.get_logger()

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class PNGHandler(BaseFormatHandler):
    """Handler for PNG format."""

    def __init__(self) -> None:
        """Initialize PNG handler."""
        super().__init__()
        self.supported_formats = ["png"]
        self.format_name = "PNG"

    def validate_image(self, image_data: bytes) -> bool:
        """Validate that the image data is valid PNG."""
        if len(image_data) < 8 or image_data[0:8] != PNG_SIGNATURE:
            return False

        try:
            with BytesIO(image_data) as buffer:
                with Image.open(buffer) as img:
                    return img.format == "PNG"
        except Exception:
            return False

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, quality: int
    ) -> None:
        """Save image as PNG."""
        try:
            image = self.prepare_image(image)
            image.save(output_buffer, format="PNG", **self.get_quality_param(quality))
            output_buffer.seek(0)

        except Exception as e:
            raise EncodeError(
                f"Failed to save image as PNG: {str(e)}",
                details={"format": "PNG", "error": str(e)},
            )

    def get_quality_param(self, quality: int) -> Dict[str, Any]:
        """PNG is lossless; quality has no effect."""
        return {}

    def _supports_transparency(self) -> bool:
        """PNG supports transparency."""
        return True

    def _supports_mode(self, mode: str) -> bool:
        """Check if PNG supports the given color mode."""
        return mode in ("RGB", "RGBA", "L", "LA", "P", "1")
