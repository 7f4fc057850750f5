"""JPEG format handler."""

from io import BytesIO
from typing import Any, BinaryIO, Dict

import structlog
from PIL import Image

from imagebatch.core.conversion.formats.base import BaseFormatHandler
from imagebatch.core.exceptions import DecodeError, EncodeError

logger = structlog.get_logger()


class JPEGHandler(BaseFormatHandler):
    """Handler for JPEG format."""

    def __init__(self):
        """Initialize JPEG handler."""
        super().__init__()
        self.supported_formats = ["jpg", "jpeg", "jpe", "jfif"]
        self.format_name = "JPEG"

    def validate_image(self, image_data: bytes) -> bool:
        """Validate that the image data is valid JPEG."""
        if len(image_data) < 3:
            return False

        # Check JPEG magic bytes
        if image_data[0:2] != b"\xff\xd8":
            return False

        try:
            with BytesIO(image_data) as buffer:
                with Image.open(buffer) as img:
                    return img.format in ("JPEG", "MPO")
        except Exception:
            return False

    def load_image(self, image_data: bytes) -> Image.Image:
        """Load JPEG image from bytes."""
        try:
            with BytesIO(image_data) as buffer:
                img = Image.open(buffer)
                img.load()

                # Some JPEGs are stored as CMYK
                if img.mode == "CMYK":
                    img = img.convert("RGB")

                return img

        except Exception as e:
            raise DecodeError(
                f"Failed to load JPEG image: {str(e)}",
                details={"format": "JPEG", "error": str(e)},
            )

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, quality: int
    ) -> None:
        """Save image as JPEG."""
        try:
            image = self.prepare_image(image)
            image.save(output_buffer, format="JPEG", **self.get_quality_param(quality))
            output_buffer.seek(0)

        except Exception as e:
            raise EncodeError(
                f"Failed to save image as JPEG: {str(e)}",
                details={"format": "JPEG", "quality": quality, "error": str(e)},
            )

    def get_quality_param(self, quality: int) -> Dict[str, Any]:
        """Get JPEG-specific quality parameters."""
        params = super().get_quality_param(quality)
        # Full chroma resolution at the top of the scale
        params["subsampling"] = 0 if quality > 90 else 2
        return params

    def _supports_transparency(self) -> bool:
        """JPEG doesn't support transparency."""
        return False

    def _supports_mode(self, mode: str) -> bool:
        """Check if JPEG supports the given color mode."""
        return mode in ("RGB", "L")
