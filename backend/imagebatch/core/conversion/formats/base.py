"""Base format handler interface."""

from abc import ABC, abstractmethod
from io import BytesIO
from typing import Any, BinaryIO, Dict

from PIL import Image

from imagebatch.core.exceptions import DecodeError


class BaseFormatHandler(ABC):
    """Abstract base class for format handlers."""

    def __init__(self) -> None:
        """Initialize format handler."""
        self.supported_formats: list[str] = []
        self.format_name: str = ""

    @abstractmethod
    def validate_image(self, image_data: bytes) -> bool:
        """Validate that the image data is valid for this format."""

    @abstractmethod
    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, quality: int
    ) -> None:
        """Save image to buffer at the given quality percent."""

    def load_image(self, image_data: bytes) -> Image.Image:
        """Load image from bytes."""
        try:
            with BytesIO(image_data) as buffer:
                img = Image.open(buffer)
                # Load image data to ensure it's fully read
                img.load()
                return img
        except Exception as e:
            raise DecodeError(
                f"Failed to load {self.format_name} image: {str(e)}",
                details={"format": self.format_name, "error": str(e)},
            )

    def get_quality_param(self, quality: int) -> Dict[str, Any]:
        """Map a quality percent onto the encoder's native scale."""
        factor = quality / 100
        native = int(round(factor * 100))
        return {"quality": max(1, min(100, native))}

    def prepare_image(self, image: Image.Image) -> Image.Image:
        """Prepare image for conversion (e.g., convert color mode if needed)."""
        # Flatten alpha onto white for formats that don't support transparency
        if _has_alpha(image) and not self._supports_transparency():
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            return background

        if not self._supports_mode(image.mode):
            if _has_alpha(image):
                return image.convert("RGBA")
            return image.convert("RGB")

        return image

    def _supports_transparency(self) -> bool:
        """Check if format supports transparency."""
        return False

    def _supports_mode(self, mode: str) -> bool:
        """Check if format supports the given color mode."""
        return mode in ("RGB", "RGBA")


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )
