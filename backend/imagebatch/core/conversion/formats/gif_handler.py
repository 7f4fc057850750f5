"""GIF format handler."""

from io import BytesIO
from typing import Any, BinaryIO, Dict

import structlog
from PIL import Image

from imagebatch.core.conversion.formats.base import BaseFormatHandler
from imagebatch.core.exceptions import DecodeError, EncodeError

logger = structlog.get_logger()


class GifHandler(BaseFormatHandler):
    """Handler for GIF format."""

    def __init__(self) -> None:
        """Initialize GIF handler."""
        super().__init__()
        self.supported_formats = ["gif"]
        self.format_name = "GIF"

    def validate_image(self, image_data: bytes) -> bool:
        """Validate that the image data is valid GIF."""
        if len(image_data) < 6 or image_data[0:6] not in (b"GIF87a", b"GIF89a"):
            return False

        try:
            with BytesIO(image_data) as buffer:
                with Image.open(buffer) as img:
                    return img.format == "GIF"
        except Exception:
            return False

    def load_image(self, image_data: bytes) -> Image.Image:
        """Load GIF image from bytes (first frame only)."""
        try:
            with BytesIO(image_data) as buffer:
                img = Image.open(buffer)

                if getattr(img, "is_animated", False):
                    logger.debug(
                        "Animated GIF detected, extracting first frame",
                        n_frames=getattr(img, "n_frames", 1),
                    )
                    img.seek(0)

                img.load()

                # Palette GIFs are expanded so every encoder can take them
                if img.mode == "P" and "transparency" in img.info:
                    img = img.convert("RGBA")
                elif img.mode not in ("RGB", "RGBA"):
                    img = img.convert("RGB")

                # Detach the frame from the source buffer
                return img.copy()

        except Exception as e:
            raise DecodeError(
                f"Failed to load GIF image: {str(e)}",
                details={"format": "GIF", "error": str(e)},
            )

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, quality: int
    ) -> None:
        """Save image as GIF."""
        try:
            save_params: Dict[str, Any] = {}

            if image.mode in ("RGBA", "LA") or (
                image.mode == "P" and "transparency" in image.info
            ):
                rgba = image.convert("RGBA")
                alpha = rgba.split()[3]

                # 255 colours, leaving index 255 for transparency
                palette_img = rgba.convert("RGB").quantize(colors=255)
                transparent = Image.eval(alpha, lambda a: 255 if a < 128 else 0)
                palette_img.paste(255, mask=transparent)
                save_params["transparency"] = 255
                image = palette_img
            elif image.mode not in ("P", "L"):
                image = image.convert("P", palette=Image.Palette.ADAPTIVE, colors=256)

            image.save(output_buffer, format="GIF", **save_params)
            output_buffer.seek(0)

        except Exception as e:
            raise EncodeError(
                f"Failed to save image as GIF: {str(e)}",
                details={"format": "GIF", "error": str(e)},
            )

    def get_quality_param(self, quality: int) -> Dict[str, Any]:
        """GIF has no quality setting; output is palette-limited instead."""
        return {}

    def _supports_transparency(self) -> bool:
        """GIF supports single-color transparency."""
        return True

    def _supports_mode(self, mode: str) -> bool:
        """Check if GIF supports the given color mode."""
        return mode in ("P", "L", "RGB", "RGBA")
