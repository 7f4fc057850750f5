"""Raster decode and format encode on top of Pillow."""

from io import BytesIO
from typing import Dict, Optional, Set, Type, Union

import structlog
from PIL import Image

from imagebatch.core.constants import (
    DEFAULT_ENCODE_FORMAT,
    FORMAT_ALIASES,
    FORMAT_MIME_TYPES,
    PIL_FORMAT_NAMES,
)
from imagebatch.core.conversion.formats.base import BaseFormatHandler
from imagebatch.core.exceptions import DecodeError, EncodeError
from imagebatch.models.conversion import OutputFormat

logger = structlog.get_logger()


class FormatEncoder:
    """Encodes decoded rasters into a target format.

    Handlers are registered per canonical format name; aliases such as
    ``jpeg`` resolve to the canonical ``jpg``. A format with no registered
    handler is encoded as JPEG.
    """

    def __init__(self) -> None:
        self.format_handlers: Dict[str, BaseFormatHandler] = {}
        self.available_formats: Set[str] = set()
        self._initialize_handlers()

    def _initialize_handlers(self) -> None:
        from imagebatch.core.conversion.formats.gif_handler import GifHandler
        from imagebatch.core.conversion.formats.jpeg_handler import JPEGHandler
        from imagebatch.core.conversion.formats.png_handler import PNGHandler
        from imagebatch.core.conversion.formats.webp_handler import WebPHandler

        self.register_handler("jpg", JPEGHandler)  # Also registers jpeg via alias
        self.register_handler("png", PNGHandler)
        self.register_handler("webp", WebPHandler)
        self.register_handler("gif", GifHandler)

    @staticmethod
    def _resolve_format_name(format_name: str) -> str:
        format_lower = format_name.lower()
        return FORMAT_ALIASES.get(format_lower, format_lower)

    def register_handler(
        self, format_name: str, handler_class: Type[BaseFormatHandler]
    ) -> None:
        """Register a format handler under its canonical name and aliases."""
        canonical_name = self._resolve_format_name(format_name)
        handler = handler_class()

        self.format_handlers[canonical_name] = handler
        self.available_formats.add(canonical_name)

        # Handlers list the names they read and write under
        for alias in handler.supported_formats:
            self.format_handlers[alias.lower()] = handler

    def get_handler(self, format_name: Union[str, OutputFormat]) -> BaseFormatHandler:
        """Return the handler for a format, falling back to JPEG."""
        name = self._resolve_format_name(_format_value(format_name))
        handler = self.format_handlers.get(name)
        if handler is None:
            logger.warning(
                "No encoder for format, falling back to JPEG",
                requested_format=name,
            )
            handler = self.format_handlers[DEFAULT_ENCODE_FORMAT]
        return handler

    def mime_type_for(self, format_name: Union[str, OutputFormat]) -> str:
        """MIME type an encode of ``format_name`` produces."""
        name = self._resolve_format_name(_format_value(format_name))
        return FORMAT_MIME_TYPES.get(name, FORMAT_MIME_TYPES[DEFAULT_ENCODE_FORMAT])

    def encode(
        self,
        raster: Image.Image,
        format_name: Union[str, OutputFormat],
        quality: int,
    ) -> bytes:
        """Encode ``raster`` in ``format_name`` at ``quality`` percent.

        Raises:
            EncodeError: If the raster is empty or the codec fails
        """
        if raster.width == 0 or raster.height == 0:
            raise EncodeError(
                "Cannot encode an image with zero width or height",
                details={"dimensions": (raster.width, raster.height)},
            )

        handler = self.get_handler(format_name)
        with BytesIO() as output_buffer:
            handler.save_image(raster, output_buffer, quality)
            data = output_buffer.getvalue()

        if not data:
            raise EncodeError(
                "Encoder produced no output",
                details={"format": handler.format_name, "quality": quality},
            )
        return data

    def decode(self, image_data: bytes) -> Image.Image:
        """Decode image bytes into a fully loaded raster.

        Raises:
            DecodeError: If the bytes are empty or not a readable image
        """
        if not image_data:
            raise DecodeError("Empty image data")

        detected = detect_format(image_data)
        handler: Optional[BaseFormatHandler] = (
            self.format_handlers.get(detected) if detected else None
        )
        if handler is not None:
            if not handler.validate_image(image_data):
                raise DecodeError(
                    f"Invalid {handler.format_name} image data",
                    details={"format": handler.format_name},
                )
            return handler.load_image(image_data)

        # Formats Pillow can read but we do not encode (BMP, TIFF, ...)
        try:
            with BytesIO(image_data) as buffer:
                img = Image.open(buffer)
                img.load()
                return img
        except Exception as e:
            raise DecodeError(
                f"Failed to load image: {str(e)}", details={"error": str(e)}
            )


def detect_format(image_data: bytes) -> Optional[str]:
    """Identify the canonical format of ``image_data`` without decoding pixels."""
    try:
        with BytesIO(image_data) as buffer:
            with Image.open(buffer) as img:
                pil_format = img.format or ""
    except Exception:
        return None
    return PIL_FORMAT_NAMES.get(pil_format, pil_format.lower() or None)


def _format_value(format_name: Union[str, OutputFormat]) -> str:
    if isinstance(format_name, OutputFormat):
        return format_name.value
    return str(format_name)


format_encoder = FormatEncoder()
