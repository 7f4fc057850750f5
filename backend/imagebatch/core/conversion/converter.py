"""Single image conversion."""

import asyncio
import time
from typing import Optional, Tuple

import structlog
from PIL import Image

from imagebatch.core.conversion.codec import FormatEncoder, format_encoder
from imagebatch.models.conversion import (
    ConversionRequest,
    ConvertedImage,
    InputImage,
    OutputFormat,
)

logger = structlog.get_logger()


def derive_output_filename(name: str, output_format: OutputFormat) -> str:
    """Replace the final extension of ``name`` with the format's extension.

    ``archive.tar.gz`` becomes ``archive.tar.jpg``; a name without a dot is
    used whole as the stem.
    """
    dot = name.rfind(".")
    stem = name[:dot] if dot != -1 else name
    return f"{stem}.{OutputFormat.parse(output_format).extension}"


class ImageConverter:
    """Converts one input image to the requested format and quality."""

    def __init__(self, encoder: Optional[FormatEncoder] = None) -> None:
        self.encoder = encoder or format_encoder

    async def convert(
        self, input_image: InputImage, request: ConversionRequest
    ) -> ConvertedImage:
        """Decode, re-render and encode ``input_image``.

        Raises:
            DecodeError: If the input bytes are not a readable image
            EncodeError: If the codec cannot produce the requested output
        """
        start_time = time.perf_counter()

        raster = await asyncio.to_thread(self.encoder.decode, input_image.data)
        try:
            surface = self._render(raster)
            try:
                data = await asyncio.to_thread(
                    self.encoder.encode, surface, request.format, request.quality
                )
            finally:
                surface.close()
            dimensions: Tuple[int, int] = raster.size
        finally:
            raster.close()

        result = ConvertedImage(
            data=data,
            filename=derive_output_filename(input_image.name, request.format),
            format=request.format,
            original=input_image,
        )

        logger.debug(
            "Image converted",
            output_format=request.format.value,
            quality=request.quality,
            dimensions=dimensions,
            input_size=input_image.size,
            output_size=result.size,
            processing_time=round(time.perf_counter() - start_time, 4),
        )
        return result

    @staticmethod
    def _render(raster: Image.Image) -> Image.Image:
        """Draw the raster onto a blank surface of its natural size.

        The output keeps the input pixel dimensions and alpha channel; source
        metadata (EXIF, ICC profile) does not carry over.
        """
        has_alpha = raster.mode in ("RGBA", "LA", "PA") or (
            raster.mode == "P" and "transparency" in raster.info
        )
        mode = "RGBA" if has_alpha else "RGB"
        source = raster if raster.mode == mode else raster.convert(mode)
        surface = Image.new(mode, raster.size)
        surface.paste(source)
        if source is not raster:
            source.close()
        return surface
