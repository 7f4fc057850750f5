"""PDF packaging of original images, one image per page."""

import asyncio
import inspect
import io
from typing import Awaitable, Callable, Iterable, NamedTuple, Optional, Union

from reportlab.lib.pagesizes import A4, portrait
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from imagebatch.config import settings
from imagebatch.core.batch.models import BatchItemStatus, ProgressState
from imagebatch.core.conversion.codec import FormatEncoder, format_encoder
from imagebatch.core.exceptions import PackagingError
from imagebatch.models.conversion import InputImage, OutputFormat
from imagebatch.utils.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[ProgressState], Union[None, Awaitable[None]]]


class PagePlacement(NamedTuple):
    """Where a scaled image sits on its page, in page units."""

    scale: float
    x: float
    y: float
    width: float
    height: float


def compute_placement(
    image_width: float, image_height: float, page_width: float, page_height: float
) -> PagePlacement:
    """Fit an image inside the page, preserving aspect ratio, and centre it."""
    if image_width <= 0 or image_height <= 0:
        raise ValueError("Image dimensions must be positive")

    scale = min(page_width / image_width, page_height / image_height)
    width = image_width * scale
    height = image_height * scale
    return PagePlacement(
        scale=scale,
        x=(page_width - width) / 2,
        y=(page_height - height) / 2,
        width=width,
        height=height,
    )


class DocumentPackager:
    """Lays out original images into a portrait A4 PDF.

    Every image is re-encoded as JPEG at a fixed quality, independent of the
    format and quality chosen for conversion. A page is started for each
    image after the first. One unreadable image fails the whole document.
    """

    def __init__(
        self,
        encoder: Optional[FormatEncoder] = None,
        image_quality: Optional[int] = None,
    ) -> None:
        self.encoder = encoder or format_encoder
        self.image_quality = image_quality or settings.document_image_quality
        self.pagesize = portrait(A4)

    @property
    def page_size_mm(self) -> tuple[float, float]:
        return self.pagesize[0] / mm, self.pagesize[1] / mm

    async def pack_as_document(
        self,
        original_images: Iterable[InputImage],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> bytes:
        """Build the PDF from ``original_images`` in order.

        Raises:
            DecodeError: If any image cannot be decoded
            EncodeError: If any image cannot be re-encoded for embedding
            PackagingError: If the document itself cannot be generated
        """
        images = list(original_images)
        if not images:
            raise PackagingError(
                "Cannot create a document without images",
                details={"package_type": "pdf", "entry_count": 0},
            )

        page_width, page_height = self.page_size_mm
        output = io.BytesIO()
        pdf = canvas.Canvas(output, pagesize=self.pagesize)
        pdf.setTitle("Converted images")
        pdf.setCreator(settings.app_name)

        for index, image in enumerate(images):
            raster = await asyncio.to_thread(self.encoder.decode, image.data)
            try:
                width, height = raster.size
                placement = compute_placement(width, height, page_width, page_height)
                jpeg_data = await asyncio.to_thread(
                    self.encoder.encode, raster, OutputFormat.JPG, self.image_quality
                )
            finally:
                raster.close()

            try:
                pdf.drawImage(
                    ImageReader(io.BytesIO(jpeg_data)),
                    placement.x * mm,
                    placement.y * mm,
                    width=placement.width * mm,
                    height=placement.height * mm,
                )
                pdf.showPage()
            except Exception as e:
                raise PackagingError(
                    f"Failed to add page for image: {str(e)}",
                    details={"package_type": "pdf", "entry_count": index, "error": str(e)},
                )

            logger.debug(
                "Added document page",
                page=index + 1,
                image_size=(width, height),
                scale=round(placement.scale, 6),
            )
            await _notify(progress_callback, index + 1, len(images), image.name)

        try:
            await asyncio.to_thread(pdf.save)
        except Exception as e:
            raise PackagingError(
                f"Failed to generate PDF document: {str(e)}",
                details={"package_type": "pdf", "entry_count": len(images), "error": str(e)},
            )

        data = output.getvalue()
        logger.info("Created PDF document", page_count=len(images), size=len(data))
        return data


async def _notify(
    callback: Optional[ProgressCallback], current: int, total: int, filename: str
) -> None:
    if callback is None:
        return
    progress = ProgressState(
        current=current,
        total=total,
        filename=filename,
        status=BatchItemStatus.COMPLETED,
    )
    try:
        maybe_awaitable = callback(progress)
        if inspect.isawaitable(maybe_awaitable):
            await maybe_awaitable
    except Exception as e:
        logger.error("Error in progress callback", error=str(e))
