"""Zip packaging of converted images."""

import asyncio
import io
import zipfile
from typing import Iterable, List

from imagebatch.core.exceptions import PackagingError
from imagebatch.models.conversion import ConvertedImage
from imagebatch.utils.logging import get_logger

logger = get_logger(__name__)


class ArchivePackager:
    """Bundles converted images into a single zip archive."""

    async def pack(self, converted_images: Iterable[ConvertedImage]) -> bytes:
        """Create a zip with one top-level entry per image.

        Raises:
            PackagingError: If the archive cannot be generated
        """
        images = list(converted_images)
        return await asyncio.to_thread(self._create_zip_archive, images)

    def _create_zip_archive(self, images: List[ConvertedImage]) -> bytes:
        zip_buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(zip_buffer, "w", zipfile.ZIP_DEFLATED) as zip_file:
                for image in images:
                    zip_file.writestr(image.filename, image.data)
        except Exception as e:
            raise PackagingError(
                f"Failed to create zip archive: {str(e)}",
                details={
                    "package_type": "zip",
                    "entry_count": len(images),
                    "error": str(e),
                },
            )

        data = zip_buffer.getvalue()
        logger.info("Created zip archive", entry_count=len(images), size=len(data))
        return data
