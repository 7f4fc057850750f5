"""Conversion session: loaded images, selection and run results."""

import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from imagebatch.config import settings
from imagebatch.core.batch.manager import BatchManager, ProgressCallback
from imagebatch.core.batch.models import BatchResult
from imagebatch.core.constants import ARCHIVE_FILENAME, DOCUMENT_FILENAME
from imagebatch.core.delivery import FileDelivery
from imagebatch.core.exceptions import ImageBatchError
from imagebatch.core.packaging.archive import ArchivePackager
from imagebatch.core.packaging.document import DocumentPackager
from imagebatch.models.conversion import (
    ConversionRequest,
    ConvertedImage,
    ImageKey,
    InputImage,
)
from imagebatch.utils.logging import LoggingContext, get_logger

logger = get_logger(__name__)


class OperationOutcome(BaseModel):
    """Result of a packaging operation, successful or not."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    filename: str
    data: Optional[bytes] = Field(None, repr=False)
    error: Optional[str] = None
    error_code: Optional[str] = None


class ConversionSession:
    """Owns the images a user has loaded and what is selected for the next run.

    The selection is always a subset of the loaded images. Each conversion
    works on a snapshot of the selection and replaces the previous results.
    """

    def __init__(
        self,
        request: Optional[ConversionRequest] = None,
        batch_manager: Optional[BatchManager] = None,
        archive_packager: Optional[ArchivePackager] = None,
        document_packager: Optional[DocumentPackager] = None,
        delivery: Optional[FileDelivery] = None,
        max_files: Optional[int] = None,
        accepted_mime_types: Optional[Iterable[str]] = None,
    ) -> None:
        self.request = request or ConversionRequest(
            format=settings.default_format, quality=settings.default_quality
        )
        self.batch_manager = batch_manager or BatchManager(
            concurrency=settings.batch_concurrency
        )
        self.archive_packager = archive_packager or ArchivePackager()
        self.document_packager = document_packager or DocumentPackager()
        self.delivery = delivery or FileDelivery()
        self.max_files = (
            settings.max_files_per_drop if max_files is None else max_files
        )
        self.accepted_mime_types = set(
            settings.accepted_mime_types
            if accepted_mime_types is None
            else accepted_mime_types
        )

        self._images: Dict[ImageKey, InputImage] = {}
        self._selected: Set[ImageKey] = set()
        self.results: List[ConvertedImage] = []
        self.last_batch: Optional[BatchResult] = None

    # -- loaded images -----------------------------------------------------

    @property
    def images(self) -> List[InputImage]:
        """Loaded images in the order they were added."""
        return list(self._images.values())

    @property
    def selected_keys(self) -> Set[ImageKey]:
        return set(self._selected)

    def add_files(self, files: Iterable[InputImage]) -> List[InputImage]:
        """Add one drop of files, auto-selecting the ones accepted.

        Files with a MIME type outside the allowlist are discarded, then the
        drop is capped at ``max_files``. Files already loaded are ignored.
        """
        dropped = list(files)
        valid = [f for f in dropped if f.mime_type in self.accepted_mime_types]
        limited = valid[: self.max_files]

        added: List[InputImage] = []
        for image in limited:
            if image.key in self._images:
                continue
            self._images[image.key] = image
            self._selected.add(image.key)
            added.append(image)

        if len(added) != len(dropped):
            logger.debug(
                "Discarded files from drop",
                dropped=len(dropped),
                accepted=len(added),
                max_files=self.max_files,
            )
        return added

    def add_paths(self, paths: Iterable[Path]) -> List[InputImage]:
        """Read files from disk and add them as one drop.

        The source files are protected from being overwritten on delivery.
        """
        paths = list(paths)
        self.delivery.protect(paths)
        return self.add_files(InputImage.from_path(p) for p in paths)

    def remove(self, key: ImageKey) -> None:
        """Remove an image; it also leaves the selection."""
        self._images.pop(key, None)
        self._selected.discard(key)

    def clear(self) -> None:
        """Remove all images, the selection and any results."""
        self._images.clear()
        self._selected.clear()
        self.results = []
        self.last_batch = None

    # -- selection -----------------------------------------------------------

    def select(self, key: ImageKey) -> None:
        if key in self._images:
            self._selected.add(key)

    def deselect(self, key: ImageKey) -> None:
        self._selected.discard(key)

    def toggle(self, key: ImageKey) -> bool:
        """Flip selection of ``key``; returns whether it is now selected."""
        if key in self._selected:
            self._selected.discard(key)
            return False
        self.select(key)
        return key in self._selected

    def select_all(self) -> None:
        self._selected = set(self._images)

    def clear_selection(self) -> None:
        self._selected.clear()

    def selected_images(self) -> List[InputImage]:
        """Snapshot of the selected images in load order."""
        return [img for key, img in self._images.items() if key in self._selected]

    # -- operations ----------------------------------------------------------

    async def convert(
        self,
        request: Optional[ConversionRequest] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BatchResult:
        """Convert the current selection, replacing previous results."""
        if request is not None:
            self.request = request

        snapshot = self.selected_images()
        self.results = []
        if not snapshot:
            self.last_batch = BatchResult()
            return self.last_batch

        with LoggingContext(run_id=str(uuid.uuid4())):
            batch = await self.batch_manager.convert_all(
                snapshot, self.request, progress_callback
            )

        self.results = list(batch.converted)
        self.last_batch = batch
        return batch

    async def build_archive(self) -> OperationOutcome:
        """Zip the current results."""
        if not self.results:
            return OperationOutcome(
                ok=False, filename=ARCHIVE_FILENAME, error="No converted images"
            )

        try:
            data = await self.archive_packager.pack(self.results)
        except ImageBatchError as e:
            logger.error(
                "Error creating zip file", error_code=e.error_code, error=e.message
            )
            return OperationOutcome(
                ok=False,
                filename=ARCHIVE_FILENAME,
                error=e.message,
                error_code=e.error_code,
            )
        return OperationOutcome(ok=True, filename=ARCHIVE_FILENAME, data=data)

    async def build_document(
        self, progress_callback: Optional[ProgressCallback] = None
    ) -> OperationOutcome:
        """Merge the selected original images into a PDF."""
        snapshot = self.selected_images()
        if not snapshot:
            return OperationOutcome(
                ok=False, filename=DOCUMENT_FILENAME, error="No images selected"
            )

        try:
            with LoggingContext(run_id=str(uuid.uuid4())):
                data = await self.document_packager.pack_as_document(
                    snapshot, progress_callback
                )
        except ImageBatchError as e:
            logger.error(
                "Error creating PDF", error_code=e.error_code, error=e.message
            )
            return OperationOutcome(
                ok=False,
                filename=DOCUMENT_FILENAME,
                error=e.message,
                error_code=e.error_code,
            )
        return OperationOutcome(ok=True, filename=DOCUMENT_FILENAME, data=data)

    # -- delivery ------------------------------------------------------------

    def deliver_image(self, image: ConvertedImage) -> Path:
        return self.delivery.deliver(image.data, image.filename)

    def deliver_all(self) -> List[Path]:
        """Save every converted image individually."""
        return [self.deliver_image(image) for image in self.results]

    def deliver_outcome(self, outcome: OperationOutcome) -> Optional[Path]:
        """Save a successful packaging outcome; failed outcomes produce nothing."""
        if not outcome.ok or outcome.data is None:
            return None
        return self.delivery.deliver(outcome.data, outcome.filename)
