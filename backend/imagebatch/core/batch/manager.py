"""Batch processing manager for converting multiple images."""

import asyncio
import inspect
import multiprocessing
import time
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple, Union

from imagebatch.core.batch.models import (
    BatchFailure,
    BatchItemStatus,
    BatchResult,
    ProgressState,
)
from imagebatch.core.constants import MAX_BATCH_WORKERS
from imagebatch.core.conversion.converter import ImageConverter
from imagebatch.core.exceptions import ImageBatchError
from imagebatch.models.conversion import ConversionRequest, ConvertedImage, InputImage
from imagebatch.utils.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[ProgressState], Union[None, Awaitable[None]]]


class BatchManager:
    """Converts a sequence of images, skipping the ones that fail.

    Items are converted one at a time in input order unless ``concurrency``
    is raised, in which case up to that many conversions run together and
    progress reports the cumulative number of finished items.
    """

    def __init__(
        self,
        converter: Optional[ImageConverter] = None,
        concurrency: int = 1,
    ) -> None:
        self.converter = converter or ImageConverter()
        self.concurrency = self._clamp_concurrency(concurrency)
        self.logger = get_logger(__name__)

    @staticmethod
    def _clamp_concurrency(concurrency: int) -> int:
        """Limit concurrency to the CPU count and MAX_BATCH_WORKERS."""
        cpu_count = multiprocessing.cpu_count()
        return max(1, min(concurrency, cpu_count, MAX_BATCH_WORKERS))

    async def convert_all(
        self,
        images: Iterable[InputImage],
        request: ConversionRequest,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BatchResult:
        """Convert every image with the same request.

        Args:
            images: Images to convert; a snapshot is taken before starting
            request: Target format and quality for the whole run
            progress_callback: Called with a ProgressState after each item

        Returns:
            BatchResult with converted images in input order and the failures
        """
        snapshot = list(images)
        if not snapshot:
            return BatchResult()

        start_time = time.perf_counter()
        self.logger.info(
            "Starting batch conversion",
            total_files=len(snapshot),
            output_format=request.format.value,
            quality=request.quality,
            concurrency=self.concurrency,
        )

        if self.concurrency == 1:
            outcomes = await self._run_sequential(snapshot, request, progress_callback)
        else:
            outcomes = await self._run_concurrent(snapshot, request, progress_callback)

        result = BatchResult(total_files=len(snapshot))
        for index in sorted(outcomes):
            outcome = outcomes[index]
            if isinstance(outcome, ConvertedImage):
                result.converted.append(outcome)
            else:
                result.failures.append(outcome)
        result.processing_time = time.perf_counter() - start_time

        self.logger.info(
            "Batch conversion finished",
            total_files=result.total_files,
            succeeded=result.succeeded,
            failed=result.failed,
            processing_time=round(result.processing_time, 3),
        )
        return result

    async def _run_sequential(
        self,
        images: List[InputImage],
        request: ConversionRequest,
        progress_callback: Optional[ProgressCallback],
    ) -> Dict[int, Union[ConvertedImage, BatchFailure]]:
        outcomes: Dict[int, Union[ConvertedImage, BatchFailure]] = {}
        total = len(images)
        for index, image in enumerate(images):
            outcomes[index] = await self._convert_one(index, image, request)
            await self._send_progress(
                progress_callback, index + 1, total, image, outcomes[index]
            )
        return outcomes

    async def _run_concurrent(
        self,
        images: List[InputImage],
        request: ConversionRequest,
        progress_callback: Optional[ProgressCallback],
    ) -> Dict[int, Union[ConvertedImage, BatchFailure]]:
        semaphore = asyncio.Semaphore(self.concurrency)
        total = len(images)

        async def _worker(
            index: int, image: InputImage
        ) -> Tuple[int, Union[ConvertedImage, BatchFailure]]:
            async with semaphore:
                return index, await self._convert_one(index, image, request)

        outcomes: Dict[int, Union[ConvertedImage, BatchFailure]] = {}
        tasks = [asyncio.create_task(_worker(i, img)) for i, img in enumerate(images)]
        for completed in asyncio.as_completed(tasks):
            index, outcome = await completed
            outcomes[index] = outcome
            await self._send_progress(
                progress_callback, len(outcomes), total, images[index], outcome
            )
        return outcomes

    async def _convert_one(
        self, index: int, image: InputImage, request: ConversionRequest
    ) -> Union[ConvertedImage, BatchFailure]:
        """Convert one item, turning any failure into a BatchFailure."""
        try:
            return await self.converter.convert(image, request)
        except ImageBatchError as e:
            self.logger.warning(
                "Error converting image, skipping",
                file_index=index,
                filename=image.name,
                error_code=e.error_code,
                error=e.message,
            )
            return BatchFailure(
                file_index=index,
                filename=image.name,
                error_code=e.error_code,
                error_message=e.message,
            )
        except Exception as e:
            # Pillow raises plain OSError/ValueError for some corrupt inputs
            self.logger.warning(
                "Unexpected error converting image, skipping",
                file_index=index,
                filename=image.name,
                error=str(e),
                exc_info=True,
            )
            return BatchFailure(
                file_index=index, filename=image.name, error_message=str(e)
            )

    async def _send_progress(
        self,
        callback: Optional[ProgressCallback],
        current: int,
        total: int,
        image: InputImage,
        outcome: Union[ConvertedImage, BatchFailure],
    ) -> None:
        """Send progress update via callback if one was given."""
        if callback is None:
            return

        progress = ProgressState(
            current=current,
            total=total,
            filename=image.name,
            status=(
                BatchItemStatus.COMPLETED
                if isinstance(outcome, ConvertedImage)
                else BatchItemStatus.FAILED
            ),
        )
        try:
            maybe_awaitable = callback(progress)
            if inspect.isawaitable(maybe_awaitable):
                await maybe_awaitable
        except Exception as e:
            self.logger.error("Error in progress callback", error=str(e))
