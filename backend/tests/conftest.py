"""Pytest fixtures for image batch converter tests."""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional, Tuple

import pytest

# Keep test runs independent from any local environment
os.environ["IMAGE_BATCH_LOG_LEVEL"] = "WARNING"
os.environ["IMAGE_BATCH_BATCH_CONCURRENCY"] = "1"
os.environ["IMAGE_BATCH_LOGGING_ENABLED"] = "false"

from helpers.image_helpers import encode_test_image  # noqa: E402
from imagebatch.core.batch.manager import BatchManager  # noqa: E402
from imagebatch.core.conversion.codec import FormatEncoder  # noqa: E402
from imagebatch.core.conversion.converter import ImageConverter  # noqa: E402
from imagebatch.core.delivery import FileDelivery  # noqa: E402
from imagebatch.models.conversion import ConversionRequest, InputImage  # noqa: E402


@pytest.fixture
def make_image_bytes() -> Callable[..., bytes]:
    """Factory for encoded test images."""
    return encode_test_image


@pytest.fixture
def make_input_image() -> Callable[..., InputImage]:
    """Factory for InputImage objects with generated content."""

    def _make(
        name: str = "photo.png",
        fmt: str = "PNG",
        size: Tuple[int, int] = (64, 48),
        mode: str = "RGB",
        last_modified: float = 1_700_000_000.0,
        data: Optional[bytes] = None,
    ) -> InputImage:
        payload = data if data is not None else encode_test_image(fmt, size, mode)
        return InputImage(name=name, data=payload, last_modified=last_modified)

    return _make


@pytest.fixture
def corrupt_image() -> InputImage:
    """A file that claims to be a PNG but holds no image."""
    return InputImage(name="broken.png", data=b"\x89PNG\r\n\x1a\nnot really a png")


@pytest.fixture
def encoder() -> FormatEncoder:
    return FormatEncoder()


@pytest.fixture
def converter(encoder) -> ImageConverter:
    return ImageConverter(encoder=encoder)


@pytest.fixture
def batch_manager(converter) -> BatchManager:
    return BatchManager(converter=converter)


@pytest.fixture
def webp_request() -> ConversionRequest:
    return ConversionRequest(format="webp", quality=75)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def delivery(temp_dir) -> FileDelivery:
    return FileDelivery(temp_dir)
