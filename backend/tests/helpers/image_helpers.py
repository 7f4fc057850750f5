"""Helpers for generating and inspecting test images."""

import io
import re
import zipfile
from typing import Dict, Tuple

from PIL import Image


def encode_test_image(
    fmt: str = "PNG",
    size: Tuple[int, int] = (64, 48),
    mode: str = "RGB",
    color=(200, 40, 40),
) -> bytes:
    """Render a solid image with a dark stripe on the left and encode it."""
    if mode == "RGBA" and len(color) == 3:
        color = color + (128,)
    elif mode == "L":
        color = color[0]
    img = Image.new(mode, size, color)
    if size[0] > 4 and size[1] > 4:
        img.paste(Image.new(mode, (size[0] // 4, size[1])), (0, 0))
    if fmt == "JPEG" and img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def decoded_size(data: bytes) -> Tuple[int, int]:
    """Pixel dimensions of encoded image bytes."""
    with Image.open(io.BytesIO(data)) as img:
        return img.size


def decoded_format(data: bytes) -> str:
    """Pillow format name of encoded image bytes."""
    with Image.open(io.BytesIO(data)) as img:
        return img.format


def zip_entries(data: bytes) -> Dict[str, int]:
    """Map of entry name to uncompressed size."""
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return {info.filename: info.file_size for info in archive.infolist()}


def pdf_page_count(data: bytes) -> int:
    """Count page objects in an uncompressed-object PDF."""
    return len(re.findall(rb"/Type\s*/Page\b", data))
