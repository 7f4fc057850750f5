"""Image decode, encode and single-image conversion."""

from .codec import FormatEncoder, detect_format, format_encoder
from .converter import ImageConverter, derive_output_filename

__all__ = [
    "FormatEncoder",
    "ImageConverter",
    "derive_output_filename",
    "detect_format",
    "format_encoder",
]
