from .conversion import (
    ConversionRequest,
    ConvertedImage,
    ImageKey,
    InputImage,
    OutputFormat,
    guess_mime_type,
)

__all__ = [
    "ConversionRequest",
    "ConvertedImage",
    "ImageKey",
    "InputImage",
    "OutputFormat",
    "guess_mime_type",
]
