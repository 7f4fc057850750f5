"""Data models for image conversion."""

import mimetypes
import os
from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from imagebatch.core.constants import (
    DEFAULT_QUALITY,
    EXTENSION_MIME_TYPES,
    FORMAT_ALIASES,
    FORMAT_MIME_TYPES,
    LOSSLESS_FORMATS,
    MAX_QUALITY,
    MIN_QUALITY,
    QUALITY_STEP,
)
from imagebatch.core.exceptions import ValidationError


class OutputFormat(str, Enum):
    """Supported output image formats."""

    JPG = "jpg"
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"

    @classmethod
    def parse(cls, value: Union[str, "OutputFormat"]) -> "OutputFormat":
        """Resolve a format name or alias (``jpeg`` -> ``jpg``)."""
        if isinstance(value, cls):
            return value
        name = str(value).lower().lstrip(".")
        return cls(FORMAT_ALIASES.get(name, name))

    @property
    def extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        return FORMAT_MIME_TYPES[self.value]

    @property
    def is_lossless(self) -> bool:
        return self.value in LOSSLESS_FORMATS


class ImageKey(NamedTuple):
    """Identity of an input file within one session."""

    name: str
    size: int
    last_modified: float


def guess_mime_type(filename: str) -> Optional[str]:
    """Guess a MIME type from the file extension."""
    ext = os.path.splitext(filename)[1].lower()
    if ext in EXTENSION_MIME_TYPES:
        return EXTENSION_MIME_TYPES[ext]
    return mimetypes.guess_type(filename)[0]


class InputImage(BaseModel):
    """A fully buffered input file."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Original file name")
    data: bytes = Field(..., repr=False, description="Raw file bytes")
    size: int = Field(..., ge=0, description="Size in bytes")
    last_modified: float = Field(
        default=0.0, description="Last-modified timestamp (seconds since epoch)"
    )
    mime_type: Optional[str] = Field(None, description="Declared MIME type")

    @model_validator(mode="before")
    @classmethod
    def fill_derived_fields(cls, values: Any) -> Any:
        if isinstance(values, dict):
            values = dict(values)
            if values.get("size") is None and values.get("data") is not None:
                values["size"] = len(values["data"])
            if not values.get("mime_type") and values.get("name"):
                values["mime_type"] = guess_mime_type(values["name"])
        return values

    @field_validator("name")
    @classmethod
    def strip_directories(cls, v: str) -> str:
        """Keep only the base name; inputs are identified by file name."""
        return os.path.basename(v.replace("\\", "/")) or v

    @property
    def key(self) -> ImageKey:
        return ImageKey(self.name, self.size, self.last_modified)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "InputImage":
        """Load a file from disk into memory."""
        path = Path(path)
        stat = path.stat()
        return cls(
            name=path.name,
            data=path.read_bytes(),
            size=stat.st_size,
            last_modified=stat.st_mtime,
        )


class ConversionRequest(BaseModel):
    """Target format and quality applied to every image of one run."""

    model_config = ConfigDict(frozen=True)

    format: OutputFormat = Field(default=OutputFormat.JPG, description="Output format")
    quality: int = Field(
        default=DEFAULT_QUALITY,
        ge=MIN_QUALITY,
        le=MAX_QUALITY,
        description="Output quality (10-100, step 5)",
    )

    @field_validator("format", mode="before")
    @classmethod
    def resolve_format(cls, v: Any) -> OutputFormat:
        try:
            return OutputFormat.parse(v)
        except ValueError:
            raise ValueError(
                f"format must be one of {[f.value for f in OutputFormat]}"
            )

    @field_validator("quality")
    @classmethod
    def validate_quality_step(cls, v: int) -> int:
        if v % QUALITY_STEP:
            raise ValueError(f"Quality must be a multiple of {QUALITY_STEP}")
        return v

    @classmethod
    def build(cls, format: Any, quality: Any) -> "ConversionRequest":
        """Create a request from user input.

        Raises:
            ValidationError: If the format is unknown or the quality is out of
                range or off the step
        """
        try:
            return cls(format=format, quality=quality)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field_name = str(first["loc"][0]) if first.get("loc") else "request"
            raise ValidationError(
                f"Invalid {field_name}: {first['msg']}",
                details={
                    "field_name": field_name,
                    "field_value": str(first.get("input")),
                    "constraints": first["msg"],
                },
            )

    @property
    def quality_factor(self) -> float:
        """Quality on the codec's 0.0-1.0 scale."""
        return self.quality / 100


class ConvertedImage(BaseModel):
    """Result of converting a single input image."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., repr=False)
    filename: str
    format: OutputFormat
    original: InputImage = Field(..., repr=False)

    @property
    def mime_type(self) -> str:
        return self.format.mime_type

    @property
    def size(self) -> int:
        return len(self.data)
