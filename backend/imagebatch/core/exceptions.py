from typing import Dict, List, Optional, TypedDict, Union


class CodecDetails(TypedDict, total=False):
    """Type-safe details for decode/encode errors."""

    filename: str
    format: str
    dimensions: tuple[int, int]
    quality: int
    error: str


class ValidationDetails(TypedDict, total=False):
    """Type-safe details for validation errors."""

    field_name: str
    field_value: Union[str, int, float, bool]
    expected_values: List[Union[str, int]]
    constraints: str


class PackagingDetails(TypedDict, total=False):
    """Type-safe details for archive/document errors."""

    package_type: str
    entry_count: int
    error: str


class DeliveryDetails(TypedDict, total=False):
    """Type-safe details for delivery errors."""

    target: str
    size: int
    error: str


ErrorDetails = Union[
    CodecDetails,
    ValidationDetails,
    PackagingDetails,
    DeliveryDetails,
    Dict[str, Union[str, int, float, bool, List[str]]],  # Fallback for edge cases
]


class ImageBatchError(Exception):
    """Base exception for all image batch converter errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        details: Optional[ErrorDetails] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(ImageBatchError):
    """Raised when a request or input fails validation."""

    def __init__(self, message: str, details: Optional[ValidationDetails] = None):
        super().__init__(message=message, error_code="IMG001", details=details)


class ConfigurationError(ImageBatchError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, details: Optional[ValidationDetails] = None):
        super().__init__(message=message, error_code="IMG002", details=details)


class DecodeError(ImageBatchError):
    """Raised when image bytes are malformed or unreadable."""

    def __init__(
        self,
        message: str = "Failed to decode image",
        details: Optional[CodecDetails] = None,
    ):
        super().__init__(message=message, error_code="IMG101", details=details)


class EncodeError(ImageBatchError):
    """Raised when the codec cannot produce the requested output."""

    def __init__(
        self,
        message: str = "Failed to encode image",
        details: Optional[CodecDetails] = None,
    ):
        super().__init__(message=message, error_code="IMG102", details=details)


class PackagingError(ImageBatchError):
    """Raised when archive or document generation fails."""

    def __init__(self, message: str, details: Optional[PackagingDetails] = None):
        super().__init__(message=message, error_code="IMG201", details=details)


class DeliveryError(ImageBatchError):
    """Raised when a produced blob cannot be saved."""

    def __init__(self, message: str, details: Optional[DeliveryDetails] = None):
        super().__init__(message=message, error_code="IMG301", details=details)
