from typing import List, Union

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from imagebatch.core.constants import (
    ACCEPTED_MIME_TYPES,
    DEFAULT_QUALITY,
    DOCUMENT_IMAGE_QUALITY,
    FORMAT_MIME_TYPES,
    MAX_BATCH_WORKERS,
    MAX_FILES_PER_DROP,
    MAX_QUALITY,
    MIN_QUALITY,
    QUALITY_STEP,
)
from imagebatch.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    # Application
    app_name: str = Field(default="Image Batch Converter", description="Application name")
    log_level: str = Field(default="WARNING", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    # Logging Configuration
    logging_enabled: bool = Field(
        default=False, description="Enable file logging in addition to stderr"
    )
    log_dir: str = Field(default="./logs", description="Directory for log files")
    max_log_size_mb: int = Field(
        default=10, description="Maximum size of each log file in MB"
    )
    log_backup_count: int = Field(
        default=3, description="Number of backup log files to keep"
    )

    # Input
    max_files_per_drop: int = Field(
        default=MAX_FILES_PER_DROP, description="Maximum files accepted per drop"
    )
    accepted_mime_types: Union[str, List[str]] = Field(
        default=",".join(ACCEPTED_MIME_TYPES),
        description="Accepted input MIME types",
    )

    # Conversion defaults
    default_format: str = Field(default="jpg", description="Default output format")
    default_quality: int = Field(
        default=DEFAULT_QUALITY, description="Default output quality (10-100)"
    )
    document_image_quality: int = Field(
        default=DOCUMENT_IMAGE_QUALITY,
        description="JPEG quality of images embedded in PDF documents",
    )
    batch_concurrency: int = Field(
        default=1, description="Concurrent conversions per batch (1 = sequential)"
    )

    # Delivery
    output_dir: str = Field(default=".", description="Directory for delivered files")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @field_validator("max_files_per_drop")
    @classmethod
    def validate_max_files(cls, v):
        if v < 1:
            raise ValueError("max_files_per_drop must be at least 1")
        return v

    @field_validator("default_format")
    @classmethod
    def validate_default_format(cls, v):
        v = v.lower()
        if v == "jpeg":
            v = "jpg"
        if v not in FORMAT_MIME_TYPES:
            raise ValueError(f"default_format must be one of {list(FORMAT_MIME_TYPES)}")
        return v

    @field_validator("default_quality", "document_image_quality")
    @classmethod
    def validate_quality(cls, v):
        if not MIN_QUALITY <= v <= MAX_QUALITY or v % QUALITY_STEP:
            raise ValueError(
                f"quality must be between {MIN_QUALITY} and {MAX_QUALITY} "
                f"in steps of {QUALITY_STEP}"
            )
        return v

    @field_validator("batch_concurrency")
    @classmethod
    def validate_concurrency(cls, v):
        if not 1 <= v <= MAX_BATCH_WORKERS:
            raise ValueError(
                f"batch_concurrency must be between 1 and {MAX_BATCH_WORKERS}"
            )
        return v

    @field_validator("accepted_mime_types", mode="before")
    @classmethod
    def parse_comma_separated_list(cls, v):
        """Parse comma-separated string into list."""
        if isinstance(v, str):
            if not v:
                return []
            return [item.strip() for item in v.split(",") if item.strip()]
        elif isinstance(v, (list, tuple)):
            return list(v)
        else:
            return cls.parse_comma_separated_list(str(v))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="IMAGE_BATCH_",
        env_parse_none_str=None,
    )

    def __init__(self, **values):
        super().__init__(**values)
        if isinstance(self.accepted_mime_types, str):
            self.accepted_mime_types = self.parse_comma_separated_list(
                self.accepted_mime_types
            )


def load_settings(**overrides) -> Settings:
    """Build settings from the environment and ``overrides``.

    Raises:
        ConfigurationError: If any value fails validation
    """
    try:
        return Settings(**overrides)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field_name = str(first["loc"][0]) if first.get("loc") else "settings"
        raise ConfigurationError(
            f"Invalid setting {field_name}: {first['msg']}",
            details={
                "field_name": field_name,
                "constraints": first["msg"],
            },
        )


settings = load_settings()
