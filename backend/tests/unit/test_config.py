"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from imagebatch.config import Settings, load_settings
from imagebatch.core.exceptions import ConfigurationError


class TestSettings:
    """Test Settings defaults, env overrides and validation."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("IMAGE_BATCH_LOG_LEVEL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.log_level == "WARNING"
        assert settings.max_files_per_drop == 10
        assert settings.default_format == "jpg"
        assert settings.default_quality == 80
        assert settings.document_image_quality == 80
        assert settings.accepted_mime_types == [
            "image/jpeg",
            "image/png",
            "image/webp",
            "image/gif",
        ]

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("IMAGE_BATCH_MAX_FILES_PER_DROP", "25")
        monkeypatch.setenv("IMAGE_BATCH_DEFAULT_FORMAT", "JPEG")
        monkeypatch.setenv("IMAGE_BATCH_ACCEPTED_MIME_TYPES", "image/png, image/gif")

        settings = Settings(_env_file=None)

        assert settings.max_files_per_drop == 25
        assert settings.default_format == "jpg"
        assert settings.accepted_mime_types == ["image/png", "image/gif"]

    def test_log_level_is_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("log_level", "LOUD"),
            ("max_files_per_drop", 0),
            ("default_format", "bmp"),
            ("default_quality", 12),
            ("default_quality", 5),
            ("document_image_quality", 105),
            ("batch_concurrency", 0),
        ],
    )
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})


class TestLoadSettings:
    """Test settings loading errors."""

    def test_invalid_env_raises_configuration_error(self, monkeypatch):
        monkeypatch.setenv("IMAGE_BATCH_DEFAULT_QUALITY", "12")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(_env_file=None)

        assert exc_info.value.error_code == "IMG002"
        assert exc_info.value.details["field_name"] == "default_quality"

    def test_overrides_applied(self):
        settings = load_settings(_env_file=None, batch_concurrency=2)

        assert settings.batch_concurrency == 2
