"""Unit tests for the format encoder."""

from io import BytesIO
from unittest.mock import MagicMock

import pytest
from PIL import Image

from helpers.image_helpers import decoded_format, encode_test_image
from imagebatch.core.conversion.codec import FormatEncoder, detect_format
from imagebatch.core.conversion.formats.jpeg_handler import JPEGHandler
from imagebatch.core.exceptions import DecodeError, EncodeError
from imagebatch.models.conversion import OutputFormat


class TestFormatEncoder:
    """Test handler registry and encode/decode."""

    def test_registers_all_output_formats(self, encoder):
        assert {"jpg", "png", "webp", "gif"} <= encoder.available_formats

    def test_jpeg_alias_shares_handler(self, encoder):
        assert encoder.get_handler("jpeg") is encoder.get_handler("jpg")
        assert encoder.get_handler(OutputFormat.JPG) is encoder.get_handler("JPG")

    def test_handler_registered_under_its_format_names(self, encoder):
        jpeg_handler = encoder.format_handlers["jpg"]

        for name in jpeg_handler.supported_formats:
            assert encoder.format_handlers[name] is jpeg_handler
        assert "jfif" in encoder.format_handlers

    def test_unknown_format_falls_back_to_jpeg(self, encoder):
        handler = encoder.get_handler("tiff")

        assert isinstance(handler, JPEGHandler)
        assert encoder.mime_type_for("tiff") == "image/jpeg"

    def test_encode_unknown_format_produces_jpeg(self, encoder):
        raster = Image.new("RGB", (10, 10), "green")

        data = encoder.encode(raster, "bmp", 80)

        assert decoded_format(data) == "JPEG"

    @pytest.mark.parametrize(
        "fmt,pil_name",
        [
            (OutputFormat.JPG, "JPEG"),
            (OutputFormat.PNG, "PNG"),
            (OutputFormat.WEBP, "WEBP"),
            (OutputFormat.GIF, "GIF"),
        ],
    )
    def test_encode_each_format(self, encoder, fmt, pil_name):
        data = encoder.encode(Image.new("RGB", (20, 10), "white"), fmt, 60)

        assert decoded_format(data) == pil_name

    def test_encode_zero_dimension_raises(self, encoder):
        with pytest.raises(EncodeError) as exc_info:
            encoder.encode(Image.new("RGB", (0, 5)), "png", 80)

        assert exc_info.value.error_code == "IMG102"

    def test_decode_empty_raises(self, encoder):
        with pytest.raises(DecodeError):
            encoder.decode(b"")

    def test_decode_garbage_raises(self, encoder):
        with pytest.raises(DecodeError) as exc_info:
            encoder.decode(b"definitely not an image")

        assert exc_info.value.error_code == "IMG101"

    def test_decode_checks_handler_validation(self, encoder):
        png_handler = encoder.format_handlers["png"]
        png_handler.validate_image = MagicMock(return_value=False)
        png_handler.load_image = MagicMock()

        with pytest.raises(DecodeError) as exc_info:
            encoder.decode(encode_test_image("PNG"))

        assert exc_info.value.details["format"] == "PNG"
        png_handler.load_image.assert_not_called()

    def test_decode_validates_before_loading(self, encoder):
        gif_handler = encoder.format_handlers["gif"]
        gif_handler.validate_image = MagicMock(wraps=gif_handler.validate_image)

        encoder.decode(encode_test_image("GIF"))

        gif_handler.validate_image.assert_called_once()

    def test_decode_truncated_png_raises(self, encoder):
        data = encode_test_image("PNG", size=(64, 64))

        with pytest.raises(DecodeError):
            encoder.decode(data[: len(data) // 2])

    def test_decode_format_without_encoder(self, encoder):
        # BMP is readable even though it is not an output format
        img = encoder.decode(encode_test_image("BMP", size=(7, 3)))

        assert img.size == (7, 3)

    def test_decode_returns_loaded_raster(self, encoder):
        img = encoder.decode(encode_test_image("WEBP", size=(30, 20)))

        assert img.size == (30, 20)
        # Fully loaded rasters can be read after the source buffer is gone
        assert img.getpixel((29, 19)) is not None

    def test_register_custom_handler(self):
        class OnlyPNG(JPEGHandler):
            def save_image(self, image, output_buffer, quality):
                image.save(output_buffer, format="PNG")

        encoder = FormatEncoder()
        encoder.register_handler("jpeg", OnlyPNG)

        data = encoder.encode(Image.new("RGB", (4, 4)), "jpg", 80)

        assert decoded_format(data) == "PNG"


class TestDetectFormat:
    """Test format sniffing."""

    @pytest.mark.parametrize(
        "pil_name,expected",
        [("JPEG", "jpg"), ("PNG", "png"), ("WEBP", "webp"), ("GIF", "gif"), ("BMP", "bmp")],
    )
    def test_detects_known_formats(self, pil_name, expected):
        assert detect_format(encode_test_image(pil_name)) == expected

    def test_unreadable_returns_none(self):
        assert detect_format(b"nope") is None
        assert detect_format(BytesIO().getvalue()) is None
