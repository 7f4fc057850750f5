"""Unit tests for format handlers."""

from io import BytesIO

import pytest
from PIL import Image

from helpers.image_helpers import encode_test_image
from imagebatch.core.conversion.formats.gif_handler import GifHandler
from imagebatch.core.conversion.formats.jpeg_handler import JPEGHandler
from imagebatch.core.conversion.formats.png_handler import PNGHandler
from imagebatch.core.conversion.formats.webp_handler import WebPHandler
from imagebatch.core.exceptions import DecodeError


class TestJPEGHandler:
    """Test suite for JPEG format handler."""

    @pytest.fixture
    def jpeg_handler(self):
        return JPEGHandler()

    def test_validate_image(self, jpeg_handler):
        assert jpeg_handler.validate_image(encode_test_image("JPEG")) is True
        assert jpeg_handler.validate_image(encode_test_image("PNG")) is False
        assert jpeg_handler.validate_image(b"") is False
        assert jpeg_handler.validate_image(b"\xff\xd8garbage") is False

    def test_load_cmyk_jpeg_converts_to_rgb(self, jpeg_handler):
        buffer = BytesIO()
        Image.new("CMYK", (20, 10)).save(buffer, format="JPEG")

        img = jpeg_handler.load_image(buffer.getvalue())

        assert img.mode == "RGB"
        assert img.size == (20, 10)

    def test_load_invalid_data_raises_decode_error(self, jpeg_handler):
        with pytest.raises(DecodeError):
            jpeg_handler.load_image(b"\xff\xd8not a jpeg")

    def test_quality_maps_linearly(self, jpeg_handler):
        assert jpeg_handler.get_quality_param(10)["quality"] == 10
        assert jpeg_handler.get_quality_param(80)["quality"] == 80
        assert jpeg_handler.get_quality_param(100)["quality"] == 100

    def test_high_quality_disables_subsampling(self, jpeg_handler):
        assert jpeg_handler.get_quality_param(95)["subsampling"] == 0
        assert jpeg_handler.get_quality_param(80)["subsampling"] == 2

    def test_save_flattens_transparency(self, jpeg_handler):
        rgba = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
        buffer = BytesIO()

        jpeg_handler.save_image(rgba, buffer, 80)

        with Image.open(buffer) as result:
            assert result.format == "JPEG"
            assert result.mode == "RGB"
            # Fully transparent pixels land on white
            assert result.getpixel((5, 5))[0] > 240

    def test_lower_quality_gives_smaller_output(self, jpeg_handler):
        img = Image.effect_noise((128, 128), 64).convert("RGB")
        low, high = BytesIO(), BytesIO()

        jpeg_handler.save_image(img, low, 10)
        jpeg_handler.save_image(img, high, 100)

        assert len(low.getvalue()) < len(high.getvalue())


class TestPNGHandler:
    """Test suite for PNG format handler."""

    @pytest.fixture
    def png_handler(self):
        return PNGHandler()

    def test_validate_image(self, png_handler):
        assert png_handler.validate_image(encode_test_image("PNG")) is True
        assert png_handler.validate_image(encode_test_image("GIF")) is False

    def test_quality_is_ignored(self, png_handler):
        assert png_handler.get_quality_param(10) == {}

    def test_save_is_lossless(self, png_handler):
        img = Image.effect_noise((32, 32), 64).convert("RGB")
        buffer = BytesIO()

        png_handler.save_image(img, buffer, 10)

        with Image.open(buffer) as result:
            assert list(result.convert("RGB").getdata()) == list(img.getdata())

    def test_save_keeps_alpha(self, png_handler):
        buffer = BytesIO()
        png_handler.save_image(Image.new("RGBA", (8, 8), (1, 2, 3, 4)), buffer, 80)

        with Image.open(buffer) as result:
            assert result.mode == "RGBA"
            assert result.getpixel((0, 0)) == (1, 2, 3, 4)


class TestWebPHandler:
    """Test suite for WebP format handler."""

    @pytest.fixture
    def webp_handler(self):
        return WebPHandler()

    def test_validate_image(self, webp_handler):
        assert webp_handler.validate_image(encode_test_image("WEBP")) is True
        assert webp_handler.validate_image(b"RIFF\x00\x00\x00\x00WAVE") is False

    def test_quality_param(self, webp_handler):
        assert webp_handler.get_quality_param(55) == {"quality": 55}

    def test_save_converts_grayscale(self, webp_handler):
        buffer = BytesIO()
        webp_handler.save_image(Image.new("L", (12, 7), 90), buffer, 70)

        with Image.open(buffer) as result:
            assert result.format == "WEBP"
            assert result.size == (12, 7)


class TestGifHandler:
    """Test suite for GIF format handler."""

    @pytest.fixture
    def gif_handler(self):
        return GifHandler()

    def test_validate_image(self, gif_handler):
        assert gif_handler.validate_image(encode_test_image("GIF")) is True
        assert gif_handler.validate_image(b"GIF89a") is False

    def test_load_first_frame_of_animation(self, gif_handler):
        frames = [Image.new("RGB", (16, 16), c) for c in ("red", "green", "blue")]
        buffer = BytesIO()
        frames[0].save(buffer, format="GIF", save_all=True, append_images=frames[1:])

        img = gif_handler.load_image(buffer.getvalue())

        assert img.size == (16, 16)
        assert img.mode in ("RGB", "RGBA")
        assert img.getpixel((0, 0))[:3] == (255, 0, 0)

    def test_save_rgb_as_palette(self, gif_handler):
        buffer = BytesIO()
        gif_handler.save_image(Image.new("RGB", (9, 4), "blue"), buffer, 80)

        with Image.open(buffer) as result:
            assert result.format == "GIF"
            assert result.size == (9, 4)

    def test_quality_is_ignored(self, gif_handler):
        assert gif_handler.get_quality_param(50) == {}
