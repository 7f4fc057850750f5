"""Unit tests for zip packaging."""

import io
import zipfile
from unittest.mock import patch

import pytest
import pytest_asyncio

from helpers.image_helpers import zip_entries
from imagebatch.core.exceptions import PackagingError
from imagebatch.core.packaging.archive import ArchivePackager


class TestArchivePackager:
    """Test ArchivePackager.pack."""

    @pytest.fixture
    def packager(self):
        return ArchivePackager()

    @pytest_asyncio.fixture
    async def converted(self, batch_manager, make_input_image, webp_request):
        images = [
            make_input_image(name=f"shot{i}.jpg", fmt="JPEG", last_modified=float(i))
            for i in range(3)
        ]
        result = await batch_manager.convert_all(images, webp_request)
        return result.converted

    @pytest.mark.asyncio
    async def test_one_entry_per_image(self, packager, converted):
        data = await packager.pack(converted)

        entries = zip_entries(data)
        assert entries == {c.filename: c.size for c in converted}

    @pytest.mark.asyncio
    async def test_entries_are_top_level(self, packager, converted):
        entries = zip_entries(await packager.pack(converted))

        assert all("/" not in name for name in entries)

    @pytest.mark.asyncio
    async def test_entry_bytes_match(self, packager, converted):
        data = await packager.pack(converted)

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            for image in converted:
                assert archive.read(image.filename) == image.data

    @pytest.mark.asyncio
    async def test_empty_archive(self, packager):
        assert zip_entries(await packager.pack([])) == {}

    @pytest.mark.asyncio
    async def test_write_failure_raises_packaging_error(self, packager, converted):
        with patch.object(zipfile.ZipFile, "writestr", side_effect=OSError("disk full")):
            with pytest.raises(PackagingError) as exc_info:
                await packager.pack(converted)

        assert exc_info.value.error_code == "IMG201"
        assert exc_info.value.details["package_type"] == "zip"
