"""Saving produced blobs for the user."""

import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Set, Union

from imagebatch.config import settings
from imagebatch.core.exceptions import DeliveryError
from imagebatch.utils.logging import get_logger

logger = get_logger(__name__)


class FileDelivery:
    """Writes blobs into an output directory.

    Each blob is written to a temporary file next to its target and then
    renamed into place, so a target never holds a partial write. Files
    registered with ``protect`` (the run's inputs) are never replaced.
    Single attempt, no retries.
    """

    def __init__(self, output_dir: Optional[Union[str, Path]] = None) -> None:
        self.output_dir = Path(output_dir or settings.output_dir)
        self._protected: Set[Path] = set()

    def protect(self, paths: Iterable[Union[str, Path]]) -> None:
        """Refuse to write over any of ``paths``."""
        self._protected.update(Path(p).resolve() for p in paths)

    def deliver(self, data: bytes, filename: str) -> Path:
        """Save ``data`` under ``filename`` in the output directory.

        Raises:
            DeliveryError: If the target is a protected input or the file
                cannot be written
        """
        safe_name = os.path.basename(filename.replace("\\", "/"))
        if safe_name in ("", ".", ".."):
            raise DeliveryError(
                "Invalid output filename", details={"target": filename}
            )

        target = self.output_dir / safe_name
        if target.resolve() in self._protected:
            raise DeliveryError(
                f"Refusing to overwrite input file {safe_name}; "
                f"choose another output directory or format",
                details={"target": safe_name, "size": len(data)},
            )

        tmp_path: Optional[str] = None
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=".imagebatch-", suffix=".part", dir=self.output_dir
            )
            with os.fdopen(fd, "wb") as tmp_file:
                tmp_file.write(data)
            os.replace(tmp_path, target)
            tmp_path = None
        except OSError as e:
            raise DeliveryError(
                f"Failed to save {safe_name}: {str(e)}",
                details={"target": safe_name, "size": len(data), "error": str(e)},
            )
        finally:
            # Release the temporary file if it was never moved into place
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

        logger.info("Delivered file", filename=safe_name, size=len(data))
        return target
