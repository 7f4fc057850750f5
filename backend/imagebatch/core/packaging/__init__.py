"""Archive and document packaging of conversion results."""

from .archive import ArchivePackager
from .document import DocumentPackager, PagePlacement, compute_placement

__all__ = ["ArchivePackager", "DocumentPackager", "PagePlacement", "compute_placement"]
