"""Constants and configuration values for the image batch converter."""

# Input limits
MAX_FILES_PER_DROP = 10  # Files accepted from a single drop / invocation
ACCEPTED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")

# Quality bounds (percent)
MIN_QUALITY = 10
MAX_QUALITY = 100
QUALITY_STEP = 5
DEFAULT_QUALITY = 80

# Document packaging
DOCUMENT_IMAGE_QUALITY = 80  # Fixed lossy re-encode for embedded pages
A4_PAGE_SIZE_MM = (210.0, 297.0)  # Portrait, reportlab default page

# Output names
ARCHIVE_FILENAME = "converted-images.zip"
DOCUMENT_FILENAME = "converted-images.pdf"

# Batch processing
MAX_BATCH_WORKERS = 8  # Upper bound for optional concurrent conversion

FORMAT_MIME_TYPES = {
    "jpg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}

# Fallback codec for a format without a registered handler
DEFAULT_ENCODE_FORMAT = "jpg"

FORMAT_ALIASES = {
    "jpeg": "jpg",
    "jpe": "jpg",
    "jfif": "jpg",
}

# Pillow format names to canonical output formats
PIL_FORMAT_NAMES = {
    "JPEG": "jpg",
    "MPO": "jpg",
    "PNG": "png",
    "WEBP": "webp",
    "GIF": "gif",
}

LOSSLESS_FORMATS = frozenset({"png", "gif"})

# File extensions to MIME types, used when a file carries no declared type
EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".jpe": "image/jpeg",
    ".jfif": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}
