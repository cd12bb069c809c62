"""
inventory/images.py -- Local filesystem storage for product images.

Objects are written under media_dir with the key
products/{product_id}/{epoch_ms}.{ext} and served by asgi.py at /media, so
the returned URL is media_base_url + "/" + key. Old images are left in
place when a product gets a new one.
"""

import logging
import re
import time
from pathlib import Path, PurePosixPath

logger = logging.getLogger("stocktrack.inventory")

_EXT_RE = re.compile(r"^[a-z0-9]{1,10}$")


class ImageRejectedError(ValueError):
    """The upload is not an image."""


class ImageTooLargeError(ValueError):
    """The upload exceeds max_bytes."""


def _extension(filename: str) -> str:
    """Return a safe lowercase extension from the client filename, default 'jpg'."""
    suffix = PurePosixPath(filename.replace("\\", "/")).suffix.lstrip(".").lower()
    return suffix if _EXT_RE.match(suffix) else "jpg"


class ImageStorage:
    def __init__(self, media_dir: Path, base_url: str, max_bytes: int) -> None:
        self.media_dir = Path(media_dir)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    def save(self, product_id: int, filename: str, content_type: str, data: bytes) -> str:
        """Write the image and return its public URL.

        Raises ImageRejectedError for non-image content types and
        ImageTooLargeError when data is longer than max_bytes.
        """
        if not (content_type or "").startswith("image/"):
            raise ImageRejectedError("Only image files are allowed")
        if len(data) > self.max_bytes:
            raise ImageTooLargeError(f"Image must be {self.max_bytes} bytes or smaller")

        key = f"products/{product_id}/{int(time.time() * 1000)}.{_extension(filename or '')}"
        target = self.media_dir / key
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored image for product %d at %s (%d bytes)", product_id, key, len(data))
        return f"{self.base_url}/{key}"
