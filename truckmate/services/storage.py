"""
Document blob storage.

Driver photos are stored once and referenced by URL from profiles and
verification request snapshots.
"""
import logging
import mimetypes
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional

from starlette.concurrency import run_in_threadpool

from truckmate.core.config import Settings, get_settings
from truckmate.core.errors import DependencyError, ValidationError

logger = logging.getLogger(__name__)

# Folder names mirror the document kind
FOLDER_PROFILE_PHOTOS = "drivers/profiles"
FOLDER_LICENSES = "drivers/licenses"

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


class BlobStorage(ABC):
    """Store bytes, get back a URL; delete by URL."""

    def __init__(self, max_bytes: int, allowed_types: Iterable[str]):
        self.max_bytes = max_bytes
        self.allowed_types = frozenset(allowed_types)

    def validate(self, data: bytes, content_type: Optional[str], field: str = "file") -> None:
        """Reject uploads that are not images or exceed the size limit.

        Raises:
            ValidationError: With the offending field in ``details``.
        """
        if content_type not in self.allowed_types:
            raise ValidationError(
                "Only image files are allowed (jpeg, jpg, png, gif, webp)",
                details=[{"field": field, "message": f"Unsupported content type {content_type}"}],
            )
        if not data:
            raise ValidationError(
                "Uploaded file is empty",
                details=[{"field": field, "message": "Empty file"}],
            )
        if len(data) > self.max_bytes:
            raise ValidationError(
                f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB",
                details=[{"field": field, "message": f"{len(data)} bytes exceeds {self.max_bytes}"}],
            )

    @abstractmethod
    async def store(
        self,
        data: bytes,
        folder: str,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        """Persist ``data`` and return its public URL."""

    @abstractmethod
    async def delete(self, url: str) -> bool:
        """Remove the blob behind ``url``. Returns False if it did not exist."""


class LocalBlobStorage(BlobStorage):
    """
    Files under a local directory, served by the ``/uploads`` static mount.

    Blob names are random UUIDs; the client filename only contributes its
    extension when the content type does not determine one.
    """

    def __init__(
        self,
        root: str,
        base_url: str,
        *,
        max_bytes: int = 5 * 1024 * 1024,
        allowed_types: Iterable[str] = tuple(_EXTENSIONS),
    ):
        super().__init__(max_bytes, allowed_types)
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def url_for(self, relative: str) -> str:
        return f"{self.base_url}/{relative}"

    def path_for(self, url: str) -> Optional[Path]:
        """Map one of our URLs back to a file under ``root``, or None."""
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            return None
        path = (self.root / url[len(prefix):]).resolve()
        if self.root.resolve() not in path.parents:
            return None
        return path

    async def store(
        self,
        data: bytes,
        folder: str,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        extension = _EXTENSIONS.get(content_type or "")
        if extension is None and filename:
            extension = Path(filename).suffix.lower() or None
        if extension is None and content_type:
            extension = mimetypes.guess_extension(content_type)
        relative = f"{folder.strip('/')}/{uuid.uuid4()}{extension or ''}"
        path = self.root / relative

        try:
            await run_in_threadpool(self._write, path, data)
        except OSError as e:
            logger.error(f"Failed to store blob {relative}: {e}")
            raise DependencyError("Document storage unavailable")

        logger.info(f"Stored {len(data)} bytes at {relative}")
        return self.url_for(relative)

    async def delete(self, url: str) -> bool:
        path = self.path_for(url)
        if path is None:
            logger.warning(f"Refusing to delete blob outside storage root: {url}")
            return False
        try:
            return await run_in_threadpool(self._unlink, path)
        except OSError as e:
            logger.error(f"Failed to delete blob {url}: {e}")
            raise DependencyError("Document storage unavailable")

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    @staticmethod
    def _unlink(path: Path) -> bool:
        if not path.exists():
            return False
        path.unlink()
        return True


def build_storage(settings: Optional[Settings] = None) -> LocalBlobStorage:
    settings = settings or get_settings()
    return LocalBlobStorage(
        settings.storage_root,
        settings.storage_base_url,
        max_bytes=settings.upload_max_bytes,
        allowed_types=settings.allowed_image_types,
    )
