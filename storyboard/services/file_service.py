"""
Storyboard Backend — Upload Storage Service
============================================

What:  Validates, stores and removes uploaded part images.
How:   Checks extension, declared MIME type and size, then writes the bytes
       under a uuid4 filename in UPLOAD_DIR with aiofiles. The directory is
       mounted at /uploads, so the stored file's public path is
       /uploads/<uuid><ext>.
Who:   POST /api/upload (store) and PartService.delete (remove).

Checks:
    1. Extension:  .jpeg .jpg .png .gif .webp (case-insensitive)
    2. MIME type:  the Content-Type the client declared for the file part
    3. Size:       1 byte .. MAX_UPLOAD_SIZE (default 10MB)
    The content itself is not sniffed.

The upload is not linked to any part here. The client stores the returned
path on a part with a later create/update call; an abandoned form leaves
the file behind.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles

from storyboard.config import settings
from storyboard.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
}


class FileService:
    """
    Manages the upload directory.

    Directory Structure:
        public/uploads/
        ├── 3f0c1e2d9a8b4c7d8e9f0a1b2c3d4e5f.jpg
        └── 9a8b7c6d5e4f40312a1b2c3d4e5f6a7b.webp
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the upload directory (used in tests).
                          If None, uses settings.upload_dir.
        """
        self.storage_root = Path(storage_root or settings.upload_dir).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """
        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if the extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message="Only image files are allowed!",
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_mime_type(self, content_type: Optional[str]) -> str:
        """Checks the declared MIME type (parameters such as charset are ignored)."""
        mime_type = (content_type or "").split(";")[0].strip().lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message="Only image files are allowed!",
                field="image",
                context={"content_type": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Rejects empty files and files larger than MAX_UPLOAD_SIZE.

        Args:
            content_length: Size reported for the upload (may be None)
            actual_size: Byte count actually received
        """
        max_size = settings.max_upload_size
        max_mb = max_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field="image")

        if (content_length and content_length > max_size) or actual_size > max_size:
            raise ValidationError(
                message=f"File is too large. Maximum size is {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": max(actual_size, content_length or 0)},
            )

    def _generate_filename(self, extension: str) -> str:
        return f"{uuid.uuid4().hex}{extension}"

    async def store_file(self, content: bytes, extension: str) -> str:
        """
        Write validated bytes to the upload directory.

        Returns: Public path (/uploads/<name>).
        Raises:  FileStorageError if the write fails.
        """
        filename = self._generate_filename(extension)
        absolute_path = self.storage_root / filename

        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to upload image",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", filename, len(content))
        return f"{UPLOAD_URL_PREFIX}/{filename}"

    async def validate_and_store(
        self,
        filename: str,
        content_type: Optional[str],
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Complete upload pipeline: extension → MIME type → size → write.

        Returns: Public path of the stored image.
        """
        ext = self.validate_extension(filename)
        self.validate_mime_type(content_type)
        self.validate_size(content_length, len(content))
        return await self.store_file(content, ext)

    def resolve_public_path(self, public_path: str) -> Optional[Path]:
        """
        Map /uploads/<name> to a file inside the upload directory.

        Returns None for paths outside /uploads or escaping the directory.
        """
        prefix = f"{UPLOAD_URL_PREFIX}/"
        if not public_path or not public_path.startswith(prefix):
            return None
        candidate = (self.storage_root / public_path[len(prefix):]).resolve()
        if candidate.parent != self.storage_root:
            return None
        return candidate

    async def remove_public_file(self, public_path: str) -> None:
        """
        Remove the file behind a public image path, best-effort.

        A missing file is not an error. Other failures are logged and
        swallowed so the caller's delete can proceed.
        """
        try:
            path = self.resolve_public_path(public_path)
            if path is None:
                logger.warning("Refusing to remove file outside upload dir: %s", public_path)
                return
            if path.exists():
                os.remove(path)
                logger.info("Removed image file: %s", path.name)
            else:
                logger.debug("Image file already gone: %s", path.name)
        except Exception as e:
            logger.warning("Failed to remove image file %s: %s", public_path, str(e))


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
