"""
Storyboard Backend — File Service Unit Tests
=============================================

What:  Tests for FileService validation, storage and removal.
How:   Each test builds a FileService on a temporary directory.

Test Strategy:
    ✅ Allowed extensions (.jpeg .jpg .png .gif .webp), any case
    ✅ Rejected extensions and MIME types
    ✅ Size limits (empty, at limit, over limit)
    ✅ uuid filenames under /uploads
    ✅ Removal is best-effort and confined to the upload directory
"""

import pytest
from unittest.mock import patch

from storyboard.exceptions import FileStorageError, ValidationError
from storyboard.services.file_service import FileService


class TestFileValidation:

    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.service = FileService(storage_root=temp_storage)

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["a.jpg", "a.jpeg", "a.png", "a.gif", "a.webp"])
    def test_allowed_extensions(self, filename):
        assert self.service.validate_extension(filename) == "." + filename.split(".")[-1]

    def test_extension_is_case_insensitive(self):
        assert self.service.validate_extension("photo.JPG") == ".jpg"
        assert self.service.validate_extension("photo.WebP") == ".webp"

    @pytest.mark.parametrize("filename", ["document.pdf", "malware.exe", "noextension", "image.bmp"])
    def test_rejected_extensions(self, filename):
        with pytest.raises(ValidationError, match="Only image files are allowed"):
            self.service.validate_extension(filename)

    # ── MIME Validation ───────────────────────────────────────────────────

    def test_mime_type_with_parameters(self):
        assert self.service.validate_mime_type("image/PNG; charset=binary") == "image/png"

    @pytest.mark.parametrize("content_type", ["text/plain", "application/pdf", None, ""])
    def test_rejected_mime_types(self, content_type):
        with pytest.raises(ValidationError, match="Only image files are allowed"):
            self.service.validate_mime_type(content_type)

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.service.validate_size(None, 1000)

    def test_size_at_limit(self):
        self.service.validate_size(None, 10 * 1024 * 1024)

    def test_size_over_limit(self):
        with pytest.raises(ValidationError, match="too large"):
            self.service.validate_size(None, 10 * 1024 * 1024 + 1)

    def test_declared_length_over_limit(self):
        with pytest.raises(ValidationError, match="too large"):
            self.service.validate_size(20 * 1024 * 1024, 10)

    def test_empty_file(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0, 0)


class TestFileStorage:

    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.service = FileService(storage_root=temp_storage)

    @pytest.mark.asyncio
    async def test_validate_and_store_writes_uuid_file(self, sample_image_bytes):
        path = await self.service.validate_and_store(
            filename="My Holiday Photo.JPG",
            content_type="image/jpeg",
            content=sample_image_bytes,
        )

        assert path.startswith("/uploads/")
        assert path.endswith(".jpg")
        assert "Holiday" not in path
        stored = self.service.resolve_public_path(path)
        assert stored.read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_each_upload_gets_a_new_name(self, sample_image_bytes):
        first = await self.service.validate_and_store("a.png", "image/png", sample_image_bytes)
        second = await self.service.validate_and_store("a.png", "image/png", sample_image_bytes)
        assert first != second

    @pytest.mark.asyncio
    async def test_rejected_upload_writes_nothing(self, temp_storage):
        with pytest.raises(ValidationError):
            await self.service.validate_and_store("notes.txt", "text/plain", b"hello")
        assert list(self.service.storage_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_write_failure_raises_file_storage_error(self, sample_image_bytes):
        with patch("storyboard.services.file_service.aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(FileStorageError, match="Failed to upload image"):
                await self.service.store_file(sample_image_bytes, ".jpg")

    # ── Removal ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_remove_public_file(self, sample_image_bytes):
        path = await self.service.validate_and_store("a.gif", "image/gif", sample_image_bytes)
        stored = self.service.resolve_public_path(path)
        assert stored.exists()

        await self.service.remove_public_file(path)
        assert not stored.exists()

    @pytest.mark.asyncio
    async def test_remove_missing_file_is_silent(self):
        await self.service.remove_public_file("/uploads/does-not-exist.jpg")

    def test_resolve_rejects_paths_outside_upload_dir(self):
        assert self.service.resolve_public_path("/uploads/../secret.txt") is None
        assert self.service.resolve_public_path("/etc/passwd") is None
        assert self.service.resolve_public_path("") is None

    @pytest.mark.asyncio
    async def test_remove_ignores_traversal(self, tmp_path):
        outside = tmp_path / "keep.jpg"
        outside.write_bytes(b"x")

        await self.service.remove_public_file("/uploads/../keep.jpg")
        assert outside.exists()
