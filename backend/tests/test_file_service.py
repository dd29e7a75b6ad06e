"""
CuriousDog Backend — File Service Unit Tests
==============================================

What:  Tests for profile picture validation, storage, and URL mapping.
How:   Temporary storage roots; libmagic is replaced through sys.modules so
       the tests do not depend on the system library.

Test Strategy:
    ✅ Allowed extensions (.png, .jpg, .jpeg, any case); others rejected
    ✅ Size limits (empty, reported too large, actual too large)
    ✅ MIME sniffing result decides, not the extension
    ✅ Date-organized UUID storage paths
    ✅ Public URL ↔ storage path mapping refuses traversal
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from app.config import settings
from app.exceptions import FileStorageError, ValidationError
from app.services.file_service import FILES_URL_PREFIX, FileService


def fake_magic(mime_type=None, error=None):
    module = MagicMock()
    if error is not None:
        module.from_buffer.side_effect = error
    else:
        module.from_buffer.return_value = mime_type
    return module


class TestFileValidation:

    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.service = FileService(storage_root=temp_storage)

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("filename,expected", [
        ("me.png", ".png"), ("me.jpg", ".jpg"), ("me.jpeg", ".jpeg"),
        ("ME.PNG", ".png"), ("me.Jpeg", ".jpeg"),
    ])
    def test_allowed_extensions(self, filename, expected):
        assert self.service.validate_extension(filename) == expected

    @pytest.mark.parametrize("filename", ["anim.gif", "cv.pdf", "noextension", "tool.exe"])
    def test_other_extensions_rejected(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename)

    # ── Size Validation ───────────────────────────────────────────────────

    def test_small_file_passes(self):
        self.service.validate_size(1000, 1000)

    def test_file_at_limit_passes(self):
        self.service.validate_size(settings.max_file_size, settings.max_file_size)

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0, 0)

    def test_reported_size_over_limit_rejected(self):
        with pytest.raises(ValidationError, match="too large"):
            self.service.validate_size(settings.max_file_size + 1, 10)

    def test_actual_size_over_limit_rejected(self):
        """A client under-reporting Content-Length is still caught."""
        with pytest.raises(ValidationError, match="too large"):
            self.service.validate_size(10, settings.max_file_size + 1)

    # ── MIME Validation ───────────────────────────────────────────────────

    def test_png_content_accepted(self, sample_png_bytes):
        with patch.dict(sys.modules, {"magic": fake_magic("image/png")}):
            assert self.service.validate_mime_type(sample_png_bytes) == "image/png"

    def test_renamed_pdf_rejected(self):
        with patch.dict(sys.modules, {"magic": fake_magic("application/pdf")}):
            with pytest.raises(ValidationError, match="PNG or JPEG"):
                self.service.validate_mime_type(b"%PDF-1.4")

    def test_detection_failure_is_a_storage_error(self):
        with patch.dict(sys.modules, {"magic": fake_magic(error=RuntimeError("no magic db"))}):
            with pytest.raises(FileStorageError):
                self.service.validate_mime_type(b"\x00\x01")


class TestFileStorage:

    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.storage_root = Path(temp_storage).resolve()
        self.service = FileService(storage_root=temp_storage)

    @pytest.mark.asyncio
    async def test_validate_and_store_writes_dated_uuid_file(self, sample_png_bytes):
        with patch.dict(sys.modules, {"magic": fake_magic("image/png")}):
            abs_path, rel_path = await self.service.validate_and_store(
                filename="Holiday Photo.PNG",
                content=sample_png_bytes,
                content_length=len(sample_png_bytes),
            )

        assert Path(abs_path).read_bytes() == sample_png_bytes
        parts = rel_path.split("/")
        assert len(parts) == 4  # YYYY/MM/DD/<uuid>.png
        assert parts[-1].endswith(".png")
        assert "Holiday" not in parts[-1]

    @pytest.mark.asyncio
    async def test_invalid_upload_writes_nothing(self):
        with pytest.raises(ValidationError):
            await self.service.validate_and_store("me.png", b"", 0)

        assert [p for p in self.storage_root.rglob("*") if p.is_file()] == []

    @pytest.mark.asyncio
    async def test_cleanup_removes_file(self, tmp_path):
        target = tmp_path / "old.jpg"
        target.write_bytes(b"jpeg")

        await self.service.cleanup_file(str(target))

        assert not target.exists()

    @pytest.mark.asyncio
    async def test_cleanup_of_missing_file_is_silent(self, tmp_path):
        await self.service.cleanup_file(str(tmp_path / "gone.jpg"))

    # ── URL Mapping ───────────────────────────────────────────────────────

    def test_public_url_round_trip(self):
        url = self.service.public_url("2026/10/19/abc.png")

        assert url == f"{FILES_URL_PREFIX}2026/10/19/abc.png"
        assert self.service.resolve_public_url(url) == self.storage_root / "2026/10/19/abc.png"

    @pytest.mark.parametrize("url", [None, "", "https://cdn.example.com/a.png", "/static/a.png"])
    def test_foreign_urls_do_not_resolve(self, url):
        assert self.service.resolve_public_url(url) is None

    @pytest.mark.parametrize("relative", ["../secret.txt", "2026/../../etc/passwd", ""])
    def test_paths_escaping_the_root_do_not_resolve(self, relative):
        assert self.service.resolve_relative_path(relative) is None
