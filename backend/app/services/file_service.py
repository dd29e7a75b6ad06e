"""
CuriousDog Backend — Profile Picture Storage Service
======================================================

What:  Validates, stores, and removes uploaded profile pictures.
How:   Checks extension, size and actual MIME type, then writes the bytes to
       a date-organized directory under a UUID filename.
Who:   Called by UserService.update_profile_picture().

Validation order (cheapest first):
    1. Extension:  .png, .jpg, .jpeg
    2. Size:       non-empty and at most settings.max_file_size
    3. MIME type:  libmagic inspects the header bytes, so a renamed file
                   (e.g. a PDF saved as avatar.jpg) is rejected

Directory Structure:
    storage/
    └── 2024/
        └── 01/
            └── 15/
                └── a1b2c3d4-....jpg

Public URLs:
    A stored file at <storage_root>/2024/01/15/x.jpg is served as
    /api/files/2024/01/15/x.jpg; that URL is what users.profile_picture holds.
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from app.config import settings
from app.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

FILES_URL_PREFIX = "/api/files/"

ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}


class FileService:
    """Manages the profile picture upload, validation, and storage lifecycle."""

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                          If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized extension; raises ValidationError if not allowed."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or 'none'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject empty files and files above settings.max_file_size.

        Both the reported Content-Length and the actual byte count are checked;
        clients do not always report the former accurately.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="The uploaded file is empty.", field="file")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File is too large. Maximum size is {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File is too large ({actual_size / (1024 * 1024):.1f}MB). Maximum size is {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, file_content: bytes) -> str:
        """
        Detect the real content type from the file's magic bytes.

        Returns the detected MIME type; raises ValidationError when it is not
        PNG or JPEG and FileStorageError when detection itself fails.
        """
        import magic

        try:
            mime_type = magic.from_buffer(file_content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify the file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    "Profile pictures must be PNG or JPEG images."
                ),
                field="file",
                context={"detected_mime": mime_type, "allowed": list(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    # ── Storage ───────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new YYYY/MM/DD/<uuid><ext> file."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        relative_path = f"{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated content to disk.

        Returns (absolute_path, relative_path). Raises FileStorageError on OS errors.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save the uploaded picture. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return str(absolute_path), relative_path

    async def cleanup_file(self, file_path: str) -> None:
        """
        Best-effort removal of a stored file.

        Missing files are ignored; other failures are logged and not raised,
        since a leftover picture never affects the user's request.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Full pipeline: extension → size → MIME → write.

        Returns (absolute_path, relative_path).
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content)
        return await self.store_file(content, ext)

    # ── URL mapping ───────────────────────────────────────────────────────

    def public_url(self, relative_path: str) -> str:
        return f"{FILES_URL_PREFIX}{relative_path}"

    def resolve_public_url(self, url: Optional[str]) -> Optional[Path]:
        """
        Map a /api/files/... URL back to a path inside the storage root.

        Returns None for URLs this service did not produce or that would
        escape the storage root.
        """
        if not url or not url.startswith(FILES_URL_PREFIX):
            return None
        return self.resolve_relative_path(url[len(FILES_URL_PREFIX):])

    def resolve_relative_path(self, relative_path: str) -> Optional[Path]:
        """Absolute path for `relative_path`, or None if it leaves the storage root."""
        candidate = (self.storage_root / relative_path).resolve()
        if candidate != self.storage_root and self.storage_root in candidate.parents:
            return candidate
        return None


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
