"""
BlogQL — Image Storage Service
===============================

What:  Validates, stores, resolves and deletes post images on local disk.
Why:   Centralizes all file system operations behind one set of checks.
How:   Validates extension, declared MIME type and size, stores in
       date-organized directories under a UUID filename, and hands back the
       public path that posts keep in their imageUrl.
Who:   Called by the PUT /post-image route and by PostService.delete_post.

Security Model:
    1. Extension check:   only .png, .jpg, .jpeg
    2. MIME type check:   declared content type must be image/png, image/jpg
                          or image/jpeg
    3. Size check:        bounded by settings.max_file_size
    4. UUID filename:     no user input reaches the file system path
    5. Path resolution:   public paths are resolved inside storage_root only
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from blogql.config import settings
from blogql.exceptions import FileStorageError, InvalidInputError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}


def _invalid(message: str) -> InvalidInputError:
    return InvalidInputError([{"message": message}], message=message)


class FileService:
    """
    Manages the lifecycle of uploaded post images.

    Directory Structure:
        images/                        ← storage_root
        └── 2024/
            └── 01/
                └── 15/
                    ├── a1b2c3d4-5678.jpg
                    └── e5f6g7h8-9012.png

    Public path of the first file: "images/2024/01/15/a1b2c3d4-5678.jpg"
    (image_url_prefix + path relative to storage_root).
    """

    def __init__(self, storage_root: Optional[str] = None, url_prefix: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
            url_prefix: Override the public URL prefix (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.url_prefix = (url_prefix or settings.image_url_prefix).strip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized (lowercase) extension or raises InvalidInputError."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise _invalid(
                f"File type '{ext}' is not supported. "
                f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )
        return ext

    def validate_content_type(self, content_type: Optional[str]) -> str:
        mime_type = (content_type or "").split(";")[0].strip().lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise _invalid(
                f"File content type '{mime_type or 'unknown'}' is not supported. "
                f"The file must be a PNG or JPEG image."
            )
        return mime_type

    def validate_size(self, actual_size: int) -> None:
        max_mb = settings.max_file_size / (1024 * 1024)
        if actual_size == 0:
            raise _invalid("The uploaded file is empty.")
        if actual_size > settings.max_file_size:
            raise _invalid(
                f"File size ({actual_size / (1024 * 1024):.1f}MB) is too large. "
                f"Maximum is {max_mb:.0f}MB."
            )

    # ── Paths ─────────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """
        Creates a YYYY/MM/DD/<uuid><ext> path.

        Returns: (absolute_path, path relative to storage_root)
        """
        now = datetime.now(timezone.utc)
        relative_path = f"{now.strftime('%Y/%m/%d')}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    def public_path(self, relative_path: str) -> str:
        return f"{self.url_prefix}/{relative_path}"

    def resolve_public_path(self, public_path: str) -> Path:
        """
        Map a public image path back to a file inside storage_root.

        Accepts "images/2024/01/15/x.png", "/images/2024/01/15/x.png" or the
        bare relative path. Raises InvalidInputError for anything that would
        escape storage_root (e.g. "images/../../etc/passwd").
        """
        relative = public_path.strip().lstrip("/")
        prefix = f"{self.url_prefix}/"
        if relative.startswith(prefix):
            relative = relative[len(prefix):]

        full_path = (self.storage_root / relative).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise _invalid("Invalid file path")
        return full_path

    # ── Storage ───────────────────────────────────────────────────────────

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated file content to disk with async I/O.

        Returns: (absolute_path, relative_path)
        Raises: FileStorageError if directory creation or the write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("File stored: %s (%d bytes)", relative_path, len(content))
            return str(absolute_path), relative_path

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a file from storage if it exists.

        Best-effort: missing files are ignored and other failures are logged,
        never raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except Exception as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def clear_image(self, public_path: str) -> None:
        """Best-effort removal of an image referenced by its public path."""
        try:
            full_path = self.resolve_public_path(public_path)
        except InvalidInputError:
            logger.warning("Refusing to delete image outside storage: %s", public_path)
            return
        await self.cleanup_file(str(full_path))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str],
    ) -> str:
        """
        Complete validation and storage pipeline.

        Validation order (cheapest first):
            1. Extension
            2. Declared MIME type
            3. Size
            4. Write to disk

        Returns: the public path to store in a post's imageUrl.
        """
        ext = self.validate_extension(filename)
        self.validate_content_type(content_type)
        self.validate_size(len(content))

        _, relative_path = await self.store_file(content, ext)
        return self.public_path(relative_path)


# Storage root doesn't change; no per-request state needed
file_service = FileService()
