"""Local file service for previously uploaded notes.

This service handles:
- Uploads directory initialization
- Listing uploaded files with stable ids derived from their relative path
- Reading uploads back as text for the file sync
- Saving new uploads

Concurrency Safety:
- Atomic writes use temp file + rename pattern to prevent partial writes
- Blocking filesystem calls run in a worker thread (asyncio.to_thread)
"""

import asyncio
import hashlib
import os
import tempfile
from pathlib import Path

from clinote.components.workspace.models import UploadedFile
from clinote.settings import settings
from clinote.utils import get_logger

logger = get_logger(__name__)

# Suffix of in-flight atomic writes; never listed as uploads
TMP_SUFFIX = ".tmp"


def file_id_for(relative_path: str) -> str:
    """Stable file id for a path relative to the uploads root."""
    return hashlib.sha1(relative_path.encode("utf-8")).hexdigest()[:16]


class LocalFileService:
    """File Port implementation over a local uploads directory.

    Directory Structure:
    {workspace}/
    └── uploads/
        ├── intake.txt
        └── 2024-05/
            └── follow-up.md
    """

    def __init__(self, uploads_root: Path | None = None, encoding: str = "utf-8"):
        self.uploads_root = Path(uploads_root or settings.get_uploads_root())
        self.encoding = encoding
        self._initialized = False

    def initialize(self) -> None:
        """Create the uploads directory. Idempotent."""
        if self._initialized:
            logger.debug("Uploads directory already initialized, skipping")
            return

        self.uploads_root.mkdir(parents=True, exist_ok=True)
        self._initialized = True
        logger.info(f"LocalFileService initialized: uploads={self.uploads_root}")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # ==================== File Port ====================

    async def list_uploaded_files(self) -> list[UploadedFile]:
        """All uploaded files, ordered by relative path."""
        return await asyncio.to_thread(self._list_uploaded_files)

    async def read_file_as_text(self, path: str) -> str:
        """Read an uploaded file as text.

        Args:
            path: Path relative to the uploads root (as listed)

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the path escapes the uploads root
            UnicodeDecodeError: If the file is not valid text
        """
        return await asyncio.to_thread(self._read_text, path)

    # ==================== Uploads ====================

    def save_upload(self, name: str, content: str | bytes) -> UploadedFile:
        """Store a new upload atomically and return its listing entry.

        Args:
            name: File name; any directory part is dropped
            content: File content (string or bytes)

        Raises:
            ValueError: If the name is empty
        """
        file_name = Path(name or "").name
        if not file_name or file_name.endswith(TMP_SUFFIX):
            raise ValueError(f"Invalid upload name: {name!r}")

        self.uploads_root.mkdir(parents=True, exist_ok=True)
        path = self.uploads_root / file_name
        self._write_file_atomic(path, content)
        uploaded = self._to_uploaded_file(path)
        logger.info(f"Saved upload {uploaded.name} as {uploaded.id} ({uploaded.size} bytes)")
        return uploaded

    def delete_upload(self, path: str) -> bool:
        """Delete an uploaded file.

        Returns:
            True if the file was deleted, False if it didn't exist
        """
        target = self._resolve(path)
        if target.exists():
            target.unlink()
            logger.debug(f"Deleted upload: {target}")
            return True
        return False

    # ==================== Internals ====================

    def _list_uploaded_files(self) -> list[UploadedFile]:
        if not self.uploads_root.exists():
            return []

        files = [
            self._to_uploaded_file(path)
            for path in self.uploads_root.rglob("*")
            if path.is_file() and not path.name.startswith(".") and not path.name.endswith(TMP_SUFFIX)
        ]
        files.sort(key=lambda f: f.path)
        logger.debug(f"Listed {len(files)} uploaded files in {self.uploads_root}")
        return files

    def _to_uploaded_file(self, path: Path) -> UploadedFile:
        relative = path.relative_to(self.uploads_root).as_posix()
        stat = path.stat()
        return UploadedFile(
            id=file_id_for(relative),
            name=path.name,
            path=relative,
            size=stat.st_size,
            uploadedAt=int(stat.st_mtime * 1000),
        )

    def _resolve(self, path: str) -> Path:
        root = self.uploads_root.resolve()
        target = (root / path).resolve()
        if not target.is_relative_to(root):
            raise ValueError(f"Path outside uploads directory: {path}")
        return target

    def _read_text(self, path: str) -> str:
        target = self._resolve(path)
        content = target.read_text(encoding=self.encoding)
        logger.debug(f"Read upload: {target} ({len(content)} chars)")
        return content

    def _write_file_atomic(self, path: Path, content: str | bytes) -> int:
        """Write content atomically using temp file + rename.

        The temp file is created in the target directory so the rename stays
        on one filesystem.

        Returns:
            File size in bytes
        """
        fd = None
        tmp_path = None

        try:
            fd, tmp_path_str = tempfile.mkstemp(dir=path.parent, suffix=TMP_SUFFIX, prefix=f".{path.name}.")
            tmp_path = Path(tmp_path_str)

            if isinstance(content, str):
                os.write(fd, content.encode(self.encoding))
            else:
                os.write(fd, content)

            os.close(fd)
            fd = None  # Mark as closed

            # Atomic rename (overwrites existing file)
            tmp_path.replace(path)

            size = path.stat().st_size
            logger.debug(f"Wrote file atomically: {path} ({size} bytes)")
            return size

        except Exception as e:
            # Clean up temp file on failure
            if fd is not None:
                try:
                    os.close(fd)
                except OSError:
                    pass
            if tmp_path and tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass
            logger.error(f"Atomic write failed for {path}: {e}")
            raise
