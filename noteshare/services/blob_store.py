"""
NoteShare Backend — Blob Store
================================

What:  Bucketed file storage for uploaded notes: upload(bucket, key, bytes)
       and download(bucket, key).
How:   Files live at {storage_root}/{bucket}/{key}, written and read with
       aiofiles so disk I/O does not block the event loop.
Who:   NoteService uploads on submission; RatingService downloads.

Keys:
    {user_id}/{token}.{extension}. The token is a random UUID hex, the
    extension is whatever followed the last "." in the basename of the
    original filename, so it never carries a "/". Every resolved path is
    still checked to stay inside the storage root.

An upload never overwrites: if the key is taken the upload fails.
"""

import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional, Tuple

import aiofiles

from noteshare.config import settings
from noteshare.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)


def file_extension(filename: str) -> str:
    """Text after the last '.' of the basename; the whole basename when there is no dot."""
    return PurePosixPath(filename).name.rsplit(".", 1)[-1]


def build_storage_key(user_id: uuid.UUID, filename: str) -> Tuple[str, str]:
    """
    Derive a fresh storage key for an upload.

    Returns:
        (key, extension), e.g. ("4f1c.../9b2e....pdf", "pdf")
    """
    extension = file_extension(filename)
    token = uuid.uuid4().hex
    return f"{user_id}/{token}.{extension}", extension


class BlobStore:
    """
    Local-disk implementation of the blob store collaborator.

    Directory Structure:
        storage/
        └── notes/
            └── <user_id>/
                ├── 3b5e...c1.pdf
                └── 8a0f...77.jpg
    """

    def __init__(self, storage_root: Optional[str] = None, max_file_size: Optional[int] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
            max_file_size: Override the upload size limit in bytes.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.max_file_size = max_file_size or settings.max_file_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("BlobStore initialized with storage_root=%s", self.storage_root)

    def _resolve(self, bucket: str, key: str) -> Path:
        path = (self.storage_root / bucket / key).resolve()
        if self.storage_root not in path.parents:
            raise FileStorageError(
                message="Invalid storage key",
                context={"bucket": bucket, "key": key},
            )
        return path

    def validate_size(self, size: int) -> None:
        """Reject uploads above the configured limit, before touching storage."""
        if size > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": size},
            )

    async def upload(self, bucket: str, key: str, data: bytes) -> str:
        """
        Store `data` under bucket/key.

        Returns:
            The key, as stored.

        Raises:
            FileStorageError if the key already exists or the write fails.
        """
        path = self._resolve(bucket, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # "xb": fail instead of overwriting an existing blob
            async with aiofiles.open(path, "xb") as f:
                await f.write(data)
        except OSError as e:
            logger.error("Failed to store blob %s/%s: %s", bucket, key, str(e))
            raise FileStorageError(
                message="Failed to save the uploaded file. Please try again.",
                context={"bucket": bucket, "key": key, "os_error": str(e)},
            )

        logger.info("Blob stored: %s/%s (%d bytes)", bucket, key, len(data))
        return key

    async def download(self, bucket: str, key: str) -> bytes:
        """
        Read the blob stored under bucket/key.

        Raises:
            FileStorageError if the blob is missing or unreadable.
        """
        path = self._resolve(bucket, key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            logger.error("Failed to read blob %s/%s: %s", bucket, key, str(e))
            raise FileStorageError(
                message="Could not download the file. Please try again.",
                context={"bucket": bucket, "key": key, "os_error": str(e)},
            )

    def is_writable(self) -> bool:
        """Health probe: the storage root exists and accepts new files."""
        probe = self.storage_root / f".probe-{uuid.uuid4().hex}"
        try:
            probe.write_bytes(b"")
            probe.unlink()
            return True
        except OSError as e:
            logger.warning("Storage probe failed: %s", str(e))
            return False


blob_store = BlobStore()
