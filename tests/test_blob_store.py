"""
NoteShare Backend — Blob Store Tests
======================================

What we test:
    ✅ Storage keys: {user_id}/{token}.{extension}
    ✅ Upload/download under {root}/{bucket}/{key}
    ✅ No overwrite, no escape from the storage root
    ✅ Size limit
"""

import re
from uuid import uuid4

import pytest

from noteshare.exceptions import FileStorageError, ValidationError
from noteshare.services.blob_store import BlobStore, build_storage_key, file_extension


class TestStorageKeys:
    def test_extension_after_last_dot(self):
        assert file_extension("notes.pdf") == "pdf"
        assert file_extension("lecture.v2.final.png") == "png"
        assert file_extension("README") == "README"

    def test_key_shape(self):
        user_id = uuid4()
        key, extension = build_storage_key(user_id, "notes.pdf")

        assert extension == "pdf"
        assert re.fullmatch(rf"{user_id}/[0-9a-f]{{32}}\.pdf", key)

    def test_extension_ignores_directories(self):
        assert file_extension("a/b") == "b"
        assert file_extension("x./y/z") == "z"
        assert file_extension("scans/week1.jpg") == "jpg"

    def test_key_has_no_client_path_segments(self):
        user_id = uuid4()
        key, extension = build_storage_key(user_id, "x./y/z")

        assert extension == "z"
        assert key.count("/") == 1
        assert key.startswith(f"{user_id}/")

    def test_keys_are_unique(self):
        user_id = uuid4()
        keys = {build_storage_key(user_id, "a.png")[0] for _ in range(50)}
        assert len(keys) == 50


class TestBlobStore:
    def setup_method(self):
        self.user_id = uuid4()

    @pytest.mark.asyncio
    async def test_upload_then_download(self, temp_storage):
        store = BlobStore(storage_root=temp_storage)
        key = f"{self.user_id}/abc.pdf"

        assert await store.upload("notes", key, b"%PDF-1.4") == key
        assert (store.storage_root / "notes" / key).read_bytes() == b"%PDF-1.4"
        assert await store.download("notes", key) == b"%PDF-1.4"

    @pytest.mark.asyncio
    async def test_upload_never_overwrites(self, temp_storage):
        store = BlobStore(storage_root=temp_storage)
        key = f"{self.user_id}/abc.pdf"
        await store.upload("notes", key, b"first")

        with pytest.raises(FileStorageError):
            await store.upload("notes", key, b"second")

        assert await store.download("notes", key) == b"first"

    @pytest.mark.asyncio
    async def test_missing_blob(self, temp_storage):
        store = BlobStore(storage_root=temp_storage)
        with pytest.raises(FileStorageError):
            await store.download("notes", f"{self.user_id}/missing.png")

    @pytest.mark.asyncio
    async def test_key_cannot_escape_root(self, temp_storage):
        store = BlobStore(storage_root=temp_storage)
        with pytest.raises(FileStorageError, match="Invalid storage key"):
            await store.download("notes", "../../etc/passwd")

    def test_size_limit(self, temp_storage):
        store = BlobStore(storage_root=temp_storage, max_file_size=1_048_576)
        store.validate_size(1_048_576)
        with pytest.raises(ValidationError) as exc_info:
            store.validate_size(1_048_577)
        assert exc_info.value.field == "file"

    def test_is_writable(self, temp_storage):
        store = BlobStore(storage_root=temp_storage)
        assert store.is_writable() is True
        assert list(store.storage_root.iterdir()) == []
