import asyncio
import os
import tempfile

import pytest

from conftest import FakeMediaStore
from core.media import CloudinaryMediaStore, MediaUploadError, store_upload, upload_image
from utils.file_processor import save_upload_to_temp


def _temp_image():
    fd, path = tempfile.mkstemp(suffix=".jpg")
    with os.fdopen(fd, "wb") as fh:
        fh.write(b"jpeg bytes")
    return path


def test_upload_removes_local_file_on_success(monkeypatch):
    monkeypatch.setenv("CLOUDINARY_FOLDER", "FLOODS")
    store = FakeMediaStore()
    path = _temp_image()

    url = asyncio.run(upload_image(store, path))

    assert url == f"https://res.cloudinary.test/FLOODS/{os.path.basename(path)}"
    assert store.uploads[0]["existed"]
    assert not os.path.exists(path)


def test_upload_removes_local_file_on_failure():
    store = FakeMediaStore(fail=True)
    path = _temp_image()

    with pytest.raises(MediaUploadError):
        asyncio.run(upload_image(store, path))
    assert not os.path.exists(path)


def test_upload_without_path_is_noop():
    store = FakeMediaStore()
    assert asyncio.run(upload_image(store, None)) is None
    assert store.uploads == []


def test_default_folder(monkeypatch):
    monkeypatch.delenv("CLOUDINARY_FOLDER", raising=False)
    store = FakeMediaStore()
    asyncio.run(upload_image(store, _temp_image()))
    assert store.uploads[0]["folder"] == "SPACE_G"


def test_signature_is_order_independent():
    store = CloudinaryMediaStore("demo", "key", "secret")
    a = store.sign({"timestamp": 1700000000, "folder": "SPACE_G"})
    b = store.sign({"folder": "SPACE_G", "timestamp": 1700000000})
    assert a == b
    assert len(a) == 40
    assert a != CloudinaryMediaStore("demo", "key", "other").sign(
        {"folder": "SPACE_G", "timestamp": 1700000000}
    )


def test_unconfigured_store_refuses_upload():
    store = CloudinaryMediaStore(None, None, None)
    path = _temp_image()
    assert not store.is_configured
    with pytest.raises(MediaUploadError):
        asyncio.run(upload_image(store, path))
    assert not os.path.exists(path)


class _BrokenUpload:
    filename = "flood.jpg"
    content_type = "image/jpeg"

    async def read(self):
        raise OSError("client disconnected")


def test_failed_read_leaves_no_temp_file(monkeypatch, tmp_path):
    monkeypatch.setenv("UPLOAD_TMP_DIR", str(tmp_path))
    store = FakeMediaStore()

    with pytest.raises(OSError):
        asyncio.run(store_upload(store, _BrokenUpload()))
    assert list(tmp_path.iterdir()) == []
    assert store.uploads == []


def test_saved_upload_lands_in_configured_dir(monkeypatch, tmp_path):
    class _Upload(_BrokenUpload):
        async def read(self):
            return b"jpeg bytes"

    monkeypatch.setenv("UPLOAD_TMP_DIR", str(tmp_path))
    path = asyncio.run(save_upload_to_temp(_Upload()))
    assert os.path.dirname(path) == str(tmp_path)
    assert path.endswith(".jpg")
    with open(path, "rb") as fh:
        assert fh.read() == b"jpeg bytes"
