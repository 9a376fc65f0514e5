from __future__ import annotations

import pytest

from webapp.core.errors import ObjectStoreError
from webapp.domain.images import build_storage_key, is_allowed_content_type, safe_file_name
from webapp.repositories.object_storage import FileSystemObjectStore


def test_put_exists_delete(tmp_path):
    store = FileSystemObjectStore(tmp_path)

    key = store.put("7/abc_photo.png", b"data", "image/png")

    assert key == "7/abc_photo.png"
    assert store.exists(key)
    assert (tmp_path / "7" / "abc_photo.png").read_bytes() == b"data"
    store.delete(key)
    assert not store.exists(key)
    # deleting a missing object is a no-op
    store.delete(key)


def test_put_refuses_existing_key(tmp_path):
    store = FileSystemObjectStore(tmp_path)
    store.put("1/a.png", b"one")
    with pytest.raises(ObjectStoreError):
        store.put("1/a.png", b"two")
    assert (tmp_path / "1" / "a.png").read_bytes() == b"one"


@pytest.mark.parametrize("key", ["", "/etc/passwd", "../outside.png", "1/../../outside.png"])
def test_keys_cannot_escape_root(tmp_path, key):
    store = FileSystemObjectStore(tmp_path / "root")
    with pytest.raises(ObjectStoreError):
        store.put(key, b"x")


def test_content_type_allow_list():
    assert is_allowed_content_type("image/png")
    assert is_allowed_content_type(" IMAGE/JPEG ")
    assert is_allowed_content_type("image/jpg")
    assert not is_allowed_content_type("image/gif")
    assert not is_allowed_content_type(None)


def test_storage_keys_are_unique_and_safe():
    first = build_storage_key(3, "../../My Photo.png")
    second = build_storage_key(3, "../../My Photo.png")

    assert first != second
    assert first.startswith("3/")
    assert first.endswith("_My_Photo.png")
    assert ".." not in first
    assert safe_file_name("") == "upload"
    assert safe_file_name("C:\\tmp\\a b.jpg") == "a_b.jpg"
