"""Tests for the local public disk."""

import os
import stat

import pytest

from conftest import make_upload


class TestPublicStorage:
    def test_store_writes_under_path(self, storage, jpeg_bytes):
        key = storage.store(make_upload(jpeg_bytes, "photo.JPG"), visibility="public", path="products")

        assert key.startswith("products/")
        assert key.endswith(".jpg")
        assert storage.exists(key)
        assert storage.path(key).read_bytes() == jpeg_bytes

    def test_explicit_extension_wins(self, storage, png_bytes):
        key = storage.store(make_upload(png_bytes, "photo.jpeg"), path="products", extension="png")
        assert key.endswith(".png")

    def test_keys_are_unique(self, storage, jpeg_bytes):
        first = storage.store(make_upload(jpeg_bytes), path="products")
        second = storage.store(make_upload(jpeg_bytes), path="products")
        assert first != second

    def test_public_files_are_world_readable(self, storage, jpeg_bytes):
        key = storage.store(make_upload(jpeg_bytes), visibility="public", path="products")
        assert stat.S_IMODE(os.stat(storage.path(key)).st_mode) == 0o644

    def test_private_files_are_owner_only(self, storage, jpeg_bytes):
        key = storage.store(make_upload(jpeg_bytes), visibility="private", path="products")
        assert stat.S_IMODE(os.stat(storage.path(key)).st_mode) == 0o600

    def test_unknown_visibility(self, storage, jpeg_bytes):
        with pytest.raises(ValueError):
            storage.store(make_upload(jpeg_bytes), visibility="shared", path="products")

    def test_no_temporary_files_left(self, storage, jpeg_bytes):
        key = storage.store(make_upload(jpeg_bytes), path="products")
        assert os.listdir(storage.path(key).parent) == [key.split("/")[-1]]

    def test_url_has_storage_prefix(self, storage):
        assert storage.url("products/a.jpg") == "storage/products/a.jpg"
        assert storage.url(None) is None

    def test_delete(self, storage, jpeg_bytes):
        key = storage.store(make_upload(jpeg_bytes), path="products")
        assert storage.delete(key) is True
        assert not storage.exists(key)
        assert storage.delete(key) is False
        assert storage.delete(None) is False
