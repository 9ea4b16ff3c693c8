from __future__ import annotations

import os
from dataclasses import dataclass

from flask import Flask, current_app


class StorageError(Exception):
    pass


@dataclass
class StoredObject:
    path: str
    url: str


class LocalObjectStorage:
    """
    Object storage backed by a directory. Keys are relative POSIX paths such
    as ``profile-images/12/<uuid>.png``; public URLs are ``<public_url>/<key>``.
    """

    def __init__(self, root: str, public_url: str = "/uploads"):
        self.root = os.path.abspath(root)
        self.public_url = public_url.rstrip("/")

    def _full_path(self, key: str) -> str:
        full = os.path.abspath(os.path.join(self.root, key))
        if os.path.commonpath([self.root, full]) != self.root:
            raise StorageError(f"Key escapes storage root: {key}")
        return full

    def upload(self, key: str, data: bytes, content_type: str | None = None) -> StoredObject:
        full = self._full_path(key)
        if os.path.exists(full):
            raise StorageError(f"Object already exists: {key}")
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "wb") as fh:
                fh.write(data)
        except OSError as e:
            raise StorageError(str(e)) from e
        return StoredObject(path=key, url=self.get_public_url(key))

    def delete(self, key: str) -> bool:
        full = self._full_path(key)
        if not os.path.exists(full):
            return False
        try:
            os.remove(full)
        except OSError as e:
            raise StorageError(str(e)) from e
        return True

    def get_public_url(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    def key_from_url(self, url: str) -> str | None:
        prefix = self.public_url + "/"
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None


def init_storage(app: Flask, storage=None) -> None:
    if storage is None:
        storage = LocalObjectStorage(app.config["UPLOAD_FOLDER"], app.config["PUBLIC_UPLOAD_URL"])
    app.extensions["object_storage"] = storage


def get_storage():
    return current_app.extensions["object_storage"]
