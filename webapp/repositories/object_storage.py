"""
Object storage adapter for image blobs.

Blobs live under STORAGE_DIR, one file per key. Keys are relative paths such
as ``12/3f2a..._photo.png``; anything that would escape the root is refused.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from webapp.core.config import get_settings
from webapp.core.errors import ObjectStoreError

logger = logging.getLogger(__name__)


class FileSystemObjectStore:
    """put/delete/exists over a local directory tree."""

    def __init__(self, root: str | os.PathLike | None = None) -> None:
        self.root = Path(root or get_settings().storage_dir).resolve()

    def _path_for(self, key: str) -> Path:
        if not key or key.startswith(("/", "\\")):
            raise ObjectStoreError("Invalid storage key", key)
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise ObjectStoreError("Invalid storage key", key)
        return path

    def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "xb") as f:
                f.write(data)
        except FileExistsError as exc:
            raise ObjectStoreError("Storage key already in use", key) from exc
        except OSError as exc:
            raise ObjectStoreError(f"Failed to store object: {exc}", key) from exc
        logger.debug("Stored object %s (%d bytes, %s)", key, len(data), content_type)
        return key

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise ObjectStoreError(f"Failed to delete object: {exc}", key) from exc

    def exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

