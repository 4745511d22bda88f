"""
Filesystem-backed object store.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote, unquote

from sitemap.storage.base import StoredObject


class ObjectStorageError(RuntimeError):
    """Raised when the local object store cannot be read or written."""


def _encode_key(key: str) -> str:
    if not key or not key.strip():
        raise ObjectStorageError("Invalid object key.")
    # keys carry `?` and `&`; keep one flat file per key
    return quote(key, safe="")


class LocalObjectStorage:
    """
    Local filesystem object store.

    Each key maps to one file in ``root_dir``. Writes go through a temporary
    file and an atomic rename, so readers observe either the previous or the
    new payload. The version tag is the SHA-256 of the payload.
    """

    _TMP_SUFFIX = ".tmp"

    def __init__(self, root_dir: str | Path = "data/sitemap") -> None:
        self._root_dir = Path(root_dir)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def put(self, key: str, payload: bytes) -> str | None:
        target = self._root_dir / _encode_key(key)
        self._root_dir.mkdir(parents=True, exist_ok=True)

        tmp_path = target.with_name(target.name + self._TMP_SUFFIX)
        try:
            with tmp_path.open("wb") as handle:
                handle.write(payload)
            tmp_path.replace(target)
        except OSError as exc:
            raise ObjectStorageError(f"Failed to write object {key!r}.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

        return hashlib.sha256(payload).hexdigest()

    def is_available(self, key: str) -> bool:
        return (self._root_dir / _encode_key(key)).is_file()

    def get(self, key: str) -> bytes | None:
        target = self._root_dir / _encode_key(key)
        if not target.is_file():
            return None
        try:
            return target.read_bytes()
        except OSError as exc:
            raise ObjectStorageError(f"Failed to read object {key!r}.") from exc

    def list(self) -> list[StoredObject]:
        if not self._root_dir.exists():
            return []
        objects: list[StoredObject] = []
        for path in sorted(self._root_dir.iterdir()):
            if not path.is_file() or path.name.endswith(self._TMP_SUFFIX):
                continue
            stat = path.stat()
            objects.append(
                StoredObject(
                    name=unquote(path.name),
                    size_bytes=stat.st_size,
                    last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )
        return objects

    def delete(self, key: str) -> None:
        target = self._root_dir / _encode_key(key)
        if not target.exists():
            return
        try:
            target.unlink()
        except OSError as exc:
            raise ObjectStorageError(f"Failed to delete object {key!r}.") from exc
