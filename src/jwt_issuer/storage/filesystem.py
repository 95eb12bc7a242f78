"""Filesystem storage backend.

Each key ``<namespace>/<name>`` is stored as the file
``<base_dir>/<namespace>/<quoted-name>.dat``. Names are percent-encoded so
that caller-supplied identifiers can never escape the namespace directory.
Writes go through a temporary file and :func:`os.replace`, which keeps each
single-key put atomic.
"""
from __future__ import annotations

import os
import tempfile
import urllib.parse
from pathlib import Path

from jwt_issuer.errors import StorageError
from jwt_issuer.storage.base import Storage

_SUFFIX = ".dat"


class FilesystemStorage(Storage):
    """Persist values as files under *base_dir*.

    Parameters
    ----------
    base_dir:
        Root directory for stored values. Created if missing.
    """

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = Path(base_dir)
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create storage directory {self._base_dir}: {exc}") from exc

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    # ------------------------------------------------------------------
    # Storage interface
    # ------------------------------------------------------------------

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Cannot read {key!r}: {exc}") from exc

    def put(self, key: str, value: bytes) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot delete {key!r}: {exc}") from exc

    def list(self, prefix: str) -> list[str]:
        namespace, _, name_prefix = prefix.partition("/")
        directory = self._base_dir / namespace
        if not directory.is_dir():
            return []
        names = (
            urllib.parse.unquote(entry.name[: -len(_SUFFIX)])
            for entry in directory.iterdir()
            if entry.is_file() and entry.name.endswith(_SUFFIX)
        )
        return sorted(n[len(name_prefix):] for n in names if n.startswith(name_prefix))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _path(self, key: str) -> Path:
        """Return the file path for *key*."""
        namespace, sep, name = key.partition("/")
        if not sep or not namespace or not name:
            raise StorageError(f"Storage key {key!r} must have the form '<namespace>/<name>'")
        safe_namespace = urllib.parse.quote(namespace, safe="")
        safe_name = urllib.parse.quote(name, safe="")
        return self._base_dir / safe_namespace / f"{safe_name}{_SUFFIX}"
