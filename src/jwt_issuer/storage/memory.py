"""In-memory storage backend for development and tests."""
from __future__ import annotations

import threading

from jwt_issuer.storage.base import Storage


class InMemoryStorage(Storage):
    """Dictionary-backed storage. Data is lost when the process exits.

    Thread-safe: every operation holds a lock for the duration of the
    single-key access.
    """

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def list(self, prefix: str) -> list[str]:
        with self._lock:
            return sorted(k[len(prefix):] for k in self._data if k.startswith(prefix))

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data
