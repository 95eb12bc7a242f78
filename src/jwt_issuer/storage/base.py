"""Storage — the key-value contract the issuance engine persists through.

Keys are opaque strings namespaced by the engine as ``role/<name>``,
``tokens/<identifier>`` and ``claims/<identifier>``. Implementations must
make each individual get/put/delete atomic; nothing stronger is assumed.
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class Storage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Return the value stored under *key*, or None if absent.

        Raises
        ------
        StorageError
            If the backend cannot be read.
        """

    @abstractmethod
    def put(self, key: str, value: bytes) -> None:
        """Store *value* under *key*, replacing any previous value.

        Raises
        ------
        StorageError
            If the backend cannot be written.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*. Deleting a missing key is not an error.

        Raises
        ------
        StorageError
            If the backend cannot be written.
        """

    @abstractmethod
    def list(self, prefix: str) -> list[str]:
        """Return the sorted keys that start with *prefix*, prefix stripped."""
