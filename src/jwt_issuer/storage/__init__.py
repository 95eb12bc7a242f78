"""Storage backends for issued credentials and role records.

Quick start
-----------
::

    from jwt_issuer.storage import InMemoryStorage

    storage = InMemoryStorage()
    storage.put("tokens/abc", b"eyJ...")
    print(storage.get("tokens/abc"))
"""
from __future__ import annotations

from jwt_issuer.storage.base import Storage
from jwt_issuer.storage.filesystem import FilesystemStorage
from jwt_issuer.storage.memory import InMemoryStorage

__all__ = [
    "FilesystemStorage",
    "InMemoryStorage",
    "Storage",
]
