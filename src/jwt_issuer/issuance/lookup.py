"""TokenLookup — read-only access to persisted credentials."""
from __future__ import annotations

import json

from jwt_issuer.errors import StorageError
from jwt_issuer.storage.base import Storage
from jwt_issuer.types import ClaimSet

TOKEN_PREFIX = "tokens/"
CLAIMS_PREFIX = "claims/"


class TokenLookup:
    """Retrieve issued tokens and their claim records by identifier.

    Parameters
    ----------
    storage:
        Backend holding ``tokens/<id>`` and ``claims/<id>`` records.
    """

    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def get(self, identifier: str) -> bytes | None:
        """Return the signed token bytes, or None if never issued or revoked."""
        if not identifier:
            return None
        return self._storage.get(TOKEN_PREFIX + identifier)

    def get_claims(self, identifier: str) -> ClaimSet | None:
        """Return the stored claim set, or None if absent."""
        if not identifier:
            return None
        raw = self._storage.get(CLAIMS_PREFIX + identifier)
        if raw is None:
            return None
        try:
            claims = json.loads(raw.decode("utf-8"))
        except (ValueError, UnicodeDecodeError) as exc:
            raise StorageError(f"Corrupt claims record for {identifier!r}: {exc}") from exc
        if not isinstance(claims, dict):
            raise StorageError(f"Corrupt claims record for {identifier!r}: not an object")
        return claims
