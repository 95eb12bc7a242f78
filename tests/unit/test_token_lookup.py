"""Tests for jwt_issuer.issuance.lookup — TokenLookup."""
from __future__ import annotations

import pytest

from jwt_issuer.errors import StorageError
from jwt_issuer.issuance import CLAIMS_PREFIX, TOKEN_PREFIX, TokenLookup
from jwt_issuer.storage import InMemoryStorage


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def lookup(storage: InMemoryStorage) -> TokenLookup:
    return TokenLookup(storage)


class TestTokenLookup:
    def test_returns_stored_token_bytes(
        self, lookup: TokenLookup, storage: InMemoryStorage
    ) -> None:
        storage.put(TOKEN_PREFIX + "abc", b"header.payload.sig")
        assert lookup.get("abc") == b"header.payload.sig"

    def test_unknown_identifier_returns_none(self, lookup: TokenLookup) -> None:
        assert lookup.get("never-issued") is None

    def test_empty_identifier_returns_none(self, lookup: TokenLookup) -> None:
        assert lookup.get("") is None
        assert lookup.get_claims("") is None

    def test_get_claims(self, lookup: TokenLookup, storage: InMemoryStorage) -> None:
        storage.put(CLAIMS_PREFIX + "abc", b'{"sub": "svc", "jti": "abc"}')
        assert lookup.get_claims("abc") == {"sub": "svc", "jti": "abc"}

    def test_corrupt_claims_record(self, lookup: TokenLookup, storage: InMemoryStorage) -> None:
        storage.put(CLAIMS_PREFIX + "abc", b"\xff\xfe")
        with pytest.raises(StorageError):
            lookup.get_claims("abc")

    def test_non_object_claims_record(
        self, lookup: TokenLookup, storage: InMemoryStorage
    ) -> None:
        storage.put(CLAIMS_PREFIX + "abc", b"[1, 2, 3]")
        with pytest.raises(StorageError):
            lookup.get_claims("abc")
