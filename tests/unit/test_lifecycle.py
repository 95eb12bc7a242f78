"""Tests for jwt_issuer.issuance.lifecycle — issue, renew, revoke."""
from __future__ import annotations

import datetime
import json

import jwt
import pytest
from jwt import api_jws

from jwt_issuer.claims import IssueRequest
from jwt_issuer.errors import (
    InvalidClaimsError,
    InvalidLeaseError,
    MissingIdentifierError,
    NotRenewableError,
    StorageError,
    UnknownRoleError,
)
from jwt_issuer.issuance import (
    CLAIMS_PREFIX,
    DEFAULT_LEASE_DURATION,
    TOKEN_PREFIX,
    CredentialLifecycle,
    Lease,
    TokenLookup,
)
from jwt_issuer.roles import RoleRegistry
from jwt_issuer.storage import InMemoryStorage

NOW = datetime.datetime(2024, 6, 1, 8, 0, 0, tzinfo=datetime.timezone.utc)


class _Clock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime.datetime) -> None:
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += datetime.timedelta(**kwargs)


class _TokenWriteFailingStorage(InMemoryStorage):
    """Fails every put under the token namespace while ``fail_tokens`` is set."""

    def __init__(self, fail_tokens: bool = True) -> None:
        super().__init__()
        self.fail_tokens = fail_tokens

    def put(self, key: str, value: bytes) -> None:
        if self.fail_tokens and key.startswith(TOKEN_PREFIX):
            raise StorageError(f"disk full writing {key}")
        super().put(key, value)


class _RecordingStorage(InMemoryStorage):
    def __init__(self) -> None:
        super().__init__()
        self.writes: list[str] = []

    def put(self, key: str, value: bytes) -> None:
        self.writes.append(key)
        super().put(key, value)


def _decode(token: str, key: str) -> dict[str, object]:
    return jwt.decode(
        token,
        key,
        algorithms=["HS256"],
        options={"verify_exp": False, "verify_nbf": False, "verify_iat": False, "verify_aud": False},
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> _Clock:
    return _Clock(NOW)


@pytest.fixture()
def storage() -> _RecordingStorage:
    return _RecordingStorage()


@pytest.fixture()
def registry(storage: _RecordingStorage, hmac_secret: str) -> RoleRegistry:
    registry = RoleRegistry(storage)
    registry.write("leased", algorithm="HS256", key=hmac_secret, iss="issuer", sub="svc")
    registry.write("oneshot", algorithm="HS256", key=hmac_secret, lease_enabled=False)
    return registry


@pytest.fixture()
def lifecycle(
    storage: _RecordingStorage, registry: RoleRegistry, clock: _Clock
) -> CredentialLifecycle:
    return CredentialLifecycle(storage, registry=registry, clock=clock)


# ---------------------------------------------------------------------------
# Issue
# ---------------------------------------------------------------------------


class TestIssue:
    def test_leased_issue_persists_token_and_claims(
        self, lifecycle: CredentialLifecycle, storage: _RecordingStorage
    ) -> None:
        credential = lifecycle.issue("leased", IssueRequest(aud="api"))
        lookup = TokenLookup(storage)
        assert lookup.get(credential.identifier) == credential.token.encode("utf-8")
        assert lookup.get_claims(credential.identifier) == credential.claims

    def test_leased_issue_returns_lease(self, lifecycle: CredentialLifecycle) -> None:
        credential = lifecycle.issue("leased")
        lease = credential.lease
        assert lease is not None
        assert lease.role == "leased"
        assert lease.jti == credential.identifier
        assert lease.duration == DEFAULT_LEASE_DURATION
        assert lease.expires_at == NOW + datetime.timedelta(hours=720)
        assert credential.leased

    def test_token_carries_merged_claims(
        self, lifecycle: CredentialLifecycle, hmac_secret: str
    ) -> None:
        credential = lifecycle.issue("leased", IssueRequest(claims={"scope": "read"}))
        decoded = _decode(credential.token, hmac_secret)
        assert decoded["iss"] == "issuer"
        assert decoded["sub"] == "svc"
        assert decoded["scope"] == "read"
        assert decoded["jti"] == credential.identifier
        assert decoded["iat"] == int(NOW.timestamp())

    def test_claims_written_before_token(
        self, lifecycle: CredentialLifecycle, storage: _RecordingStorage
    ) -> None:
        storage.writes.clear()
        credential = lifecycle.issue("leased")
        assert storage.writes == [
            CLAIMS_PREFIX + credential.identifier,
            TOKEN_PREFIX + credential.identifier,
        ]

    def test_unleased_issue_writes_nothing(
        self, lifecycle: CredentialLifecycle, storage: _RecordingStorage
    ) -> None:
        storage.writes.clear()
        credential = lifecycle.issue("oneshot")
        assert credential.lease is None
        assert storage.writes == []
        assert TokenLookup(storage).get(credential.identifier) is None

    def test_unleased_response_has_only_jti_and_token(
        self, lifecycle: CredentialLifecycle
    ) -> None:
        response = lifecycle.issue("oneshot").to_response()
        assert set(response) == {"jti", "token"}

    def test_unknown_role_writes_nothing(
        self, lifecycle: CredentialLifecycle, storage: _RecordingStorage
    ) -> None:
        storage.writes.clear()
        with pytest.raises(UnknownRoleError):
            lifecycle.issue("ghost")
        assert storage.writes == []

    def test_malformed_claims_writes_nothing(
        self, lifecycle: CredentialLifecycle, storage: _RecordingStorage
    ) -> None:
        storage.writes.clear()
        with pytest.raises(InvalidClaimsError):
            lifecycle.issue("leased", IssueRequest(claims="not json"))
        assert storage.writes == []

    def test_numeric_issuer_in_free_form_claims(
        self, lifecycle: CredentialLifecycle, storage: _RecordingStorage, hmac_secret: str
    ) -> None:
        credential = lifecycle.issue("leased", IssueRequest(claims={"iss": 123, "aud": 7}))
        payload = json.loads(api_jws.decode(credential.token, hmac_secret, algorithms=["HS256"]))
        assert payload["iss"] == 123
        assert payload["aud"] == 7
        assert TokenLookup(storage).get_claims(credential.identifier) == payload

    def test_caller_supplied_jti_is_identifier(self, lifecycle: CredentialLifecycle) -> None:
        credential = lifecycle.issue("leased", IssueRequest(jti="fixed-id"))
        assert credential.identifier == "fixed-id"
        assert credential.lease is not None
        assert credential.lease.lease_id == "leased/fixed-id"

    def test_token_write_failure_rolls_back_claims(self, hmac_secret: str) -> None:
        storage = _TokenWriteFailingStorage()
        RoleRegistry(storage).write("leased", algorithm="HS256", key=hmac_secret)
        lifecycle = CredentialLifecycle(storage)
        with pytest.raises(StorageError):
            lifecycle.issue("leased", IssueRequest(jti="doomed"))
        assert storage.get(CLAIMS_PREFIX + "doomed") is None
        assert storage.get(TOKEN_PREFIX + "doomed") is None

    def test_failed_reissue_keeps_existing_claims(self, hmac_secret: str) -> None:
        storage = _TokenWriteFailingStorage(fail_tokens=False)
        RoleRegistry(storage).write("leased", algorithm="HS256", key=hmac_secret)
        lifecycle = CredentialLifecycle(storage)
        first = lifecycle.issue("leased", IssueRequest(jti="shared", claims={"v": 1}))

        storage.fail_tokens = True
        with pytest.raises(StorageError):
            lifecycle.issue("leased", IssueRequest(jti="shared", claims={"v": 2}))

        lookup = TokenLookup(storage)
        assert lookup.get("shared") == first.token.encode("utf-8")
        assert lookup.get_claims("shared") == first.claims


# ---------------------------------------------------------------------------
# Renew
# ---------------------------------------------------------------------------


class TestRenew:
    def test_renew_resets_exp_and_keeps_other_claims(
        self, lifecycle: CredentialLifecycle, clock: _Clock, hmac_secret: str
    ) -> None:
        original = lifecycle.issue("leased", IssueRequest(claims={"scope": "read"}))
        assert original.lease is not None
        clock.advance(hours=1)

        renewed = lifecycle.renew(original.lease)

        decoded = _decode(renewed.token, hmac_secret)
        assert decoded["exp"] == int((clock.now + DEFAULT_LEASE_DURATION).timestamp())
        for name in ("iss", "sub", "scope", "nbf", "iat", "jti"):
            assert decoded[name] == original.claims[name]
        assert renewed.identifier == original.identifier

    def test_renew_overwrites_stored_records(
        self, lifecycle: CredentialLifecycle, storage: _RecordingStorage, clock: _Clock
    ) -> None:
        original = lifecycle.issue("leased")
        clock.advance(minutes=5)
        renewed = lifecycle.renew(original.lease)  # type: ignore[arg-type]
        lookup = TokenLookup(storage)
        assert lookup.get(original.identifier) == renewed.token.encode("utf-8")
        assert lookup.get_claims(original.identifier) == renewed.claims

    def test_renew_accepts_lease_dict(
        self, lifecycle: CredentialLifecycle, clock: _Clock
    ) -> None:
        original = lifecycle.issue("leased")
        lease_dict = json.loads(json.dumps(original.lease.to_dict()))  # type: ignore[union-attr]
        clock.advance(seconds=30)
        renewed = lifecycle.renew(lease_dict)
        assert renewed.lease is not None
        assert renewed.lease.issued_at == clock.now

    def test_renew_uses_current_role_key(
        self, lifecycle: CredentialLifecycle, registry: RoleRegistry
    ) -> None:
        original = lifecycle.issue("leased")
        rotated = "rotated-" + "f" * 64
        registry.write("leased", algorithm="HS256", key=rotated)
        renewed = lifecycle.renew(original.lease)  # type: ignore[arg-type]
        assert _decode(renewed.token, rotated)["jti"] == original.identifier

    def test_renew_when_leasing_disabled(
        self, lifecycle: CredentialLifecycle, registry: RoleRegistry, hmac_secret: str
    ) -> None:
        original = lifecycle.issue("leased")
        registry.write("leased", algorithm="HS256", key=hmac_secret, lease_enabled=False)
        with pytest.raises(NotRenewableError):
            lifecycle.renew(original.lease)  # type: ignore[arg-type]

    def test_renew_after_role_deleted(
        self, lifecycle: CredentialLifecycle, registry: RoleRegistry
    ) -> None:
        original = lifecycle.issue("leased")
        registry.delete("leased")
        with pytest.raises(UnknownRoleError):
            lifecycle.renew(original.lease)  # type: ignore[arg-type]

    def test_renew_after_revoke_fails(self, lifecycle: CredentialLifecycle) -> None:
        original = lifecycle.issue("leased")
        lifecycle.revoke(original.lease)  # type: ignore[arg-type]
        with pytest.raises(NotRenewableError):
            lifecycle.renew(original.lease)  # type: ignore[arg-type]

    def test_renew_missing_identifiers(self, lifecycle: CredentialLifecycle) -> None:
        with pytest.raises(MissingIdentifierError):
            lifecycle.renew({"internal_data": {"role": "leased"}})
        with pytest.raises(MissingIdentifierError):
            lifecycle.renew({"internal_data": {"jti": "abc"}})

    def test_failed_renew_keeps_stored_token_and_claims(
        self, hmac_secret: str, clock: _Clock
    ) -> None:
        storage = _TokenWriteFailingStorage(fail_tokens=False)
        RoleRegistry(storage).write("leased", algorithm="HS256", key=hmac_secret)
        lifecycle = CredentialLifecycle(storage, clock=clock)
        original = lifecycle.issue("leased")
        assert original.lease is not None

        clock.advance(hours=1)
        storage.fail_tokens = True
        with pytest.raises(StorageError):
            lifecycle.renew(original.lease)

        lookup = TokenLookup(storage)
        assert lookup.get(original.identifier) == original.token.encode("utf-8")
        assert lookup.get_claims(original.identifier) == original.claims


# ---------------------------------------------------------------------------
# Revoke
# ---------------------------------------------------------------------------


class TestRevoke:
    def test_revoke_removes_token_and_claims(
        self, lifecycle: CredentialLifecycle, storage: _RecordingStorage
    ) -> None:
        credential = lifecycle.issue("leased")
        lifecycle.revoke(credential.lease)  # type: ignore[arg-type]
        lookup = TokenLookup(storage)
        assert lookup.get(credential.identifier) is None
        assert lookup.get_claims(credential.identifier) is None

    def test_revoke_twice_succeeds(self, lifecycle: CredentialLifecycle) -> None:
        credential = lifecycle.issue("leased")
        lifecycle.revoke(credential.lease)  # type: ignore[arg-type]
        lifecycle.revoke(credential.lease)  # type: ignore[arg-type]

    def test_revoke_leaves_other_credentials(
        self, lifecycle: CredentialLifecycle, storage: _RecordingStorage
    ) -> None:
        first = lifecycle.issue("leased")
        second = lifecycle.issue("leased")
        lifecycle.revoke(first.lease)  # type: ignore[arg-type]
        assert TokenLookup(storage).get(second.identifier) is not None

    def test_revoke_without_jti(self, lifecycle: CredentialLifecycle) -> None:
        with pytest.raises(MissingIdentifierError):
            lifecycle.revoke(Lease(role="leased", jti=""))


# ---------------------------------------------------------------------------
# Lease serialization
# ---------------------------------------------------------------------------


class TestLease:
    def test_to_dict_shape(self) -> None:
        lease = Lease(role="svc", jti="abc", claims={"sub": "x"}, issued_at=NOW)
        data = lease.to_dict()
        assert data["lease_id"] == "svc/abc"
        assert data["lease_duration"] == 2592000
        assert data["renewable"] is True
        assert data["internal_data"] == {"role": "svc", "jti": "abc", "claims": {"sub": "x"}}

    def test_from_dict_round_trip(self) -> None:
        lease = Lease(role="svc", jti="abc", claims={"sub": "x"}, issued_at=NOW)
        assert Lease.from_dict(lease.to_dict()) == lease

    def test_from_dict_tolerates_missing_fields(self) -> None:
        lease = Lease.from_dict({})
        assert lease.role == ""
        assert lease.jti == ""
        assert lease.duration == DEFAULT_LEASE_DURATION

    def test_from_dict_rejects_malformed_issued_at(self) -> None:
        data = Lease(role="svc", jti="abc").to_dict()
        data["issued_at"] = "yesterday-ish"
        with pytest.raises(InvalidLeaseError):
            Lease.from_dict(data)

    def test_from_dict_rejects_non_numeric_duration(self) -> None:
        data = Lease(role="svc", jti="abc").to_dict()
        data["lease_duration"] = "forever"
        with pytest.raises(InvalidLeaseError):
            Lease.from_dict(data)

    def test_malformed_lease_is_a_validation_error(
        self, lifecycle: CredentialLifecycle
    ) -> None:
        credential = lifecycle.issue("leased")
        assert credential.lease is not None
        data = {**credential.lease.to_dict(), "issued_at": "not-a-date"}
        with pytest.raises(InvalidLeaseError):
            lifecycle.renew(data)
        with pytest.raises(InvalidLeaseError):
            lifecycle.revoke(data)
