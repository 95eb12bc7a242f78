"""Lease and IssuedCredential — what issuance hands back to the caller.

A :class:`Lease` is the metadata the lease-management platform keeps for a
persisted credential and passes back on renew or revoke. Its internal data
(``role``, ``jti``, ``claims``) is enough to re-sign the token without the
original request; key material is never part of it.
"""
from __future__ import annotations

import datetime
from collections.abc import Mapping
from dataclasses import dataclass, field

from jwt_issuer.errors import InvalidLeaseError
from jwt_issuer.types import ClaimSet

# Fixed operational lease window. Roles cannot override it; operators can
# change it process-wide through IssuerConfig.lease_duration_seconds.
DEFAULT_LEASE_DURATION = datetime.timedelta(hours=720)


@dataclass
class Lease:
    """Renewal metadata for a persisted credential.

    Parameters
    ----------
    role:
        Name of the issuing role.
    jti:
        Identifier of the credential.
    claims:
        Claim set the token was last signed with.
    duration:
        Length of the lease window.
    issued_at:
        UTC time the lease window started.
    renewable:
        Whether the lease platform may call renew.
    """

    role: str
    jti: str
    claims: ClaimSet = field(default_factory=dict)
    duration: datetime.timedelta = DEFAULT_LEASE_DURATION
    issued_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )
    renewable: bool = True

    @property
    def lease_id(self) -> str:
        return f"{self.role}/{self.jti}"

    @property
    def expires_at(self) -> datetime.datetime:
        return self.issued_at + self.duration

    def internal_data(self) -> dict[str, object]:
        """Return the data needed to renew or revoke this credential."""
        return {"role": self.role, "jti": self.jti, "claims": dict(self.claims)}

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain, JSON-compatible dictionary."""
        return {
            "lease_id": self.lease_id,
            "lease_duration": int(self.duration.total_seconds()),
            "renewable": self.renewable,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "internal_data": self.internal_data(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Lease":
        """Reconstruct a Lease from :meth:`to_dict` output.

        Missing identifiers are kept as empty strings; the lifecycle
        operations decide whether they can proceed without them.

        Raises
        ------
        InvalidLeaseError
            If ``issued_at`` is not an ISO 8601 timestamp or
            ``lease_duration`` is not a whole number of seconds.
        """
        internal = data.get("internal_data") or {}
        if not isinstance(internal, Mapping):
            internal = {}
        claims = internal.get("claims") or {}
        issued_at_raw = data.get("issued_at")
        try:
            issued_at = (
                datetime.datetime.fromisoformat(str(issued_at_raw))
                if issued_at_raw
                else datetime.datetime.now(datetime.timezone.utc)
            )
        except ValueError as exc:
            raise InvalidLeaseError(
                f"Lease issued_at is not a timestamp: {issued_at_raw!r}"
            ) from exc
        duration_raw = data.get("lease_duration") or DEFAULT_LEASE_DURATION.total_seconds()
        try:
            duration = datetime.timedelta(seconds=int(duration_raw))  # type: ignore[call-overload]
        except (TypeError, ValueError) as exc:
            raise InvalidLeaseError(
                f"Lease lease_duration is not a number of seconds: {duration_raw!r}"
            ) from exc
        return cls(
            role=str(internal.get("role") or ""),
            jti=str(internal.get("jti") or ""),
            claims=dict(claims) if isinstance(claims, Mapping) else {},
            duration=duration,
            issued_at=issued_at,
            renewable=bool(data.get("renewable", True)),
        )


@dataclass
class IssuedCredential:
    """A freshly signed credential.

    Parameters
    ----------
    identifier:
        The token identifier (``jti``).
    token:
        Compact JWS serialization.
    role_name:
        Role the credential was issued under.
    claims:
        The claim set that was signed.
    lease:
        Lease metadata, or None when the role has leasing disabled.
    """

    identifier: str
    token: str
    role_name: str
    claims: ClaimSet = field(default_factory=dict)
    lease: Lease | None = None

    @property
    def leased(self) -> bool:
        return self.lease is not None

    def to_response(self) -> dict[str, object]:
        """Return the caller-facing response body."""
        data: dict[str, object] = {"jti": self.identifier, "token": self.token}
        if self.lease is not None:
            data["role"] = self.role_name
            data["lease"] = self.lease.to_dict()
        return data
