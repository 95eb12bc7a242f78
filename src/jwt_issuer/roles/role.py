"""Role — the configuration a credential is issued under."""
from __future__ import annotations

import datetime
from dataclasses import dataclass, field

from jwt_issuer.roles.duration import format_seconds, parse_duration
from jwt_issuer.signing.algorithms import DEFAULT_ALGORITHM, SigningFamily, family_of


@dataclass
class Role:
    """A named binding of signing algorithm, key, claim defaults and lease policy.

    Parameters
    ----------
    name:
        Unique role name.
    algorithm:
        JWS algorithm name (e.g. ``"RS256"``, ``"ES384"``, ``"HS512"``).
    key:
        PEM private key for RSA/EC algorithms, shared secret for HMAC.
        Never included in :meth:`projection`.
    lease_enabled:
        If True, issued credentials are persisted and follow the lease
        lifecycle. If False, they are returned once and never stored.
    default_issuer:
        Seeds the ``iss`` claim when non-empty.
    default_subject:
        Seeds the ``sub`` claim when non-empty.
    default_audience:
        Seeds the ``aud`` claim when non-empty.
    default_expiration:
        Offset from issuance time used for the ``exp`` claim. Zero means
        no default expiration.
    """

    name: str
    algorithm: str = DEFAULT_ALGORITHM.value
    key: str = field(default="", repr=False)
    lease_enabled: bool = True
    default_issuer: str = ""
    default_subject: str = ""
    default_audience: str = ""
    default_expiration: datetime.timedelta = field(
        default_factory=lambda: datetime.timedelta(0)
    )

    @property
    def family(self) -> SigningFamily:
        return family_of(self.algorithm)

    def projection(self) -> dict[str, object]:
        """Return the displayable view of this role, with ``key`` omitted."""
        return {
            "name": self.name,
            "algorithm": self.algorithm,
            "lease_enabled": self.lease_enabled,
            "iss": self.default_issuer,
            "sub": self.default_subject,
            "aud": self.default_audience,
            "exp": format_seconds(self.default_expiration),
        }

    def to_dict(self) -> dict[str, object]:
        """Serialize to the storage representation, key included."""
        data = self.projection()
        data["key"] = self.key
        return data

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Role":
        """Reconstruct a Role from :meth:`to_dict` output."""
        return cls(
            name=str(data["name"]),
            algorithm=str(data.get("algorithm") or DEFAULT_ALGORITHM.value),
            key=str(data.get("key") or ""),
            lease_enabled=bool(data.get("lease_enabled", True)),
            default_issuer=str(data.get("iss") or ""),
            default_subject=str(data.get("sub") or ""),
            default_audience=str(data.get("aud") or ""),
            default_expiration=parse_duration(data.get("exp") or 0),  # type: ignore[arg-type]
        )
