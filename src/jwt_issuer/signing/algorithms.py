"""Algorithm and SigningFamily enumerations.

The algorithm table is closed: every name a role may declare is listed in
:class:`Algorithm`, and each maps to exactly one :class:`SigningFamily`.
Role validation and signer selection both read from this table.
"""
from __future__ import annotations

from enum import Enum

from jwt_issuer.errors import UnsupportedAlgorithmError


class SigningFamily(str, Enum):
    """Classes of algorithms sharing the same key-material shape.

    RSA:
        Asymmetric; key is a PEM-encoded RSA private key.
    EC:
        Asymmetric; key is a PEM-encoded elliptic-curve private key.
    HMAC:
        Symmetric; key is an opaque, non-empty shared secret.
    """

    RSA = "RSA"
    EC = "EC"
    HMAC = "HMAC"


class Algorithm(str, Enum):
    """JWS algorithm names accepted for a role."""

    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    PS256 = "PS256"
    PS384 = "PS384"
    PS512 = "PS512"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"
    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"

    @property
    def family(self) -> SigningFamily:
        return ALGORITHM_FAMILIES[self]

    @property
    def bits(self) -> int:
        """Digest width encoded in the algorithm name (256, 384 or 512)."""
        return int(self.value[2:])


ALGORITHM_FAMILIES: dict[Algorithm, SigningFamily] = {
    Algorithm.RS256: SigningFamily.RSA,
    Algorithm.RS384: SigningFamily.RSA,
    Algorithm.RS512: SigningFamily.RSA,
    Algorithm.PS256: SigningFamily.RSA,
    Algorithm.PS384: SigningFamily.RSA,
    Algorithm.PS512: SigningFamily.RSA,
    Algorithm.ES256: SigningFamily.EC,
    Algorithm.ES384: SigningFamily.EC,
    Algorithm.ES512: SigningFamily.EC,
    Algorithm.HS256: SigningFamily.HMAC,
    Algorithm.HS384: SigningFamily.HMAC,
    Algorithm.HS512: SigningFamily.HMAC,
}

DEFAULT_ALGORITHM: Algorithm = Algorithm.RS256


def parse_algorithm(name: str) -> Algorithm:
    """Return the :class:`Algorithm` for *name*.

    Raises
    ------
    UnsupportedAlgorithmError
        If *name* is not a supported algorithm.
    """
    try:
        return Algorithm(name)
    except ValueError:
        raise UnsupportedAlgorithmError(name) from None


def family_of(name: str) -> SigningFamily:
    """Return the signing family of algorithm *name*."""
    return parse_algorithm(name).family


def supported_algorithms() -> list[str]:
    """Return all supported algorithm names in declaration order."""
    return [a.value for a in Algorithm]
