"""Per-family signing strategies.

Each :class:`Signer` is bound to one algorithm at construction and exposes
``sign(key, claims)``. Asymmetric signers decode the PEM key with
``cryptography`` first so that a key of the wrong type is reported as a
:class:`~jwt_issuer.errors.SigningFailureError` before PyJWT is invoked.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt import api_jws

from jwt_issuer.errors import SigningFailureError
from jwt_issuer.signing.algorithms import Algorithm, SigningFamily
from jwt_issuer.types import ClaimSet

# Curve required for each ES bit width (RFC 7518 section 3.4).
_EC_CURVES: dict[int, str] = {
    256: ec.SECP256R1.name,
    384: ec.SECP384R1.name,
    512: ec.SECP521R1.name,
}


def load_private_key(key: str) -> Any:
    """Decode an unencrypted PEM private key.

    Raises
    ------
    SigningFailureError
        If *key* is not a readable, unencrypted PEM private key.
    """
    try:
        return serialization.load_pem_private_key(key.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningFailureError(f"Cannot decode private key: {exc}") from exc


class Signer(ABC):
    """Signs a claim set with a single, fixed algorithm.

    Parameters
    ----------
    algorithm:
        The algorithm this signer produces tokens for.
    """

    family: SigningFamily

    def __init__(self, algorithm: Algorithm) -> None:
        if algorithm.family is not self.family:
            raise ValueError(
                f"{type(self).__name__} cannot sign {algorithm.value} "
                f"({algorithm.family.value} family)"
            )
        self.algorithm = algorithm

    def sign(self, key: str, claims: ClaimSet) -> str:
        """Return the compact JWS serialization of *claims* signed with *key*.

        The claim set is serialized as given and signed at the JWS layer, so
        registered claims are not type-checked. A numeric ``iss`` or ``aud``
        from free-form claims is signed as is.
        """
        signing_key = self._prepare_key(key)
        try:
            payload = json.dumps(dict(claims), separators=(",", ":")).encode("utf-8")
            return api_jws.encode(payload, signing_key, algorithm=self.algorithm.value)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise SigningFailureError(
                f"Failed to sign token with {self.algorithm.value}: {exc}"
            ) from exc

    @abstractmethod
    def _prepare_key(self, key: str) -> Any:
        """Turn role key material into the object PyJWT signs with."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.algorithm.value})"


class RSASigner(Signer):
    """RS* (PKCS#1 v1.5) and PS* (PSS) signatures with an RSA private key."""

    family = SigningFamily.RSA

    def _prepare_key(self, key: str) -> Any:
        private_key = load_private_key(key)
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise SigningFailureError(
                f"{self.algorithm.value} requires an RSA private key, "
                f"got {type(private_key).__name__}"
            )
        return private_key


class ECSigner(Signer):
    """ES* signatures with an elliptic-curve private key on the matching curve."""

    family = SigningFamily.EC

    def _prepare_key(self, key: str) -> Any:
        private_key = load_private_key(key)
        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise SigningFailureError(
                f"{self.algorithm.value} requires an EC private key, "
                f"got {type(private_key).__name__}"
            )
        expected_curve = _EC_CURVES[self.algorithm.bits]
        if private_key.curve.name != expected_curve:
            raise SigningFailureError(
                f"{self.algorithm.value} requires curve {expected_curve}, "
                f"got {private_key.curve.name}"
            )
        return private_key


class HMACSigner(Signer):
    """HS* signatures with a shared secret."""

    family = SigningFamily.HMAC

    def _prepare_key(self, key: str) -> Any:
        if not key:
            raise SigningFailureError(f"{self.algorithm.value} requires a non-empty secret")
        return key.encode("utf-8")


SIGNER_CLASSES: dict[SigningFamily, type[Signer]] = {
    SigningFamily.RSA: RSASigner,
    SigningFamily.EC: ECSigner,
    SigningFamily.HMAC: HMACSigner,
}
