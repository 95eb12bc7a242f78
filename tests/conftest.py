"""Shared key material for jwt_issuer tests."""
from __future__ import annotations

from dataclasses import dataclass

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

HMAC_SECRET = "shared-secret-" + "0123456789abcdef" * 4


@dataclass
class KeyPair:
    private_pem: str
    public_pem: str


def _to_pair(private_key, fmt: serialization.PrivateFormat) -> KeyPair:  # type: ignore[no-untyped-def]
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=fmt,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")
    return KeyPair(private_pem=private_pem, public_pem=public_pem)


@pytest.fixture(scope="session")
def rsa_key() -> KeyPair:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return _to_pair(key, serialization.PrivateFormat.TraditionalOpenSSL)


@pytest.fixture(scope="session")
def rsa_pkcs8_key() -> KeyPair:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return _to_pair(key, serialization.PrivateFormat.PKCS8)


@pytest.fixture(scope="session")
def ec256_key() -> KeyPair:
    key = ec.generate_private_key(ec.SECP256R1())
    return _to_pair(key, serialization.PrivateFormat.TraditionalOpenSSL)


@pytest.fixture(scope="session")
def ec384_key() -> KeyPair:
    key = ec.generate_private_key(ec.SECP384R1())
    return _to_pair(key, serialization.PrivateFormat.TraditionalOpenSSL)


@pytest.fixture(scope="session")
def hmac_secret() -> str:
    return HMAC_SECRET
