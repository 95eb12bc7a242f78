"""Token signing.

Algorithm names select a :class:`Signer` from a fixed table; the signer
decodes the role key for its family and produces a compact JWS string.

Quick start
-----------
::

    from jwt_issuer.signing import SigningDispatcher

    dispatcher = SigningDispatcher()
    token = dispatcher.sign("HS256", "shared-secret", {"sub": "svc"})
"""
from __future__ import annotations

from jwt_issuer.signing.algorithms import (
    DEFAULT_ALGORITHM,
    Algorithm,
    SigningFamily,
    family_of,
    parse_algorithm,
    supported_algorithms,
)
from jwt_issuer.signing.dispatcher import SigningDispatcher, build_signer_table, sign
from jwt_issuer.signing.signers import (
    ECSigner,
    HMACSigner,
    RSASigner,
    Signer,
    load_private_key,
)

__all__ = [
    "DEFAULT_ALGORITHM",
    "Algorithm",
    "ECSigner",
    "HMACSigner",
    "RSASigner",
    "Signer",
    "SigningDispatcher",
    "SigningFamily",
    "build_signer_table",
    "family_of",
    "load_private_key",
    "parse_algorithm",
    "sign",
    "supported_algorithms",
]
