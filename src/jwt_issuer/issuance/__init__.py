"""Credential issuance: lifecycle orchestration, leases and token lookup.

Quick start
-----------
::

    from jwt_issuer.issuance import CredentialLifecycle, TokenLookup
    from jwt_issuer.roles import RoleRegistry
    from jwt_issuer.storage import InMemoryStorage

    storage = InMemoryStorage()
    RoleRegistry(storage).write("svc", algorithm="HS256", key="shared-secret")

    lifecycle = CredentialLifecycle(storage)
    credential = lifecycle.issue("svc")
    assert TokenLookup(storage).get(credential.identifier) == credential.token.encode()
"""
from __future__ import annotations

from jwt_issuer.issuance.lease import DEFAULT_LEASE_DURATION, IssuedCredential, Lease
from jwt_issuer.issuance.lifecycle import CredentialLifecycle
from jwt_issuer.issuance.lookup import CLAIMS_PREFIX, TOKEN_PREFIX, TokenLookup

__all__ = [
    "CLAIMS_PREFIX",
    "DEFAULT_LEASE_DURATION",
    "TOKEN_PREFIX",
    "CredentialLifecycle",
    "IssuedCredential",
    "Lease",
    "TokenLookup",
]
