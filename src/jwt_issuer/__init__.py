"""jwt-issuer — role-scoped JWT issuance with leased credential lifecycle.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import jwt_issuer
>>> jwt_issuer.__version__
'0.1.0'

Quick start
-----------
::

    from jwt_issuer import IssuerService, IssueRequest

    service = IssuerService()
    service.roles.write("svc", algorithm="HS256", key="shared-secret", iss="issuer")
    credential = service.lifecycle.issue("svc", IssueRequest(sub="worker-1"))
    print(credential.token)
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from jwt_issuer.errors import (
    InvalidAlgorithmError,
    InvalidClaimsError,
    InvalidDurationError,
    InvalidLeaseError,
    InvalidRoleNameError,
    IssuerError,
    KeyFormatMismatchError,
    MissingIdentifierError,
    MissingKeyError,
    NotFoundError,
    NotRenewableError,
    SigningError,
    SigningFailureError,
    StorageError,
    UnknownRoleError,
    UnsupportedAlgorithmError,
    ValidationError,
)

# ------------------------------------------------------------------
# Storage
# ------------------------------------------------------------------
from jwt_issuer.storage import FilesystemStorage, InMemoryStorage, Storage

# ------------------------------------------------------------------
# Roles, claims, signing
# ------------------------------------------------------------------
from jwt_issuer.roles import Role, RoleRegistry, parse_duration
from jwt_issuer.claims import ClaimsBuilder, IssueRequest
from jwt_issuer.signing import Algorithm, SigningDispatcher, SigningFamily

# ------------------------------------------------------------------
# Issuance
# ------------------------------------------------------------------
from jwt_issuer.issuance import (
    DEFAULT_LEASE_DURATION,
    CredentialLifecycle,
    IssuedCredential,
    Lease,
    TokenLookup,
)

# ------------------------------------------------------------------
# Service and configuration
# ------------------------------------------------------------------
from jwt_issuer.config import IssuerConfig, build_storage
from jwt_issuer.service import IssuerService

__all__ = [
    # version
    "__version__",
    # errors
    "InvalidAlgorithmError",
    "InvalidClaimsError",
    "InvalidDurationError",
    "InvalidLeaseError",
    "InvalidRoleNameError",
    "IssuerError",
    "KeyFormatMismatchError",
    "MissingIdentifierError",
    "MissingKeyError",
    "NotFoundError",
    "NotRenewableError",
    "SigningError",
    "SigningFailureError",
    "StorageError",
    "UnknownRoleError",
    "UnsupportedAlgorithmError",
    "ValidationError",
    # storage
    "FilesystemStorage",
    "InMemoryStorage",
    "Storage",
    # roles / claims / signing
    "Algorithm",
    "ClaimsBuilder",
    "IssueRequest",
    "Role",
    "RoleRegistry",
    "SigningDispatcher",
    "SigningFamily",
    "parse_duration",
    # issuance
    "DEFAULT_LEASE_DURATION",
    "CredentialLifecycle",
    "IssuedCredential",
    "Lease",
    "TokenLookup",
    # service
    "IssuerConfig",
    "IssuerService",
    "build_storage",
]
