"""Exception hierarchy for jwt-issuer.

Every error raised by the issuance engine derives from :class:`IssuerError`.
The four families mirror how a caller is expected to react:

* :class:`ValidationError` — the request or configuration is wrong; report
  it and do not retry.
* :class:`NotFoundError` — a role referenced by an operation does not exist.
* :class:`StorageError` — the storage collaborator failed; the operation is
  aborted and the caller decides whether to retry.
* :class:`SigningError` — the algorithm/key pair could not produce a token.
"""
from __future__ import annotations


class IssuerError(Exception):
    """Base class for all jwt-issuer errors."""


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------


class ValidationError(IssuerError, ValueError):
    """Raised when caller-supplied input fails validation."""


class InvalidAlgorithmError(ValidationError):
    """Raised when a role names an unrecognized signing algorithm."""

    def __init__(self, algorithm: str) -> None:
        super().__init__(f"Invalid signing algorithm {algorithm!r}.")
        self.algorithm = algorithm


class MissingKeyError(ValidationError):
    """Raised when a role is written without key material."""

    def __init__(self) -> None:
        super().__init__("Key must not be blank.")


class KeyFormatMismatchError(ValidationError):
    """Raised when key material does not match the algorithm family."""


class InvalidDurationError(ValidationError):
    """Raised when a duration value cannot be parsed."""


class InvalidClaimsError(ValidationError):
    """Raised when the free-form claims document is not a JSON object."""


class InvalidRoleNameError(ValidationError):
    """Raised when a role name contains characters outside ``[\\w-]``."""


class NotRenewableError(ValidationError):
    """Raised when renewal is requested for a credential that cannot be renewed."""


class MissingIdentifierError(ValidationError):
    """Raised when lease metadata lacks the identifiers needed to act on it."""


class InvalidLeaseError(ValidationError):
    """Raised when lease metadata carries a malformed timestamp or duration."""


# ------------------------------------------------------------------
# Lookup
# ------------------------------------------------------------------


class NotFoundError(IssuerError, KeyError):
    """Raised when a referenced entity does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0]) if self.args else ""


class UnknownRoleError(NotFoundError):
    """Raised when an operation references a role that is not configured."""

    def __init__(self, role_name: str) -> None:
        super().__init__(f"Unknown role: {role_name}")
        self.role_name = role_name


# ------------------------------------------------------------------
# Collaborator failures
# ------------------------------------------------------------------


class StorageError(IssuerError):
    """Raised when the storage backend fails a get, put or delete."""


class SigningError(IssuerError):
    """Raised when a token cannot be signed."""


class UnsupportedAlgorithmError(SigningError):
    """Raised when no signer is registered for an algorithm name."""

    def __init__(self, algorithm: str) -> None:
        super().__init__(f"Unsupported signing algorithm {algorithm!r}.")
        self.algorithm = algorithm


class SigningFailureError(SigningError):
    """Raised when key decoding or signing fails for a known algorithm."""


__all__ = [
    "IssuerError",
    "ValidationError",
    "InvalidAlgorithmError",
    "MissingKeyError",
    "KeyFormatMismatchError",
    "InvalidDurationError",
    "InvalidClaimsError",
    "InvalidRoleNameError",
    "NotRenewableError",
    "MissingIdentifierError",
    "InvalidLeaseError",
    "NotFoundError",
    "UnknownRoleError",
    "StorageError",
    "SigningError",
    "UnsupportedAlgorithmError",
    "SigningFailureError",
]
