"""Route handler functions for the jwt-issuer HTTP server.

Each function accepts parsed request data and returns a tuple of
(status_code, response_dict). The HTTP handler in app.py calls these
functions and serializes the results to JSON. A 204 status carries no body.

The handlers call into a module-level :class:`IssuerService`; use
:func:`configure` to inject one built over a different storage backend.
"""
from __future__ import annotations

import logging

from jwt_issuer import __version__
from jwt_issuer.claims.builder import IssueRequest
from jwt_issuer.errors import (
    IssuerError,
    NotFoundError,
    SigningError,
    StorageError,
    UnsupportedAlgorithmError,
    ValidationError,
)
from jwt_issuer.server.models import (
    ErrorResponse,
    HealthResponse,
    IssueResponse,
    IssueTokenRequest,
    LeaseModel,
    RoleListResponse,
    RoleResponse,
    SetKeyRequest,
    TokenResponse,
    WriteRoleRequest,
)
from jwt_issuer.service import IssuerService

logger = logging.getLogger(__name__)

Result = tuple[int, dict[str, object]]

# Module-level shared state
_service: IssuerService = IssuerService()


def configure(service: IssuerService) -> None:
    """Route all handlers to *service*."""
    global _service
    _service = service


def get_service() -> IssuerService:
    """Return the service the handlers currently use."""
    return _service


def reset_state() -> None:
    """Reset to a fresh in-memory service — used in tests and for clean restarts."""
    global _service
    _service = IssuerService()


def _error(status: int, error: str, detail: str) -> Result:
    return status, ErrorResponse(error=error, detail=detail).model_dump()


def _error_from_exception(exc: IssuerError) -> Result:
    """Translate an engine exception into an HTTP status and error body."""
    if isinstance(exc, NotFoundError):
        return _error(404, "Not found", str(exc))
    if isinstance(exc, ValidationError):
        return _error(400, "Invalid request", str(exc))
    if isinstance(exc, UnsupportedAlgorithmError):
        return _error(400, "Unsupported algorithm", str(exc))
    if isinstance(exc, SigningError):
        return _error(500, "Signing failed", str(exc))
    if isinstance(exc, StorageError):
        logger.error("Storage failure: %s", exc)
        return _error(503, "Storage unavailable", str(exc))
    return _error(500, "Internal error", str(exc))


def _validation_error(exc: Exception) -> Result:
    return _error(422, "Validation error", str(exc))


# ------------------------------------------------------------------
# Roles
# ------------------------------------------------------------------


def handle_write_role(name: str, body: dict[str, object]) -> Result:
    """Handle POST /roles/{name}.

    Returns 204 on success, 400 when the role fails validation.
    """
    try:
        request = WriteRoleRequest.model_validate(body)
    except Exception as exc:
        return _validation_error(exc)

    try:
        _service.roles.write(
            name,
            algorithm=request.algorithm,
            key=request.key,
            lease_enabled=request.lease_enabled,
            iss=request.iss,
            sub=request.sub,
            aud=request.aud,
            exp=request.exp,
        )
    except IssuerError as exc:
        return _error_from_exception(exc)
    return 204, {}


def handle_set_key(name: str, body: dict[str, object]) -> Result:
    """Handle POST /roles/{name}/key.

    Returns 204 on success, 404 for an unknown role, 400 for a bad key.
    """
    try:
        request = SetKeyRequest.model_validate(body)
    except Exception as exc:
        return _validation_error(exc)

    try:
        _service.roles.set_key(name, request.key)
    except IssuerError as exc:
        return _error_from_exception(exc)
    return 204, {}


def handle_read_role(name: str) -> Result:
    """Handle GET /roles/{name}. The key is never included."""
    try:
        projection = _service.roles.read(name)
    except IssuerError as exc:
        return _error_from_exception(exc)
    if projection is None:
        return _error(404, "Not found", f"Unknown role: {name}")
    return 200, RoleResponse.model_validate(projection).model_dump()


def handle_delete_role(name: str) -> Result:
    """Handle DELETE /roles/{name}. Idempotent."""
    try:
        _service.roles.delete(name)
    except IssuerError as exc:
        return _error_from_exception(exc)
    return 204, {}


def handle_list_roles() -> Result:
    """Handle GET /roles."""
    try:
        names = _service.roles.list_names()
    except IssuerError as exc:
        return _error_from_exception(exc)
    return 200, RoleListResponse(roles=names).model_dump()


# ------------------------------------------------------------------
# Credentials
# ------------------------------------------------------------------


def handle_issue(role_name: str, body: dict[str, object]) -> Result:
    """Handle POST /issue/{role}."""
    try:
        request = IssueTokenRequest.model_validate(body)
    except Exception as exc:
        return _validation_error(exc)

    try:
        credential = _service.lifecycle.issue(
            role_name,
            IssueRequest(
                iss=request.iss,
                sub=request.sub,
                aud=request.aud,
                exp=request.exp,
                nbf=request.nbf,
                iat=request.iat,
                jti=request.jti,
                claims=request.claims,
            ),
        )
    except IssuerError as exc:
        return _error_from_exception(exc)

    response = IssueResponse.model_validate(credential.to_response())
    return 200, response.model_dump(exclude_none=True)


def handle_read_token(identifier: str) -> Result:
    """Handle GET /tokens/{jti}."""
    try:
        token = _service.tokens.get(identifier)
    except IssuerError as exc:
        return _error_from_exception(exc)
    if token is None:
        return _error(404, "Not found", f"No token stored for {identifier}")
    return 200, TokenResponse(token=token.decode("utf-8")).model_dump()


def handle_renew(body: dict[str, object]) -> Result:
    """Handle POST /leases/renew. *body* is the lease returned at issuance."""
    try:
        lease = LeaseModel.model_validate(body)
    except Exception as exc:
        return _validation_error(exc)

    try:
        credential = _service.lifecycle.renew(lease.model_dump())
    except IssuerError as exc:
        return _error_from_exception(exc)

    response = IssueResponse.model_validate(credential.to_response())
    return 200, response.model_dump(exclude_none=True)


def handle_revoke(body: dict[str, object]) -> Result:
    """Handle POST /leases/revoke. Idempotent."""
    try:
        lease = LeaseModel.model_validate(body)
    except Exception as exc:
        return _validation_error(exc)

    try:
        _service.lifecycle.revoke(lease.model_dump())
    except IssuerError as exc:
        return _error_from_exception(exc)
    return 204, {}


def handle_health() -> Result:
    """Handle GET /health."""
    try:
        role_count = len(_service.roles.list_names())
    except StorageError as exc:
        return _error_from_exception(exc)
    response = HealthResponse(version=__version__, role_count=role_count)
    return 200, response.model_dump()
