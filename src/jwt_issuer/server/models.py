"""Pydantic request/response models for the jwt-issuer HTTP server."""
from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from jwt_issuer.signing.algorithms import DEFAULT_ALGORITHM


class WriteRoleRequest(BaseModel):
    """Request body for POST /roles/{name}."""

    algorithm: str = DEFAULT_ALGORITHM.value
    key: str = ""
    lease_enabled: bool = True
    iss: str = ""
    sub: str = ""
    aud: str = ""
    exp: Union[int, str] = 0


class SetKeyRequest(BaseModel):
    """Request body for POST /roles/{name}/key."""

    key: str = ""


class RoleResponse(BaseModel):
    """Response body for GET /roles/{name}. Key material is never returned."""

    name: str
    algorithm: str
    lease_enabled: bool
    iss: str = ""
    sub: str = ""
    aud: str = ""
    exp: int = 0


class RoleListResponse(BaseModel):
    """Response body for GET /roles."""

    roles: list[str] = Field(default_factory=list)


class IssueTokenRequest(BaseModel):
    """Request body for POST /issue/{role}."""

    iss: str = ""
    sub: str = ""
    aud: str = ""
    exp: int = 0
    nbf: int = 0
    iat: int = 0
    jti: str = ""
    claims: Optional[Union[str, dict[str, Any]]] = None


class LeaseModel(BaseModel):
    """Lease metadata exchanged with the lease-management platform."""

    lease_id: str = ""
    lease_duration: int = 0
    renewable: bool = True
    issued_at: Optional[str] = None
    expires_at: Optional[str] = None
    internal_data: dict[str, Any] = Field(default_factory=dict)


class IssueResponse(BaseModel):
    """Response body for POST /issue/{role} and POST /leases/renew."""

    jti: str
    token: str
    role: Optional[str] = None
    lease: Optional[LeaseModel] = None


class TokenResponse(BaseModel):
    """Response body for GET /tokens/{jti}."""

    token: str


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: str = "ok"
    service: str = "jwt-issuer"
    version: str = "0.1.0"
    role_count: int = 0


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str = ""


__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "IssueResponse",
    "IssueTokenRequest",
    "LeaseModel",
    "RoleListResponse",
    "RoleResponse",
    "SetKeyRequest",
    "TokenResponse",
    "WriteRoleRequest",
]
