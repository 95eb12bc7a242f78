"""Role configuration: model, duration parsing and the validating registry."""
from __future__ import annotations

from jwt_issuer.roles.duration import format_seconds, parse_duration
from jwt_issuer.roles.registry import ROLE_PREFIX, RoleRegistry, validate_key
from jwt_issuer.roles.role import Role

__all__ = [
    "ROLE_PREFIX",
    "Role",
    "RoleRegistry",
    "format_seconds",
    "parse_duration",
    "validate_key",
]
