"""ClaimsBuilder — assemble the claim set for an issuance request.

Three layers are merged in order, each overwriting what came before:

1. Role defaults: ``iss``/``sub``/``aud`` when non-empty, and ``exp`` as
   issuance time plus the role's default expiration when that is nonzero.
2. Structured request fields: ``iss``, ``sub``, ``aud``, ``exp``, ``nbf``,
   ``iat`` and ``jti`` when the caller supplied a non-empty / non-zero value.
   ``nbf`` and ``iat`` fall back to the issuance time and ``jti`` to a fresh
   UUID.
3. The free-form claims document: every key overwrites, registered claims
   included.

The claim set starts empty; a claim no layer sets is absent from the result.
"""
from __future__ import annotations

import datetime
import json
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from jwt_issuer.errors import InvalidClaimsError
from jwt_issuer.roles.role import Role
from jwt_issuer.types import ClaimSet, JSONValue


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _new_identifier() -> str:
    return str(uuid.uuid4())


@dataclass
class IssueRequest:
    """Per-request claim inputs.

    Parameters
    ----------
    iss, sub, aud:
        Registered string claims; empty means "not supplied".
    exp, nbf, iat:
        NumericDate (seconds since the epoch); zero means "not supplied".
    jti:
        Token identifier; empty means "generate one".
    claims:
        Free-form claims as JSON object text or an already-parsed mapping.
    """

    iss: str = ""
    sub: str = ""
    aud: str = ""
    exp: int = 0
    nbf: int = 0
    iat: int = 0
    jti: str = ""
    claims: str | Mapping[str, JSONValue] | None = None


def parse_claims_document(document: str | Mapping[str, JSONValue] | None) -> ClaimSet:
    """Return the free-form claims as a new dict.

    Raises
    ------
    InvalidClaimsError
        If *document* is not valid JSON or does not decode to an object.
    """
    if document is None:
        return {}
    if isinstance(document, Mapping):
        return dict(document)
    if not document.strip():
        return {}
    try:
        parsed = json.loads(document)
    except json.JSONDecodeError as exc:
        raise InvalidClaimsError(f"Claims are not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise InvalidClaimsError(
            f"Claims must be a JSON object, got {type(parsed).__name__}"
        )
    return parsed


class ClaimsBuilder:
    """Merge role defaults, request fields and free-form claims.

    Parameters
    ----------
    clock:
        Returns the current UTC time. Defaults to the system clock.
    id_factory:
        Returns a fresh token identifier. Defaults to ``uuid4``.
    """

    def __init__(
        self,
        clock: Callable[[], datetime.datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._clock = clock or _utcnow
        self._id_factory = id_factory or _new_identifier

    def build(
        self,
        role: Role,
        request: IssueRequest,
        now: datetime.datetime | None = None,
    ) -> ClaimSet:
        """Return the merged claim set for *request* under *role*.

        Raises
        ------
        InvalidClaimsError
            If the free-form document is malformed or leaves ``jti`` without
            a usable string value.
        """
        # Parse first so a malformed document fails before any other work.
        free_form = parse_claims_document(request.claims)

        issued_at = now or self._clock()
        timestamp = int(issued_at.timestamp())
        claims: ClaimSet = {}

        if role.default_issuer:
            claims["iss"] = role.default_issuer
        if role.default_subject:
            claims["sub"] = role.default_subject
        if role.default_audience:
            claims["aud"] = role.default_audience
        if role.default_expiration:
            claims["exp"] = int((issued_at + role.default_expiration).timestamp())

        if request.iss:
            claims["iss"] = request.iss
        if request.sub:
            claims["sub"] = request.sub
        if request.aud:
            claims["aud"] = request.aud
        if request.exp > 0:
            claims["exp"] = request.exp
        claims["nbf"] = request.nbf if request.nbf > 0 else timestamp
        claims["iat"] = request.iat if request.iat > 0 else timestamp
        claims["jti"] = request.jti or self._id_factory()

        claims.update(free_form)

        jti = claims.get("jti")
        if not isinstance(jti, str) or not jti:
            raise InvalidClaimsError("Claim 'jti' must be a non-empty string")
        return claims
