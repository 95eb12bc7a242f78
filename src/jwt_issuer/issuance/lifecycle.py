"""CredentialLifecycle — issue, renew and revoke role-scoped credentials.

States of a leased credential::

    Issued --renew--> Renewed --renew--> Renewed ...
      |                  |
      +------revoke------+----> Revoked (terminal)

A credential issued under a role with leasing disabled is returned once
and never stored; it has no state to renew or revoke.

Persistence uses two independent writes per credential. The claims record
is written first and the token second, so a token is never readable
without its claims. If the token write fails the claims record is removed
again, or restored to its previous content when one existed, and the
failure is raised to the caller.
"""
from __future__ import annotations

import datetime
import json
import logging
from collections.abc import Callable, Mapping

from jwt_issuer.claims.builder import ClaimsBuilder, IssueRequest
from jwt_issuer.errors import MissingIdentifierError, NotRenewableError, StorageError
from jwt_issuer.issuance.lease import DEFAULT_LEASE_DURATION, IssuedCredential, Lease
from jwt_issuer.issuance.lookup import CLAIMS_PREFIX, TOKEN_PREFIX, TokenLookup
from jwt_issuer.roles.registry import RoleRegistry
from jwt_issuer.signing.dispatcher import SigningDispatcher
from jwt_issuer.storage.base import Storage
from jwt_issuer.types import ClaimSet

logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class CredentialLifecycle:
    """Orchestrates issuance, renewal and revocation.

    Parameters
    ----------
    storage:
        Backend for token and claims records.
    registry:
        Role source. Defaults to a :class:`RoleRegistry` over *storage*.
    builder:
        Claims merger. Defaults to :class:`ClaimsBuilder`.
    dispatcher:
        Signer lookup. Defaults to :class:`SigningDispatcher`.
    lease_duration:
        Fixed lease window applied to every leased credential.
    clock:
        Returns the current UTC time.
    """

    def __init__(
        self,
        storage: Storage,
        registry: RoleRegistry | None = None,
        builder: ClaimsBuilder | None = None,
        dispatcher: SigningDispatcher | None = None,
        lease_duration: datetime.timedelta = DEFAULT_LEASE_DURATION,
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self._storage = storage
        self._registry = registry or RoleRegistry(storage)
        self._clock = clock or _utcnow
        self._builder = builder or ClaimsBuilder(clock=self._clock)
        self._dispatcher = dispatcher or SigningDispatcher()
        self._lookup = TokenLookup(storage)
        self._lease_duration = lease_duration

    @property
    def lease_duration(self) -> datetime.timedelta:
        return self._lease_duration

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def issue(self, role_name: str, request: IssueRequest | None = None) -> IssuedCredential:
        """Issue a credential under *role_name*.

        Returns
        -------
        IssuedCredential
            With a :class:`Lease` when the role has leasing enabled,
            otherwise with ``lease=None`` and nothing persisted.

        Raises
        ------
        UnknownRoleError
            If the role does not exist. Nothing is written.
        InvalidClaimsError
            If the free-form claims document is malformed.
        SigningError
            If the role's key cannot sign with its algorithm.
        StorageError
            If persisting a leased credential fails.
        """
        role = self._registry.get(role_name)
        now = self._clock()
        claims = self._builder.build(role, request or IssueRequest(), now=now)
        identifier = str(claims["jti"])
        token = self._dispatcher.sign(role.algorithm, role.key, claims)

        if not role.lease_enabled:
            logger.info("Issued unleased credential %s for role %r", identifier, role.name)
            return IssuedCredential(
                identifier=identifier, token=token, role_name=role.name, claims=claims
            )

        self._persist(identifier, token, claims)
        lease = Lease(
            role=role.name,
            jti=identifier,
            claims=dict(claims),
            duration=self._lease_duration,
            issued_at=now,
        )
        logger.info(
            "Issued credential %s for role %r (lease %ds)",
            identifier,
            role.name,
            int(self._lease_duration.total_seconds()),
        )
        return IssuedCredential(
            identifier=identifier, token=token, role_name=role.name, claims=claims, lease=lease
        )

    # ------------------------------------------------------------------
    # Renew
    # ------------------------------------------------------------------

    def renew(self, lease: Lease | Mapping[str, object]) -> IssuedCredential:
        """Extend *lease* and re-sign its credential with the current role.

        ``exp`` is reset to now plus the lease window; every other claim is
        carried over unchanged. The token and claims records are overwritten
        under the same identifier.

        Raises
        ------
        MissingIdentifierError
            If the lease lacks its role or identifier.
        UnknownRoleError
            If the issuing role no longer exists.
        NotRenewableError
            If the role has leasing disabled or the credential was revoked.
        """
        lease = _coerce_lease(lease)
        if not lease.role:
            raise MissingIdentifierError("Lease is missing role internal data")
        if not lease.jti:
            raise MissingIdentifierError("Lease is missing jti internal data")

        role = self._registry.get(lease.role)
        if not role.lease_enabled:
            raise NotRenewableError(
                f"Role {role.name!r} has leasing disabled; there is nothing to renew"
            )
        if self._lookup.get(lease.jti) is None:
            raise NotRenewableError(f"Credential {lease.jti} has been revoked")

        claims = dict(lease.claims) or self._lookup.get_claims(lease.jti) or {}
        now = self._clock()
        claims["jti"] = lease.jti
        claims["exp"] = int((now + self._lease_duration).timestamp())
        token = self._dispatcher.sign(role.algorithm, role.key, claims)
        self._persist(lease.jti, token, claims)

        renewed = Lease(
            role=role.name,
            jti=lease.jti,
            claims=dict(claims),
            duration=self._lease_duration,
            issued_at=now,
        )
        logger.info("Renewed credential %s for role %r", lease.jti, role.name)
        return IssuedCredential(
            identifier=lease.jti, token=token, role_name=role.name, claims=claims, lease=renewed
        )

    # ------------------------------------------------------------------
    # Revoke
    # ------------------------------------------------------------------

    def revoke(self, lease: Lease | Mapping[str, object]) -> None:
        """Remove the persisted token and claims for *lease*.

        Idempotent: revoking an already revoked credential succeeds.

        Raises
        ------
        MissingIdentifierError
            If the lease lacks its identifier.
        """
        lease = _coerce_lease(lease)
        if not lease.jti:
            raise MissingIdentifierError("Lease is missing jti internal data")

        self._storage.delete(TOKEN_PREFIX + lease.jti)
        self._storage.delete(CLAIMS_PREFIX + lease.jti)
        logger.info("Revoked credential %s", lease.jti)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _persist(self, identifier: str, token: str, claims: ClaimSet) -> None:
        """Write the claims record, then the token; undo the claims on failure.

        An existing claims record (renewal, or a reused identifier) is put
        back as it was, so an earlier token keeps the claims it was signed
        with. A record that did not exist before is deleted.
        """
        claims_key = CLAIMS_PREFIX + identifier
        previous_claims = self._storage.get(claims_key)
        self._storage.put(claims_key, json.dumps(claims).encode("utf-8"))
        try:
            self._storage.put(TOKEN_PREFIX + identifier, token.encode("utf-8"))
        except Exception:
            logger.warning(
                "Token write for %s failed; rolling back its claims record", identifier
            )
            try:
                if previous_claims is None:
                    self._storage.delete(claims_key)
                else:
                    self._storage.put(claims_key, previous_claims)
            except StorageError as rollback_exc:
                logger.error(
                    "Could not roll back claims record for %s: %s", identifier, rollback_exc
                )
            raise


def _coerce_lease(lease: Lease | Mapping[str, object]) -> Lease:
    if isinstance(lease, Lease):
        return lease
    return Lease.from_dict(lease)
