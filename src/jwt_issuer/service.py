"""IssuerService — the issuance engine wired to one storage backend.

The service bundles the role registry, credential lifecycle and token
lookup over a single injected :class:`~jwt_issuer.storage.Storage`. The
HTTP handlers and the CLI both call into an instance of it; neither holds
business logic of its own.
"""
from __future__ import annotations

import datetime

from jwt_issuer.claims.builder import ClaimsBuilder
from jwt_issuer.config import IssuerConfig, build_storage
from jwt_issuer.issuance.lease import DEFAULT_LEASE_DURATION
from jwt_issuer.issuance.lifecycle import CredentialLifecycle
from jwt_issuer.issuance.lookup import TokenLookup
from jwt_issuer.roles.registry import RoleRegistry
from jwt_issuer.signing.dispatcher import SigningDispatcher
from jwt_issuer.storage import InMemoryStorage, Storage


class IssuerService:
    """Registry, lifecycle and lookup sharing one storage backend.

    Parameters
    ----------
    storage:
        Backend for roles, tokens and claims. Defaults to in-memory.
    lease_duration:
        Fixed lease window for leased credentials.
    dispatcher:
        Signer lookup table.
    builder:
        Claims merger.
    """

    def __init__(
        self,
        storage: Storage | None = None,
        lease_duration: datetime.timedelta = DEFAULT_LEASE_DURATION,
        dispatcher: SigningDispatcher | None = None,
        builder: ClaimsBuilder | None = None,
    ) -> None:
        self.storage = storage if storage is not None else InMemoryStorage()
        self.roles = RoleRegistry(self.storage)
        self.lifecycle = CredentialLifecycle(
            self.storage,
            registry=self.roles,
            builder=builder,
            dispatcher=dispatcher,
            lease_duration=lease_duration,
        )
        self.tokens = TokenLookup(self.storage)

    @classmethod
    def from_config(cls, config: IssuerConfig) -> "IssuerService":
        """Build a service whose storage and lease window come from *config*."""
        return cls(storage=build_storage(config), lease_duration=config.lease_duration)
