"""SigningDispatcher — select a signer by algorithm name and sign claims.

The dispatcher holds a lookup table from algorithm name to :class:`Signer`,
built once from :data:`SIGNER_CLASSES`. It keeps no other state and performs
no I/O, so a single instance can be shared freely between requests.
"""
from __future__ import annotations

from collections.abc import Mapping

from jwt_issuer.errors import UnsupportedAlgorithmError
from jwt_issuer.signing.algorithms import Algorithm
from jwt_issuer.signing.signers import SIGNER_CLASSES, Signer
from jwt_issuer.types import ClaimSet


def build_signer_table() -> dict[str, Signer]:
    """Return one signer per supported algorithm, keyed by algorithm name."""
    return {
        algorithm.value: SIGNER_CLASSES[algorithm.family](algorithm)
        for algorithm in Algorithm
    }


class SigningDispatcher:
    """Map algorithm names to signers and produce signed tokens.

    Parameters
    ----------
    signers:
        Optional replacement lookup table. Defaults to
        :func:`build_signer_table`.

    Example
    -------
    ::

        dispatcher = SigningDispatcher()
        token = dispatcher.sign("HS256", "shared-secret", {"sub": "svc"})
    """

    def __init__(self, signers: Mapping[str, Signer] | None = None) -> None:
        self._signers: dict[str, Signer] = dict(
            signers if signers is not None else build_signer_table()
        )

    def signer_for(self, algorithm: str) -> Signer:
        """Return the signer registered for *algorithm*.

        Raises
        ------
        UnsupportedAlgorithmError
            If no signer is registered under that name.
        """
        try:
            return self._signers[algorithm]
        except KeyError:
            raise UnsupportedAlgorithmError(algorithm) from None

    def sign(self, algorithm: str, key: str, claims: ClaimSet) -> str:
        """Sign *claims* with *key* using *algorithm*.

        Raises
        ------
        UnsupportedAlgorithmError
            If *algorithm* is unknown.
        SigningFailureError
            If the key cannot be decoded, is of the wrong type for the
            algorithm family, or signing fails.
        """
        return self.signer_for(algorithm).sign(key, claims)

    def algorithms(self) -> list[str]:
        """Return the algorithm names this dispatcher can sign with."""
        return list(self._signers)

    def __contains__(self, algorithm: object) -> bool:
        return algorithm in self._signers


_default_dispatcher = SigningDispatcher()


def sign(algorithm: str, key: str, claims: ClaimSet) -> str:
    """Sign *claims* with the module-level default dispatcher."""
    return _default_dispatcher.sign(algorithm, key, claims)
