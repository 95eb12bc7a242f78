"""Claim-set assembly for issuance requests."""
from __future__ import annotations

from jwt_issuer.claims.builder import ClaimsBuilder, IssueRequest, parse_claims_document

__all__ = [
    "ClaimsBuilder",
    "IssueRequest",
    "parse_claims_document",
]
