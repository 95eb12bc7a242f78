#!/usr/bin/env python3
"""Example: Quickstart

Demonstrates the minimal setup for jwt-issuer: define an HMAC role, issue a
leased credential, look it up, renew it and revoke it.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install jwt-issuer
"""
from __future__ import annotations

import jwt_issuer
from jwt_issuer import IssueRequest, IssuerService


def main() -> None:
    print(f"jwt-issuer version: {jwt_issuer.__version__}")

    service = IssuerService()

    # Step 1: Define a role
    service.roles.write(
        "quickstart",
        algorithm="HS256",
        key="quickstart-secret-" + "x" * 32,
        iss="quickstart-issuer",
        exp="15m",
    )
    print(f"Roles: {service.roles.list_names()}")

    # Step 2: Issue a credential
    credential = service.lifecycle.issue("quickstart", IssueRequest(sub="worker-1"))
    print(f"Issued jti={credential.identifier}")
    print(f"Token: {credential.token[:40]}...")

    # Step 3: Look it up
    stored = service.tokens.get(credential.identifier)
    print(f"Stored token matches: {stored == credential.token.encode('utf-8')}")

    # Step 4: Renew, then revoke
    assert credential.lease is not None
    renewed = service.lifecycle.renew(credential.lease)
    print(f"Renewed, lease expires at {renewed.lease.expires_at.isoformat()}")
    service.lifecycle.revoke(renewed.lease)
    print(f"After revoke: {service.tokens.get(credential.identifier)}")

    print("\nQuickstart complete.")


if __name__ == "__main__":
    main()
