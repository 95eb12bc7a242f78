"""HTTP request surface for jwt-issuer.

``routes`` holds transport-independent handler functions; ``app`` maps URL
patterns onto them with the standard library HTTP server.
"""
from __future__ import annotations

from jwt_issuer.server.app import IssuerRequestHandler, create_server, run_server

__all__ = ["IssuerRequestHandler", "create_server", "run_server"]
