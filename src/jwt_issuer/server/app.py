"""HTTP server for jwt-issuer using stdlib http.server.

Routes:
    GET    /health             — health check
    GET    /roles              — list role names
    POST   /roles/{name}       — create or replace a role (PUT also accepted)
    POST   /roles/{name}/key   — replace the key of an existing role
    GET    /roles/{name}       — read a role (key omitted)
    DELETE /roles/{name}       — delete a role
    POST   /issue/{role}       — issue a credential under a role
    GET    /tokens/{jti}       — read a persisted token
    POST   /leases/renew       — renew a leased credential
    POST   /leases/revoke      — revoke a leased credential

Usage:
    python -m jwt_issuer.server.app --port 8200
    python -m jwt_issuer.server.app --storage-path ./state --log-level DEBUG
"""
from __future__ import annotations

import argparse
import json
import logging
import re
import urllib.parse
from http.server import BaseHTTPRequestHandler, HTTPServer

from jwt_issuer.config import IssuerConfig
from jwt_issuer.server import routes
from jwt_issuer.service import IssuerService

logger = logging.getLogger(__name__)

_ROLE_PATTERN = re.compile(r"^/roles/(\w[\w-]*)$")
_ROLE_KEY_PATTERN = re.compile(r"^/roles/(\w[\w-]*)/key$")
_ISSUE_PATTERN = re.compile(r"^/issue/(\w[\w-]*)$")
_TOKEN_PATTERN = re.compile(r"^/tokens/([^/]+)$")


class IssuerRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the jwt-issuer server.

    Implements routing for GET, POST, PUT and DELETE across all supported
    endpoints. Request and response bodies are JSON.
    """

    def log_message(self, format: str, *args: object) -> None:
        """Override to route access logs through the Python logging system."""
        logger.debug(format, *args)

    # ── GET ───────────────────────────────────────────────────────────────────

    def do_GET(self) -> None:
        """Handle all GET requests by routing on the URL path."""
        path = self._path()

        if path == "/health":
            self._send_json(*routes.handle_health())
            return
        if path == "/roles":
            self._send_json(*routes.handle_list_roles())
            return

        role_match = _ROLE_PATTERN.match(path)
        token_match = _TOKEN_PATTERN.match(path)
        if role_match:
            self._send_json(*routes.handle_read_role(role_match.group(1)))
        elif token_match:
            identifier = urllib.parse.unquote(token_match.group(1))
            self._send_json(*routes.handle_read_token(identifier))
        else:
            self._not_found("GET", path)

    # ── POST / PUT ────────────────────────────────────────────────────────────

    def do_POST(self) -> None:
        """Handle all POST requests by routing on the URL path."""
        path = self._path()

        body = self._read_json_body()
        if body is None:
            return

        role_match = _ROLE_PATTERN.match(path)
        key_match = _ROLE_KEY_PATTERN.match(path)
        issue_match = _ISSUE_PATTERN.match(path)
        if role_match:
            self._send_json(*routes.handle_write_role(role_match.group(1), body))
        elif key_match:
            self._send_json(*routes.handle_set_key(key_match.group(1), body))
        elif issue_match:
            self._send_json(*routes.handle_issue(issue_match.group(1), body))
        elif path == "/leases/renew":
            self._send_json(*routes.handle_renew(body))
        elif path == "/leases/revoke":
            self._send_json(*routes.handle_revoke(body))
        else:
            self._not_found("POST", path)

    def do_PUT(self) -> None:
        """PUT is accepted as an alias of POST for role writes."""
        path = self._path()
        match = _ROLE_PATTERN.match(path)
        if not match:
            self._not_found("PUT", path)
            return
        body = self._read_json_body()
        if body is None:
            return
        self._send_json(*routes.handle_write_role(match.group(1), body))

    # ── DELETE ────────────────────────────────────────────────────────────────

    def do_DELETE(self) -> None:
        """Handle DELETE /roles/{name}."""
        path = self._path()
        match = _ROLE_PATTERN.match(path)
        if match:
            self._send_json(*routes.handle_delete_role(match.group(1)))
        else:
            self._send_json(
                405,
                {"error": "Method not allowed", "detail": f"DELETE not supported on {path}"},
            )

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _path(self) -> str:
        return urllib.parse.urlparse(self.path).path.rstrip("/")

    def _not_found(self, method: str, path: str) -> None:
        self._send_json(404, {"error": "Not found", "detail": f"No route for {method} {path}"})

    def _send_json(self, status: int, data: dict[str, object]) -> None:
        """Serialize *data* to JSON and send an HTTP response with *status*."""
        if status == 204:
            self.send_response(status)
            self.end_headers()
            return
        body = json.dumps(data, default=str).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_json_body(self) -> dict[str, object] | None:
        """Read and parse the JSON request body.

        Returns None (and sends a 400 error response) if parsing fails or the
        body is not a JSON object.
        """
        content_length = int(self.headers.get("Content-Length", 0))
        if content_length == 0:
            return {}

        raw = self.rfile.read(content_length)
        try:
            parsed = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            self._send_json(400, {"error": "Invalid JSON", "detail": str(exc)})
            return None
        if not isinstance(parsed, dict):
            self._send_json(400, {"error": "Invalid JSON", "detail": "Body must be a JSON object"})
            return None
        return parsed


def create_server(
    host: str = "127.0.0.1",
    port: int = 8200,
    service: IssuerService | None = None,
) -> HTTPServer:
    """Create (but do not start) the jwt-issuer HTTP server.

    Parameters
    ----------
    host:
        Bind address (default ``"127.0.0.1"``).
    port:
        TCP port to listen on (default 8200).
    service:
        Service the handlers call into. If omitted the current
        module-level service in :mod:`jwt_issuer.server.routes` is kept.

    Returns
    -------
    HTTPServer
        A configured server instance ready to call ``serve_forever()`` on.
    """
    if service is not None:
        routes.configure(service)
    server = HTTPServer((host, port), IssuerRequestHandler)
    logger.info("jwt-issuer server created at http://%s:%d", host, server.server_address[1])
    return server


def run_server(config: IssuerConfig) -> None:
    """Create and run the jwt-issuer HTTP server (blocking)."""
    server = create_server(
        host=config.host, port=config.port, service=IssuerService.from_config(config)
    )
    logger.info(
        "Serving jwt-issuer on http://%s:%d — press Ctrl-C to stop", config.host, config.port
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down jwt-issuer server.")
    finally:
        server.server_close()


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="jwt-issuer HTTP server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--host", default=None, help="Bind address")
    parser.add_argument("--port", type=int, default=None, help="TCP port")
    parser.add_argument(
        "--storage-path",
        default=None,
        help="Directory for filesystem storage (in-memory if omitted)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


if __name__ == "__main__":
    args = _build_arg_parser().parse_args()
    config = IssuerConfig.from_env(
        host=args.host,
        port=args.port,
        storage_path=args.storage_path,
        log_level=args.log_level,
    )
    logging.basicConfig(level=getattr(logging, config.log_level))
    run_server(config)
