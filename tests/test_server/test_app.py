"""Tests for jwt_issuer.server.app — HTTP handler integration."""
from __future__ import annotations

import json
import threading
import urllib.error
import urllib.request
from collections.abc import Iterator
from http.server import HTTPServer

import pytest

from jwt_issuer.server import routes
from jwt_issuer.server.app import create_server
from jwt_issuer.service import IssuerService


@pytest.fixture(autouse=True)
def reset_server_state() -> None:
    """Reset module-level state before each test."""
    routes.reset_state()


@pytest.fixture()
def server() -> Iterator[HTTPServer]:
    httpd = create_server(host="127.0.0.1", port=0, service=IssuerService())
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()
    thread.join(timeout=5)


def _request(
    server: HTTPServer, method: str, path: str, body: object | None = None
) -> tuple[int, dict[str, object]]:
    host, port = server.server_address[:2]
    data = json.dumps(body).encode("utf-8") if body is not None else None
    request = urllib.request.Request(f"http://{host}:{port}{path}", data=data, method=method)
    if data is not None:
        request.add_header("Content-Type", "application/json")
    try:
        with urllib.request.urlopen(request, timeout=5) as response:
            raw = response.read()
            return response.status, json.loads(raw) if raw else {}
    except urllib.error.HTTPError as exc:
        raw = exc.read()
        return exc.code, json.loads(raw) if raw else {}


class TestHTTPRoutes:
    def test_health(self, server: HTTPServer) -> None:
        status, data = _request(server, "GET", "/health")
        assert status == 200
        assert data["service"] == "jwt-issuer"

    def test_unknown_path_is_404(self, server: HTTPServer) -> None:
        status, data = _request(server, "GET", "/nowhere")
        assert status == 404
        assert data["error"] == "Not found"

    def test_invalid_json_is_400(self, server: HTTPServer) -> None:
        host, port = server.server_address[:2]
        request = urllib.request.Request(
            f"http://{host}:{port}/issue/svc", data=b"{broken", method="POST"
        )
        with pytest.raises(urllib.error.HTTPError) as exc_info:
            urllib.request.urlopen(request, timeout=5)
        assert exc_info.value.code == 400

    def test_non_object_body_is_400(self, server: HTTPServer) -> None:
        status, data = _request(server, "POST", "/issue/svc", [1, 2])
        assert status == 400
        assert data["error"] == "Invalid JSON"

    def test_role_issue_read_revoke_flow(self, server: HTTPServer, hmac_secret: str) -> None:
        status, _ = _request(
            server, "PUT", "/roles/svc", {"algorithm": "HS256", "key": hmac_secret}
        )
        assert status == 204

        status, role = _request(server, "GET", "/roles/svc")
        assert status == 200
        assert role["algorithm"] == "HS256"
        assert "key" not in role

        status, issued = _request(server, "POST", "/issue/svc", {"jti": "http-1"})
        assert status == 200
        assert issued["jti"] == "http-1"

        status, token = _request(server, "GET", "/tokens/http-1")
        assert status == 200
        assert token["token"] == issued["token"]

        status, renewed = _request(server, "POST", "/leases/renew", issued["lease"])
        assert status == 200

        status, _ = _request(server, "POST", "/leases/revoke", renewed["lease"])
        assert status == 204
        assert _request(server, "GET", "/tokens/http-1")[0] == 404

    def test_delete_role(self, server: HTTPServer, hmac_secret: str) -> None:
        _request(server, "POST", "/roles/svc", {"algorithm": "HS256", "key": hmac_secret})
        assert _request(server, "DELETE", "/roles/svc")[0] == 204
        assert _request(server, "GET", "/roles")[1] == {"roles": []}

    def test_delete_unsupported_path_is_405(self, server: HTTPServer) -> None:
        assert _request(server, "DELETE", "/tokens/abc")[0] == 405
