"""Shared fixtures: a local HTTP server that records requests and replays canned responses."""

import json
import threading
import time
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

PROXY_VARS = ("http_proxy", "https_proxy", "all_proxy", "HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY")


@dataclass
class RecordedRequest:
    path: str
    headers: dict  # lower-cased names
    body: bytes

    def json(self):
        return json.loads(self.body)


@dataclass
class Route:
    status: int = 200
    body: bytes = b""
    content_type: str = "application/json"
    delay: float = 0.0


@dataclass
class MockServer:
    url: str
    requests: list[RecordedRequest] = field(default_factory=list)
    routes: dict[str, Route] = field(default_factory=dict)

    def respond(self, path: str, status: int = 200, json_body=None, text: str | None = None,
                delay: float = 0.0) -> None:
        if json_body is not None:
            self.routes[path] = Route(status, json.dumps(json_body).encode(), "application/json", delay)
        else:
            self.routes[path] = Route(status, (text or "").encode(), "text/plain", delay)

    def requests_to(self, path: str) -> list[RecordedRequest]:
        return [r for r in self.requests if r.path == path]


class _Handler(BaseHTTPRequestHandler):

    def do_POST(self):
        length = int(self.headers.get('Content-Length', 0))
        body = self.rfile.read(length)
        mock = self.server.mock
        mock.requests.append(RecordedRequest(self.path, {k.lower(): v for k, v in self.headers.items()}, body))

        route = mock.routes.get(self.path, Route(404, b'{"error": {"message": "no route"}}'))
        if route.delay:
            time.sleep(route.delay)
        try:
            self.send_response(route.status)
            self.send_header('Content-Type', route.content_type)
            self.send_header('Content-Length', str(len(route.body)))
            self.end_headers()
            self.wfile.write(route.body)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def mock_server(monkeypatch):
    """Start a threaded HTTP server on 127.0.0.1 with an ephemeral port."""
    for var in PROXY_VARS:
        monkeypatch.delenv(var, raising=False)

    httpd = ThreadingHTTPServer(('127.0.0.1', 0), _Handler)
    httpd.daemon_threads = True
    host, port = httpd.server_address[:2]
    httpd.mock = MockServer(url=f"http://{host}:{port}")

    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield httpd.mock
    finally:
        httpd.shutdown()
        httpd.server_close()
