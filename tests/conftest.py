# tests/conftest.py
import json
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


class TargetHandler(BaseHTTPRequestHandler):
    """Small HTTP target with one route per behaviour under test."""

    protocol_version = "HTTP/1.1"

    def log_message(self, format, *args):
        pass

    def _send(self, status, body, headers=()):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.send_response(status)
        for name, value in headers:
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        try:
            self.wfile.write(body)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def _trickle(self, pieces, delay=0.3):
        """Write pieces one at a time with a pause before each, then drop the connection."""
        self.close_connection = True
        try:
            for piece in pieces:
                time.sleep(delay)
                self.wfile.write(piece)
                self.wfile.flush()
        except OSError:
            pass

    def _read_body(self):
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length else b""

    def _handle(self):
        body = self._read_body()
        path = self.path.split("?", 1)[0]

        if path == "/json":
            self._send(200, json.dumps({"hello": "world", "items": [1, 2, 3], "nested": {"ok": True}}),
                       [("Content-Type", "application/json")])
        elif path == "/json-null":
            self._send(200, "null", [("Content-Type", "application/json")])
        elif path == "/text":
            self._send(200, "plain text, not json", [("Content-Type", "text/plain")])
        elif path == "/nan":
            self._send(200, "NaN", [("Content-Type", "text/plain")])
        elif path == "/empty":
            self._send(204 if self.command == "DELETE" else 200, b"")
        elif path == "/multi":
            self._send(200, "{}", [("Set-Cookie", "a=1"), ("Set-Cookie", "b=2"), ("x-lower-case", "yes")])
        elif path == "/missing":
            self._send(404, json.dumps({"error": "not found"}), [("Content-Type", "application/json")])
        elif path == "/redirect":
            self._send(302, b"", [("Location", "/json")])
        elif path == "/slow":
            time.sleep(2)
            self._send(200, "too late")
        elif path == "/slow-headers":
            lines = [b"HTTP/1.1 200 OK\r\n"] + [f"X-Slow-{i}: {i}\r\n".encode() for i in range(12)]
            self._trickle(lines + [b"Content-Length: 2\r\n\r\nok"])
        elif path == "/slow-body":
            self.send_response(200)
            self.send_header("Content-Length", "12")
            self.end_headers()
            self._trickle([b"x"] * 12)
        elif path == "/surrogate":
            self._send(200, b'{"lone": "\\ud800", "pair": "\\ud83d\\ude00", "\\udc00key": [1]}',
                       [("Content-Type", "application/json")])
        elif path == "/broken":
            self.send_response(200)
            self.send_header("Transfer-Encoding", "chunked")
            self.end_headers()
            self.wfile.write(b"5\r\nhello\r\n")
            self.wfile.flush()
            self.close_connection = True
        else:
            echo = {
                "method": self.command,
                "path": self.path,
                "headers": {k.lower(): v for k, v in self.headers.items()},
                "body": body.decode("utf-8"),
            }
            self._send(200, json.dumps(echo), [("Content-Type", "application/json")])

    do_GET = _handle
    do_POST = _handle
    do_PUT = _handle
    do_PATCH = _handle
    do_DELETE = _handle
    do_OPTIONS = _handle


@pytest.fixture(scope="session")
def http_target():
    """Base URL of a threaded HTTP server running for the whole test session."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), TargetHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


@pytest.fixture
def closed_port_url():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"http://127.0.0.1:{port}/"


def _make_input(*pairs):
    return json.dumps({"params": [{"inputname": name, "compvalue": value} for name, value in pairs]})


@pytest.fixture
def make_input():
    """Build an input document from (inputname, compvalue) pairs, in order."""
    return _make_input
