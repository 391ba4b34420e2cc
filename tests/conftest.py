from __future__ import annotations

import socket
import threading
import time
from contextlib import suppress
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Iterator

import pytest

DESCRIPTOR = '{"version": "2.8.0", "desc": "fixes", "history": []}'


class _Handler(BaseHTTPRequestHandler):
    def log_message(self, format: str, *args: object) -> None:
        pass

    def _reply(
        self,
        status: int,
        body: bytes,
        content_type: str = "application/json",
        extra_headers: dict[str, str] | None = None,
    ) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        for name, value in (extra_headers or {}).items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.send_header("X-Served-By", "fixture")
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def do_GET(self) -> None:
        if self.path.startswith("/slow"):
            time.sleep(1.0)
            self._reply(200, b"late")
        elif self.path.startswith("/version.json"):
            self._reply(200, DESCRIPTOR.encode())
        elif self.path.startswith("/bad-gzip"):
            self._reply(200, b"not gzip", extra_headers={"Content-Encoding": "gzip"})
        elif self.path.startswith("/missing"):
            self._reply(404, b"not found", "text/plain")
        else:
            self._reply(200, self.path.encode(), "text/plain")

    def do_HEAD(self) -> None:
        self._reply(200, b"")

    def do_POST(self) -> None:
        length = int(self.headers.get("Content-Length", "0"))
        self._reply(201, self.rfile.read(length), "text/plain")


@pytest.fixture
def http_server() -> Iterator[str]:
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


def _dribble(listener: socket.socket) -> None:
    conn, _ = listener.accept()
    with conn:
        conn.settimeout(5)
        received = b""
        while b"\r\n\r\n" not in received:
            data = conn.recv(4096)
            if not data:
                return
            received += data
        time.sleep(0.2)
        conn.sendall(b"HTTP/1.1 200 OK\r\nContent-Length: 4\r\nConnection: close\r\n\r\n")
        time.sleep(0.7)
        with suppress(OSError):
            conn.sendall(b"late")


@pytest.fixture
def dribbling_server() -> Iterator[str]:
    """Serves one response: headers after 0.2s, the body 0.7s after that."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    thread = threading.Thread(target=_dribble, args=(listener,), daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{listener.getsockname()[1]}/"
    finally:
        listener.close()
