"""Shared fixtures: loopback downstream stubs, static roots and relay clients."""

from __future__ import annotations

import socket
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from flask.testing import FlaskClient

from http_a_tcp import create_app
from relay_config import RelaySettings


class StubDownstream:
    """Loopback TCP service: reads the request until EOF, then replies.

    A reply given as a list is sent one chunk at a time, `drip_interval`
    seconds apart.
    """

    def __init__(self, respond: Callable[[bytes], Any], drip_interval: float = 0.0) -> None:
        self.respond = respond
        self.drip_interval = drip_interval
        self.requests: list[bytes] = []
        self.connections = 0
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(32)
        self.sock.settimeout(0.1)
        self.port = self.sock.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self.sock.accept()
            except socket.timeout:
                continue
            with self._lock:
                self.connections += 1
            threading.Thread(target=self._handle, args=(conn,), daemon=True).start()

    def _handle(self, conn: socket.socket) -> None:
        with conn:
            conn.settimeout(5.0)
            data = b""
            while True:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                data += chunk
            with self._lock:
                self.requests.append(data)
            reply = self.respond(data)
            if not reply:
                return
            chunks = reply if isinstance(reply, list) else [reply]
            try:
                for i, chunk in enumerate(chunks):
                    if i:
                        time.sleep(self.drip_interval)
                    conn.sendall(chunk)
            except OSError:
                # client already gave up (timeout tests)
                pass

    def close(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2)
        self.sock.close()


@pytest.fixture
def downstream_factory() -> Iterator[Callable[..., StubDownstream]]:
    """Create loopback downstream services, closed at teardown."""
    stubs: list[StubDownstream] = []

    def factory(respond: Callable[[bytes], Any], drip_interval: float = 0.0) -> StubDownstream:
        stub = StubDownstream(respond, drip_interval)
        stubs.append(stub)
        return stub

    yield factory

    for stub in stubs:
        stub.close()


@pytest.fixture
def echo_downstream(downstream_factory) -> StubDownstream:
    """Downstream that answers with the exact bytes it received."""
    return downstream_factory(lambda data: data)


@pytest.fixture
def unused_port() -> int:
    """A loopback port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    root = tmp_path / "static"
    root.mkdir()
    (root / "index.html").write_text("<html><body>index</body></html>", encoding="utf-8")
    (root / "style.css").write_text("body { color: red; }", encoding="utf-8")
    (root / "notes.txt").write_text("plain notes", encoding="utf-8")
    (root / "sub").mkdir()
    (root / "sub" / "page.html").write_text("<p>sub</p>", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("outside the root", encoding="utf-8")
    return root


@pytest.fixture
def make_client(static_dir: Path) -> Callable[..., FlaskClient]:
    """Build a relay test client pointed at the given downstream port."""

    def factory(downstream_port: int, **overrides) -> FlaskClient:
        settings = RelaySettings(
            DOWNSTREAM_HOST="127.0.0.1",
            DOWNSTREAM_PORT=downstream_port,
            DOWNSTREAM_TIMEOUT_SECONDS=overrides.pop("DOWNSTREAM_TIMEOUT_SECONDS", 2.0),
            STATIC_DIR=static_dir,
            **overrides,
        )
        return create_app(settings).test_client()

    return factory
