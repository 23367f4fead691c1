"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, List, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample GET request with a mix of known and unknown headers."""
    return (
        b"GET /user-agent HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_echo_request() -> bytes:
    """The classic echo request."""
    return b"GET /echo/abc HTTP/1.1\r\n\r\n"


class FakeSocket:
    """
    Minimal socket stand-in.

    recv() hands out the given chunks one by one, then b"" (end of input).
    Everything passed to sendall() is collected in ``sent``.
    """

    def __init__(self, chunks: Optional[List[bytes]] = None, fail_on_send: bool = False):
        self._chunks = list(chunks or [])
        self.sent = b""
        self.fail_on_send = fail_on_send
        self.closed = False
        self.timeout = None
        self.recv_calls = 0

    def recv(self, bufsize: int) -> bytes:
        self.recv_calls += 1
        if self.closed:
            raise OSError("socket closed")
        if self._chunks:
            return self._chunks.pop(0)
        return b""

    def sendall(self, data: bytes) -> None:
        if self.fail_on_send:
            raise BrokenPipeError("client went away")
        self.sent += data

    def settimeout(self, timeout) -> None:
        self.timeout = timeout

    def shutdown(self, how) -> None:
        pass

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_socket_factory():
    """Build FakeSockets from a list of chunks."""
    return FakeSocket


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def exchange(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes on a new connection and read until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as sock:
            sock.sendall(raw)
            sock.shutdown(socket.SHUT_WR)
            return recv_all(sock)


def recv_all(sock: socket.socket) -> bytes:
    """Read until the peer closes the connection."""
    data = b""
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return data
        data += chunk


def _make_test_server(free_port: int, concurrency: str) -> TestServer:
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        concurrency=concurrency,
        min_workers=2,
        max_workers=4,
        log_level="WARNING",
    ))
    return TestServer(server)


@pytest.fixture
def test_server(free_port: int) -> Generator[TestServer, None, None]:
    """A threaded server running in the background."""
    test_srv = _make_test_server(free_port, "threaded")
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def sequential_server(free_port: int) -> Generator[TestServer, None, None]:
    """A sequential server running in the background."""
    test_srv = _make_test_server(free_port, "sequential")
    test_srv.start()

    yield test_srv

    test_srv.stop()
