"""
Unit tests for the connection handler, using in-memory sockets.
"""

import logging

import pytest

from minihttp.access_log import AccessLogger
from minihttp.core.connection import Connection, ConnectionState
from minihttp.core.handler import ConnectionHandler
from minihttp.http.response import text


def make_connection(sock) -> Connection:
    return Connection(socket=sock, address=("127.0.0.1", 50000))


@pytest.fixture
def handler() -> ConnectionHandler:
    return ConnectionHandler()


class TestSuccessfulExchange:
    """Requests that get a response."""

    def test_echo(self, handler, fake_socket_factory, sample_echo_request):
        """Test the echo scenario bytes."""
        sock = fake_socket_factory([sample_echo_request])
        conn = make_connection(sock)

        assert handler.handle(conn) is True
        assert sock.sent == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_root(self, handler, fake_socket_factory):
        """Test the root path."""
        sock = fake_socket_factory([b"GET / HTTP/1.1\r\n\r\n"])

        assert handler.handle(make_connection(sock)) is True
        assert sock.sent == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_not_found(self, handler, fake_socket_factory):
        """Test an unknown path."""
        sock = fake_socket_factory([b"GET /abcdefg HTTP/1.1\r\n\r\n"])

        assert handler.handle(make_connection(sock)) is True
        assert sock.sent == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_user_agent(self, handler, fake_socket_factory, sample_get_request):
        """Test the User-Agent is echoed."""
        sock = fake_socket_factory([sample_get_request])

        handler.handle(make_connection(sock))

        assert sock.sent.endswith(b"Content-Length: 6\r\n\r\npytest")

    def test_request_split_across_reads(self, handler, fake_socket_factory):
        """Test a request arriving in pieces."""
        sock = fake_socket_factory([
            b"GET /user-a",
            b"gent HTTP/1.1\r\nUser-Ag",
            b"ent: chunky\r",
            b"\n\r\n",
        ])

        assert handler.handle(make_connection(sock)) is True
        assert sock.sent.endswith(b"\r\n\r\nchunky")

    def test_client_closes_after_headers(self, handler, fake_socket_factory):
        """No blank line, then end of input: still answered."""
        sock = fake_socket_factory([b"GET /echo/eof HTTP/1.1\r\n"])

        assert handler.handle(make_connection(sock)) is True
        assert sock.sent.endswith(b"\r\n\r\neof")

    def test_body_is_not_read(self, handler, fake_socket_factory):
        """Reading stops at the blank line; the request body is never parsed."""
        sock = fake_socket_factory([
            b"POST /echo/x HTTP/1.1\r\nContent-Length: 3\r\n\r\n",
            b"abc",
        ])

        assert handler.handle(make_connection(sock)) is True
        assert sock.sent.endswith(b"\r\n\r\nx")

    def test_connection_is_closed(self, handler, fake_socket_factory, sample_echo_request):
        """Test the socket is closed afterwards."""
        sock = fake_socket_factory([sample_echo_request])
        conn = make_connection(sock)

        handler.handle(conn)

        assert sock.closed
        assert conn.state is ConnectionState.CLOSED
        assert conn.bytes_sent == len(sock.sent)


class TestDroppedConnections:
    """Failures close the connection without writing anything."""

    def test_malformed_request_line(self, handler, fake_socket_factory):
        """Test a bad request line writes nothing."""
        sock = fake_socket_factory([b"HELLO WORLD\r\n\r\n"])

        assert handler.handle(make_connection(sock)) is False
        assert sock.sent == b""
        assert sock.closed

    def test_unsupported_method(self, handler, fake_socket_factory):
        """Test an unknown verb writes nothing."""
        sock = fake_socket_factory([b"PATCH / HTTP/1.1\r\n\r\n"])

        assert handler.handle(make_connection(sock)) is False
        assert sock.sent == b""

    def test_empty_connection(self, handler, fake_socket_factory):
        """Test a client that sends nothing."""
        sock = fake_socket_factory([])

        assert handler.handle(make_connection(sock)) is False
        assert sock.sent == b""

    def test_missing_user_agent(self, handler, fake_socket_factory, caplog):
        """Test /user-agent without the header writes nothing."""
        sock = fake_socket_factory([b"GET /user-agent HTTP/1.1\r\n\r\n"])

        with caplog.at_level(logging.WARNING, logger="minihttp.core.handler"):
            assert handler.handle(make_connection(sock)) is False

        assert sock.sent == b""
        assert sock.closed
        assert "Missing required header: User-Agent" in caplog.text

    def test_write_failure(self, handler, fake_socket_factory, sample_echo_request):
        """Test a failed write drops the connection."""
        sock = fake_socket_factory([sample_echo_request], fail_on_send=True)

        assert handler.handle(make_connection(sock)) is False
        assert sock.closed

    def test_router_crash_is_contained(self, fake_socket_factory, sample_echo_request, caplog):
        """Test an unexpected error is logged, not raised."""
        def broken_router(method, path, headers):
            raise KeyError("boom")

        sock = fake_socket_factory([sample_echo_request])

        with caplog.at_level(logging.ERROR, logger="minihttp.core.handler"):
            assert ConnectionHandler(router=broken_router).handle(make_connection(sock)) is False

        assert sock.sent == b""
        assert "Connection error" in caplog.text


class TestHandlerWiring:
    """Custom routers and access logging."""

    def test_custom_router(self, fake_socket_factory):
        """Test a custom router is used."""
        seen = []

        def router(method, path, headers):
            seen.append((method.value, path))
            return text("custom")

        sock = fake_socket_factory([b"DELETE /anything HTTP/1.1\r\n\r\n"])
        ConnectionHandler(router=router).handle(make_connection(sock))

        assert seen == [("DELETE", "/anything")]
        assert sock.sent.endswith(b"custom")

    def test_answered_requests_are_access_logged(self, fake_socket_factory, sample_echo_request, caplog):
        """Test one access line per answered request."""
        handler = ConnectionHandler(access_logger=AccessLogger())
        sock = fake_socket_factory([sample_echo_request])

        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            handler.handle(make_connection(sock))

        records = [r for r in caplog.records if r.name == "minihttp.access"]
        assert len(records) == 1
        assert '"GET /echo/abc" 200 3' in records[0].getMessage()

    def test_dropped_requests_are_not_access_logged(self, fake_socket_factory, caplog):
        """Test dropped requests are not access logged."""
        handler = ConnectionHandler(access_logger=AccessLogger())
        sock = fake_socket_factory([b"nonsense\r\n\r\n"])

        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            handler.handle(make_connection(sock))

        assert not [r for r in caplog.records if r.name == "minihttp.access"]
