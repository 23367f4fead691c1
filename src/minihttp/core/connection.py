"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket. This is the "duplex byte stream" the
protocol layer works with: incremental reads in, one all-bytes write out.

=============================================================================
READING A REQUEST FROM A STREAM
=============================================================================

recv() returns whatever the kernel has, which may be a fragment:

    recv() #1   b"GET /echo/ab"
    recv() #2   b"c HTTP/1.1\r\nUser-Ag"
    recv() #3   b"ent: curl\r\n\r\n"

Each chunk is fed to a RequestParser, which either completes the request
or asks for more:

    ┌─────────────────────────────────────────────────────────────────┐
    │   parser = RequestParser()                                      │
    │   loop:                                                         │
    │       request = parser.parse()                                  │
    │       request?           -> return it                           │
    │       chunk = recv()                                            │
    │       chunk empty?       -> parser.feed_eof()  (client hung up) │
    │       otherwise          -> parser.feed(chunk)                  │
    └─────────────────────────────────────────────────────────────────┘

Only the request line and header block are ever read. Bytes after the
blank line (a body the client decided to send anyway) are left unread and
drained on close.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
              │              │                        ▲
              └──────────────┴─── error ──────────────┘

One request per connection: there is no keep-alive state.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..http.request import Request, RequestParser


logger = logging.getLogger(__name__)

# Bounds on discarding a request body the client is still sending
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and debugging."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Reading the request line and headers
    PROCESSING = "processing"  # Request parsed, routing
    WRITING = "writing"        # Sending response bytes
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used to prefix log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Bytes requested per recv().
        timeout: Socket timeout in seconds, None to block.
        max_line_size: Passed to the RequestParser.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 4096
    timeout: Optional[float] = None
    max_line_size: int = 8192

    bytes_received: int = 0
    bytes_sent: int = 0

    def __post_init__(self):
        # Blocking socket; settimeout(None) keeps it fully blocking.
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Request:
        """
        Read and parse one request from the socket.

        Returns:
            The parsed Request.

        Raises:
            ParseError: If the bytes do not form a valid request.
            OSError: If the read fails (reset, timeout, ...).
        """
        self.state = ConnectionState.READING
        parser = RequestParser(max_line_size=self.max_line_size)

        while True:
            request = parser.parse()
            if request is not None:
                return request

            chunk = self.socket.recv(self.buffer_size)
            if not chunk:
                logger.debug(f"[{self.id}] Client finished sending")
                parser.feed_eof()
                continue

            self.bytes_received += len(chunk)
            parser.feed(chunk)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> None:
        """
        Send all of ``data`` to the client.

        sendall() keeps writing until every byte is out; a plain send()
        may stop after a partial write.

        Raises:
            OSError: If the client went away mid-write.
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)
        self.bytes_sent += len(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        1. shutdown(SHUT_WR)   send FIN: "no more bytes from us"
        2. drain               discard what the client still sends, briefly
        3. close()             release the file descriptor

        Errors here are expected (the client may already be gone) and are
        not reported.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self._drain()
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection closed after {self.age:.3f}s "
            f"({self.bytes_received} in, {self.bytes_sent} out)"
        )

    def _drain(self):
        """Discard unread input, for at most DRAIN_TIMEOUT seconds or DRAIN_LIMIT bytes."""
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        while drained < DRAIN_LIMIT:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            self.socket.settimeout(remaining)
            chunk = self.socket.recv(1024)
            if not chunk:
                break
            drained += len(chunk)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
