"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

The connection supplier: binds a listening socket and hands every accepted
client to a callback as a Connection. It knows nothing about HTTP.

    socket() ─► setsockopt() ─► bind() ─► listen() ─► accept loop
                                                          │
                                         Connection ◄─────┘
                                             │
                                             ▼
                                     connection_handler(conn)

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

accept() blocks until a client connects. The listening socket gets a 1
second timeout so the loop wakes up regularly and notices shutdown():

    while running:
        try:
            accept()          # at most 1 second
        except timeout:
            continue          # re-check running flag

=============================================================================
ACCEPT FAILURES
=============================================================================

A failed accept() (e.g. the client reset the connection while it sat in
the backlog, or the process ran out of file descriptors) only loses that
one attempt. It is raised as ConnectionAcceptError, logged, and the loop
carries on.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from ..errors import ConnectionAcceptError
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, ...).

        The socket is not created until start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        # Set once the socket is listening, cleared again on cleanup
        self._ready_event = threading.Event()
        self._shutdown_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address the server is listening on.

        After start() this is the real bound address, so with port=0 it
        reports the port the OS picked.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create the listening TCP socket with the options we want."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind right after a restart instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses go out in one sendall(); don't let Nagle hold them back
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Turn SIGTERM and SIGINT into a graceful shutdown.

        Python only allows installing signal handlers from the main
        thread; when the server runs in a background thread (tests,
        embedding) this is skipped.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop. Blocks until shutdown().

        Args:
            connection_handler: Called once per accepted Connection.

        Raises:
            OSError: If binding fails (port in use, permission denied).
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._shutdown_event.clear()
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept(self) -> Connection:
        """
        Accept one client and wrap it in a Connection.

        Raises:
            socket.timeout: No client within the poll interval.
            ConnectionAcceptError: accept() failed for this attempt.
        """
        try:
            client_socket, client_address = self._socket.accept()
        except socket.timeout:
            raise
        except OSError as e:
            raise ConnectionAcceptError(f"accept() failed: {e}") from e

        conn = Connection(
            socket=client_socket,
            address=client_address,
            buffer_size=self.config.buffer_size,
            timeout=self.config.timeout,
            max_line_size=self.config.max_line_size,
        )
        logger.debug(f"[{conn.id}] Accepted new connection from {client_address[0]}:{client_address[1]}")
        return conn

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                conn = self._accept()
            except socket.timeout:
                continue
            except ConnectionAcceptError as e:
                if not self._running:
                    break  # Listening socket closed by shutdown
                logger.error(str(e))
                continue

            connection_handler(conn)

    def shutdown(self):
        """
        Ask the accept loop to stop. Idempotent, callable from any thread
        or from a signal handler.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False
        self._shutdown_event.set()

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready_event.clear()
        self._running = False
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until shutdown() is called. Returns False on timeout."""
        return self._shutdown_event.wait(timeout)
