"""
=============================================================================
HTTP SERVER
=============================================================================

Wires the pieces together:

    ServerConfig
        │
        ▼
    HTTPServer ──► SocketServer ──accept──► Connection
                        │
                        ▼
             threaded:   ThreadPool.submit(handler.handle, conn)
             sequential: handler.handle(conn)
                        │
                        ▼
                 ConnectionHandler ──► route() ──► ResponseWriter

=============================================================================
USAGE
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4221))
    server.run()          # blocks until Ctrl+C / SIGTERM / shutdown()

=============================================================================
"""

import logging
from typing import Optional

from .access_log import AccessLogger
from .config import ServerConfig
from .core import Connection, ConnectionHandler, SocketServer, ThreadPool


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class HTTPServer:
    """
    Minimal HTTP/1.1 server.

    Serves a fixed route table (/, /user-agent, /echo/*) with one request
    per connection.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults are used if omitted.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail fast

        self._socket_server = SocketServer(self.config)
        self._handler = ConnectionHandler(
            access_logger=AccessLogger(log_format=self.config.log_format),
        )

        self._thread_pool: Optional[ThreadPool] = None
        if self.config.is_threaded:
            self._thread_pool = ThreadPool(
                min_workers=self.config.min_workers,
                max_workers=self.config.max_workers,
            )

        self._running = False

    @property
    def address(self):
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server and block until it is stopped.

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._running = True

        if self._thread_pool is not None:
            self._thread_pool.start()

        logger.info(
            f"Starting HTTP server on {self.config.host}:{self.config.port} "
            f"({self.config.concurrency})"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Stop accepting connections; run() returns once in-flight work ends."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up. Returns False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure the root logger from config.log_level."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        logging.getLogger("minihttp").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False

        if self._thread_pool is not None:
            # Pending connections are handled before workers exit
            self._thread_pool.shutdown(wait=True, timeout=30.0)

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION DISPATCH
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by SocketServer for each accepted connection."""
        if self._thread_pool is None:
            self._handler.handle(conn)
            return

        try:
            self._thread_pool.submit(self._handler.handle, args=(conn,))
        except RuntimeError as e:
            # Pool already shutting down
            logger.warning(f"[{conn.id}] Rejecting connection: {e}")
            conn.close()
