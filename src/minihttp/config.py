"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one dataclass. Defaults are chosen so that
``HTTPServer()`` with no arguments behaves like the classic toy server:
localhost, port 4221, no read timeout.

=============================================================================
CONCURRENCY MODES
=============================================================================

    threaded     Each accepted connection becomes one task on a thread
    (default)    pool. The accept loop never waits on a client's I/O.

    sequential   The accept loop handles each connection to completion
                 before accepting the next one. One slow client blocks
                 everybody behind it.

Connections share no mutable state in either mode, so neither needs locks
around request handling.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


CONCURRENCY_MODES = ("threaded", "sequential")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK     host, port, backlog, buffer_size, timeout
    PROTOCOL    max_line_size
    THREADING   concurrency, min_workers, max_workers
    LOGGING     log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """IP address to bind to. Use "0.0.0.0" inside containers."""

    port: int = 4221
    """Port to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of connections queued by the kernel before accept()."""

    buffer_size: int = 4096
    """Bytes requested per recv() call."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block until the client sends the blank line or hangs up.
    A timeout, when set, drops the connection as an I/O error.
    """

    # ─────────────────────────────────────────────────────────────────────
    # PROTOCOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_line_size: int = 8192
    """Longest request or header line accepted, in bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # THREADING SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    concurrency: str = "threaded"
    """Either "threaded" or "sequential" (see module docs)."""

    min_workers: int = 4
    """Worker threads started with the server (threaded mode)."""

    max_workers: int = 16
    """Upper bound on worker threads (threaded mode)."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: "text" (one readable line) or "json"."""

    @property
    def is_threaded(self) -> bool:
        return self.concurrency == "threaded"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST         Server host (default: 127.0.0.1)
        HTTP_PORT         Server port (default: 4221)
        HTTP_WORKERS      Max worker threads (default: 16)
        HTTP_TIMEOUT      Socket timeout in seconds (default: none)
        HTTP_CONCURRENCY  threaded | sequential (default: threaded)
        HTTP_LOG_LEVEL    Logging level (default: INFO)
        HTTP_LOG_FORMAT   text | json (default: text)

        =====================================================================
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        max_workers = int(os.getenv("HTTP_WORKERS", "16"))
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            timeout=float(timeout) if timeout else None,
            concurrency=os.getenv("HTTP_CONCURRENCY", "threaded"),
            min_workers=min(4, max_workers),
            max_workers=max_workers,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at server construction so a bad value fails at startup,
        not on the first request.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_line_size < 1:
            raise ValueError("max_line_size must be >= 1")

        if self.concurrency not in CONCURRENCY_MODES:
            raise ValueError(
                f"Invalid concurrency: {self.concurrency!r}. "
                f"Must be one of {', '.join(CONCURRENCY_MODES)}."
            )

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log_format: {self.log_format!r}. "
                f"Must be one of {', '.join(LOG_FORMATS)}."
            )
