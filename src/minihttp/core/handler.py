"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Runs the whole exchange for one accepted connection:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   read request line ─► read header block ─► route ─► serialize      │
    │                                                        │            │
    │                              close ◄─ write all bytes ◄┘            │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FAILURE CONTAINMENT
=============================================================================

Every error is caught HERE, at the connection boundary, and nowhere
further up. Whatever goes wrong with one client, the accept loop never
sees it and the next client is served normally.

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │  Failure                 │  Outcome                                 │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │  ParseError              │  warning logged, no response, close      │
    │  MissingRequiredHeader   │  warning logged, no response, close      │
    │  OSError (read/write)    │  warning logged, close                   │
    │  anything else           │  traceback logged, close                 │
    └──────────────────────────┴──────────────────────────────────────────┘

Nothing is written on failure: the client sees the connection close
without a status line.

=============================================================================
"""

import logging
import time
from typing import Callable, Optional

from ..access_log import AccessLogger
from ..errors import MissingRequiredHeader, ParseError
from ..http.headers import Headers
from ..http.method import Method
from ..http.response import Response
from ..http.router import route
from ..http.writer import ResponseWriter
from .connection import Connection, ConnectionState


logger = logging.getLogger(__name__)

RouteFunc = Callable[[Method, str, Headers], Response]


class ConnectionHandler:
    """
    Handles one connection from first byte to close.

    Holds no per-connection state: the same handler instance is shared by
    every worker thread, and everything a request needs is created inside
    handle().
    """

    def __init__(
        self,
        router: RouteFunc = route,
        writer: Optional[ResponseWriter] = None,
        access_logger: Optional[AccessLogger] = None,
    ):
        """
        Args:
            router: Function mapping (method, path, headers) to a Response.
            writer: Serializer for responses.
            access_logger: Records answered requests. None disables it.
        """
        self.router = router
        self.writer = writer or ResponseWriter()
        self.access_logger = access_logger

    def handle(self, conn: Connection) -> bool:
        """
        Serve one request on ``conn`` and close it.

        Never raises.

        Returns:
            True if a response was written, False if the connection was
            dropped.
        """
        started_at = time.perf_counter()

        with conn:  # Always closed, whatever happens below
            try:
                request = conn.read_request()

                conn.state = ConnectionState.PROCESSING
                response = self.router(request.method, request.path, request.headers)

                self.writer.write(conn, response)

            except ParseError as e:
                logger.warning(f"[{conn.id}] Dropping connection, bad request: {e}")
                return False

            except MissingRequiredHeader as e:
                logger.warning(f"[{conn.id}] Dropping connection: {e}")
                return False

            except OSError as e:
                logger.warning(f"[{conn.id}] I/O error: {e}")
                return False

            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")
                return False

        if self.access_logger is not None:
            self.access_logger.log(conn, request, response, started_at, time.perf_counter())

        return True
