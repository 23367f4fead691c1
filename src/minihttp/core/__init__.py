"""
=============================================================================
CORE NETWORKING
=============================================================================

Sockets, connections and threads. The HTTP layer (minihttp.http) never
touches a socket; everything here exists to feed it bytes and ship its
bytes back out.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SOCKET SERVER (socket_server.py)                                   │
    │  • Binds the listening socket, runs the accept loop                 │
    │  • Wraps every accepted client in a Connection                      │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  THREAD POOL (thread_pool.py)          threaded mode only           │
    │  • One task per connection, unbounded queue                         │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  CONNECTION HANDLER (handler.py)                                    │
    │  • read -> parse -> route -> write -> close                         │
    │  • Catches every per-connection failure                             │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  CONNECTION (connection.py)                                         │
    │  • Incremental reads into a RequestParser, sendall() for writes     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .connection import Connection, ConnectionState
from .handler import ConnectionHandler
from .socket_server import SocketServer
from .thread_pool import ThreadPool

__all__ = [
    "Connection",
    "ConnectionState",
    "ConnectionHandler",
    "SocketServer",
    "ThreadPool",
]
