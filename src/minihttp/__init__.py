"""
=============================================================================
MINIHTTP - Minimal HTTP/1.1 Server Over Raw Sockets
=============================================================================

A deliberately small HTTP/1.1 server: one request per connection, four
verbs, three recognized request headers and a fixed route table.

    GET /                  ->  200 OK
    GET /user-agent        ->  200 OK, body = User-Agent header
    GET /echo/<text>       ->  200 OK, body = <text>
    anything else          ->  404 Not Found

=============================================================================
PACKAGE LAYOUT
=============================================================================

    minihttp/
    ├── http/           protocol layer: parse, route, serialize (no sockets)
    ├── core/           sockets, connections, handler, thread pool
    ├── server.py       HTTPServer: wires config, sockets and handler
    ├── config.py       ServerConfig dataclass
    ├── errors.py       exception hierarchy
    ├── access_log.py   one line per answered request
    └── __main__.py     command line entry point

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
