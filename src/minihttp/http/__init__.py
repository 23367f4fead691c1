"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between "bytes arrived" and "bytes to send". No sockets here:
these modules only see text and bytes, which is what makes them testable
without a network.

    bytes ──► RequestParser ──► Request ──► route() ──► Response
                                                           │
    bytes ◄──────────────── ResponseWriter.serialize() ◄───┘

=============================================================================
MODULE COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ method.py    Method enum (GET, POST, PUT, DELETE) and its parser    │
    │ headers.py   HeaderName allowlist, per-line header parsing          │
    │ request.py   RequestLine, Request, streaming RequestParser          │
    │ response.py  Status, Response value, convenience constructors       │
    │ router.py    Fixed route table: /, /user-agent, /echo/*, 404        │
    │ writer.py    ResponseWriter: Response -> wire bytes                 │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .method import Method
from .headers import HeaderName, Headers, parse_header_line
from .request import Request, RequestLine, RequestParser, ParserState, parse_request
from .response import Response, Status, ok, not_found, text
from .router import route
from .writer import ResponseWriter, serialize_response

__all__ = [
    # Request side
    "Method",
    "HeaderName",
    "Headers",
    "parse_header_line",
    "Request",
    "RequestLine",
    "RequestParser",
    "ParserState",
    "parse_request",

    # Response side
    "Response",
    "Status",
    "ok",
    "not_found",
    "text",
    "ResponseWriter",
    "serialize_response",

    # Routing
    "route",
]
