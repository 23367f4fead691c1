"""
=============================================================================
ERRORS
=============================================================================

Every failure the server can hit is scoped to ONE connection. Nothing in
this module is fatal to the process: the accept loop logs the error, drops
that connection and keeps accepting.

    HTTPServerError
    ├── ConnectionAcceptError      accept() failed for one attempt
    ├── ParseError
    │   ├── NoMatch                method literal did not match
    │   ├── MalformedRequestLine   no valid METHOD SP PATH SP ...
    │   ├── InvalidHeaderLine      one header line unusable (always skipped)
    │   ├── IncompleteRequest      client hung up before the request line
    │   └── LineTooLong            line exceeded the configured limit
    └── MissingRequiredHeader      route needs a header the client omitted

Read/write failures are not wrapped: they surface as the builtin OSError
family (ConnectionResetError, BrokenPipeError, TimeoutError, ...).

=============================================================================
TWO ERROR SCOPES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  LINE SCOPE        InvalidHeaderLine                                │
    │                    raised by the per-line header transform and      │
    │                    caught by the header block parser -> "skip"      │
    ├─────────────────────────────────────────────────────────────────────┤
    │  CONNECTION SCOPE  everything else                                  │
    │                    propagates to ConnectionHandler -> log + drop    │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from typing import Optional


class HTTPServerError(Exception):
    """Base class for all errors raised by minihttp."""


class ConnectionAcceptError(HTTPServerError):
    """
    Raised when accepting a client connection fails.

    Only that accept attempt is lost; the listener keeps running.
    """


class ParseError(HTTPServerError):
    """
    Raised when request bytes cannot be turned into a request.

    Attributes:
        line: The offending line of text, when there is one.
    """

    def __init__(self, message: str, line: Optional[str] = None):
        super().__init__(message)
        self.line = line


class NoMatch(ParseError):
    """None of the accepted method literals matched."""


class MalformedRequestLine(ParseError):
    """The request line has no valid method and path."""


class InvalidHeaderLine(ParseError):
    """
    A single header line could not be used.

    The header block parser converts this into "skip this line"; it never
    reaches the connection handler.
    """


class IncompleteRequest(ParseError):
    """The client closed the connection before sending a request line."""


class LineTooLong(ParseError):
    """A line grew past the configured maximum without a terminator."""


class MissingRequiredHeader(HTTPServerError):
    """
    Raised by the router when a route needs a header that is absent.

    The connection is dropped without a response.

    Attributes:
        header: The HeaderName that was required.
    """

    def __init__(self, header):
        super().__init__(f"Missing required header: {header.value}")
        self.header = header
