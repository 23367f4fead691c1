"""
=============================================================================
ROUTER
=============================================================================

Maps a request to a Response. The route table is fixed:

    ┌──────────────────────┬────────────────────────────────────────────────┐
    │  Path                │  Response                                      │
    ├──────────────────────┼────────────────────────────────────────────────┤
    │  /                   │  200, no headers, empty body                   │
    │  /user-agent         │  200 text/plain, body = User-Agent value       │
    │                      │  (no User-Agent -> MissingRequiredHeader)      │
    │  /echo/<anything>    │  200 text/plain, body = <anything>             │
    │  anything else       │  404, no headers, empty body                   │
    └──────────────────────┴────────────────────────────────────────────────┘

The method is accepted but not looked at: every route answers every verb.

The echo suffix is used exactly as it appears in the request target. It
is NOT URL-decoded, and it may be empty or contain slashes:

    /echo/           -> ""
    /echo/a/b        -> "a/b"
    /echo/hello%20x  -> "hello%20x"

Routing is a pure function of its arguments. It keeps no state between
calls, which is what lets every worker thread call it without locks.

=============================================================================
"""

from .headers import HeaderName, Headers
from .method import Method
from .response import Response, not_found, ok, text
from ..errors import MissingRequiredHeader


ROOT_PATH = "/"
USER_AGENT_PATH = "/user-agent"
ECHO_PREFIX = "/echo/"


def route(method: Method, path: str, headers: Headers) -> Response:
    """
    Build the response for a request.

    Args:
        method: Request method (not inspected).
        path: Raw request path.
        headers: Recognized request headers.

    Returns:
        The Response to send.

    Raises:
        MissingRequiredHeader: ``/user-agent`` requested without a
                               User-Agent header.
    """
    if path == ROOT_PATH:
        return ok()

    if path == USER_AGENT_PATH:
        return user_agent(headers)

    if path.startswith(ECHO_PREFIX):
        return echo(path[len(ECHO_PREFIX):])

    return not_found()


def user_agent(headers: Headers) -> Response:
    """Echo the client's User-Agent header back as the body."""
    value = headers.get(HeaderName.USER_AGENT)
    if value is None:
        raise MissingRequiredHeader(HeaderName.USER_AGENT)
    return text(value)


def echo(suffix: str) -> Response:
    """Echo the path suffix back as the body."""
    return text(suffix)
