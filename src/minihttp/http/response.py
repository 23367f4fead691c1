"""
=============================================================================
HTTP RESPONSE MODEL
=============================================================================

A Response is an immutable value built once by the router and consumed
once by the ResponseWriter.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Response(                                                          │
    │      status=Status.OK,                                              │
    │      headers={Content-Type: text/plain, Content-Length: 3},         │
    │      body="abc",                                                    │
    │  )                                                                  │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FRAMING INVARIANT
=============================================================================

There is no keep-alive and no chunked encoding, so the only framing the
client gets is Content-Length. Every Response is checked at construction:

    Content-Length present  ->  value == str(len(body.encode("utf-8")))
    Content-Length absent   ->  body == ""

A Response that breaks this can not be built (ValueError), so the writer
never has to second-guess what it serializes.

Content-Length counts BYTES, not characters: "héllo" is 6 bytes long.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict

from .headers import HeaderName, Headers, freeze_headers


TEXT_PLAIN = "text/plain"


class Status(IntEnum):
    """
    Response status codes the server emits.

    IntEnum, so members compare equal to their numeric code:

        >>> Status.NOT_FOUND == 404
        True
        >>> Status.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _PHRASES[self]


# Every Status member must have an entry here.
_PHRASES: Dict[Status, str] = {
    Status.OK: "OK",
    Status.NOT_FOUND: "Not Found",
}


def body_length(body: str) -> int:
    """Length of ``body`` in bytes as it will be sent on the wire."""
    return len(body.encode("utf-8"))


@dataclass(frozen=True)
class Response:
    """
    An HTTP response value.

    Attributes:
        status: Response status.
        headers: Response headers, in the order they will be written.
        body: Response body text (UTF-8 on the wire).

    Raises:
        ValueError: If Content-Length and body disagree (see module docs).
    """

    status: Status = Status.OK
    headers: Headers = field(default_factory=dict)
    body: str = ""

    def __post_init__(self):
        # Freeze whatever mapping the caller handed in.
        object.__setattr__(self, "headers", freeze_headers(dict(self.headers)))

        declared = self.headers.get(HeaderName.CONTENT_LENGTH)
        if declared is None:
            if self.body:
                raise ValueError("Response with a body must declare Content-Length")
        elif declared != str(body_length(self.body)):
            raise ValueError(
                f"Content-Length {declared} does not match body length "
                f"{body_length(self.body)}"
            )

    @property
    def content_length(self) -> int:
        return body_length(self.body)


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================

def empty(status: Status) -> Response:
    """Response with no headers and no body."""
    return Response(status=status)


def ok() -> Response:
    """200 OK with no headers and no body."""
    return empty(Status.OK)


def not_found() -> Response:
    """404 Not Found with no headers and no body."""
    return empty(Status.NOT_FOUND)


def text(body: str, status: Status = Status.OK) -> Response:
    """
    Plain text response.

    Sets Content-Type first and Content-Length second; the writer keeps
    that order on the wire.
    """
    return Response(
        status=status,
        headers={
            HeaderName.CONTENT_TYPE: TEXT_PLAIN,
            HeaderName.CONTENT_LENGTH: str(body_length(body)),
        },
        body=body,
    )
