"""
=============================================================================
RESPONSE WRITER
=============================================================================

Serializes a Response into the exact bytes the client receives.

    HTTP/1.1 200 OK\r\n              <- status line
    Content-Type: text/plain\r\n     <- one line per header, in order
    Content-Length: 3\r\n
    \r\n                             <- blank line ends the headers
    abc                              <- body, NO trailing terminator

With no headers the blank line directly follows the status line:

    HTTP/1.1 404 Not Found\r\n\r\n

Nothing is added behind the caller's back: no Date, no Server, no
Connection header. The bytes are fully determined by the Response.

=============================================================================
"""

import logging

from .response import Response


logger = logging.getLogger(__name__)

HTTP_VERSION = "HTTP/1.1"
CRLF = "\r\n"


class ResponseWriter:
    """Turns Response values into wire bytes and sends them."""

    def __init__(self, version: str = HTTP_VERSION):
        self.version = version

    def status_line(self, response: Response) -> str:
        """e.g. ``HTTP/1.1 404 Not Found``"""
        return f"{self.version} {int(response.status)} {response.status.phrase}"

    def serialize(self, response: Response) -> bytes:
        """
        Serialize ``response`` to bytes.

        Returns:
            Complete response bytes ready for socket.sendall().
        """
        lines = [self.status_line(response)]
        for name, value in response.headers.items():
            lines.append(f"{name.value}: {value}")

        # Status line and headers each end in CRLF, then one more CRLF
        # separates them from the body.
        head = CRLF.join(lines) + CRLF + CRLF
        return head.encode("utf-8") + response.body.encode("utf-8")

    def write(self, connection, response: Response) -> int:
        """
        Serialize ``response`` and send all of it on ``connection``.

        Args:
            connection: Anything with a ``send_response(bytes)`` method,
                        normally a core.Connection.
            response: The response to send.

        Returns:
            Number of bytes written.

        Raises:
            OSError: If the write fails.
        """
        data = self.serialize(response)
        connection.send_response(data)
        logger.debug(f"Wrote {len(data)} bytes: {self.status_line(response)}")
        return len(data)


def serialize_response(response: Response) -> bytes:
    """Serialize with the default HTTP/1.1 writer."""
    return ResponseWriter().serialize(response)
