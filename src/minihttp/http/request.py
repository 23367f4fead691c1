"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes a client sends into a structured Request.

=============================================================================
WHAT WE PARSE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  REQUEST LINE                                                       │
    │      GET /echo/abc HTTP/1.1\r\n                                     │
    │      ─┬─ ────┬──── ────┬───                                         │
    │       │      │         │                                            │
    │    Method   Path    ignored (never validated)                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │  HEADER BLOCK                                                       │
    │      User-Agent: curl/8.4.0\r\n     <- kept (allowlisted)           │
    │      Accept: */*\r\n                <- skipped                      │
    │      \r\n                           <- blank line = end of headers  │
    ├─────────────────────────────────────────────────────────────────────┤
    │  BODY                                                               │
    │      never read                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STREAMING
=============================================================================

TCP is a byte stream, not a message stream. A single recv() can return
half a request line, or the whole request plus change. The parser is
therefore fed incrementally and asked to make progress after each chunk:

    parser = RequestParser()
    while (request := parser.parse()) is None:     # None = need more input
        chunk = sock.recv(4096)
        parser.feed(chunk) if chunk else parser.feed_eof()

parse() has THREE outcomes, not two:

    Request  -> complete
    None     -> incomplete, feed more bytes and call again
    raises   -> ParseError, the request can never become valid

Consumed lines are removed from the buffer, so calling parse() again after
more input resumes where it stopped instead of starting over.

=============================================================================
LINE FRAMING
=============================================================================

A line ends at "\n"; one trailing "\r" is stripped. CRLF is what clients
send, bare LF is tolerated. Bytes are decoded as UTF-8 with replacement
characters for invalid sequences.

On end of input:
    - leftover bytes without a terminator form one last line
    - a header block that never saw its blank line is treated as finished
    - no request line at all raises IncompleteRequest

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..errors import IncompleteRequest, LineTooLong, MalformedRequestLine, NoMatch
from .headers import EMPTY_HEADERS, HeaderName, Headers, parse_header_block
from .method import Method


logger = logging.getLogger(__name__)

SPACE = " "


@dataclass(frozen=True)
class RequestLine:
    """
    The first line of a request: method and path.

    Attributes:
        method: The request method.
        path: Raw request target, exactly as sent (no URL decoding).
    """

    method: Method
    path: str

    @classmethod
    def parse(cls, line: str) -> "RequestLine":
        """
        Parse ``METHOD SP PATH SP <rest>``.

        PATH is the longest non-empty run of non-space characters. The
        rest of the line (normally the protocol version) is discarded.

        Raises:
            MalformedRequestLine: If the method is unknown or no
                                  space-delimited path follows it.
        """
        try:
            method, rest = Method.parse(line)
        except NoMatch as e:
            raise MalformedRequestLine(f"Invalid request line: {line!r}", line=line) from e

        if not rest.startswith(SPACE):
            raise MalformedRequestLine(f"Expected space after method: {line!r}", line=line)

        # The path must be followed by another space; "GET /" alone is
        # not a complete request line.
        path, separator, _ = rest[1:].partition(SPACE)
        if not path or not separator:
            raise MalformedRequestLine(f"Missing request path: {line!r}", line=line)

        return cls(method=method, path=path)


@dataclass(frozen=True)
class Request:
    """A parsed request: request line plus recognized headers."""

    request_line: RequestLine
    headers: Headers = field(default_factory=lambda: EMPTY_HEADERS)

    @property
    def method(self) -> Method:
        return self.request_line.method

    @property
    def path(self) -> str:
        return self.request_line.path

    @property
    def user_agent(self) -> Optional[str]:
        return self.headers.get(HeaderName.USER_AGENT)


class ParserState(Enum):
    """Where the parser is in the request."""

    REQUEST_LINE = "request_line"
    HEADERS = "headers"
    DONE = "done"


class RequestParser:
    """
    Incremental request parser for ONE request.

    ==========================================================================
    STATE MACHINE
    ==========================================================================

        REQUEST_LINE ──(line)──► HEADERS ──(blank line)──► DONE
             │                     │  ▲
             │                     └──┘ header line (collected)
             ▼
        MalformedRequestLine

    ==========================================================================

    A parser is cheap and single-use. Each connection creates its own, so
    no buffer or header state is ever shared between clients.
    """

    def __init__(self, max_line_size: int = 8192):
        """
        Args:
            max_line_size: Longest line (in bytes, excluding the terminator)
                           accepted before LineTooLong is raised.
        """
        self.max_line_size = max_line_size

        self._buffer = bytearray()
        self._eof = False
        self._state = ParserState.REQUEST_LINE
        self._request_line: Optional[RequestLine] = None
        self._header_lines: List[str] = []
        self._request: Optional[Request] = None

    @property
    def state(self) -> ParserState:
        return self._state

    @property
    def is_complete(self) -> bool:
        return self._state is ParserState.DONE

    def feed(self, data: bytes) -> None:
        """Append received bytes to the parse buffer."""
        if self._eof:
            raise RuntimeError("Cannot feed data after feed_eof()")
        self._buffer += data

    def feed_eof(self) -> None:
        """Signal that the client will send no more bytes."""
        self._eof = True

    def parse(self) -> Optional[Request]:
        """
        Make as much progress as the buffered input allows.

        Returns:
            The Request once the header block is complete, or None if more
            input is needed.

        Raises:
            MalformedRequestLine: Bad request line.
            IncompleteRequest: Input ended before any request line.
            LineTooLong: A line exceeded max_line_size.
        """
        while self._state is not ParserState.DONE:
            line = self._next_line()
            if line is None:
                return None

            if self._state is ParserState.REQUEST_LINE:
                self._request_line = RequestLine.parse(line)
                self._state = ParserState.HEADERS
            elif not line:
                self._finish()
            else:
                self._header_lines.append(line)

        return self._request

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _finish(self) -> None:
        self._request = Request(
            request_line=self._request_line,
            headers=parse_header_block(self._header_lines),
        )
        self._state = ParserState.DONE

    def _next_line(self) -> Optional[str]:
        """
        Pop the next complete line off the buffer.

        Returns None when no full line is buffered yet and more input may
        still arrive. After feed_eof() this never returns None.
        """
        newline = self._buffer.find(b"\n")

        if newline == -1:
            # A trailing "\r" may be the first half of a CRLF split across reads
            pending = len(self._buffer) - self._buffer.endswith(b"\r")
            if pending > self.max_line_size:
                raise LineTooLong(
                    f"Line exceeds {self.max_line_size} bytes without a terminator"
                )
            if not self._eof:
                return None
            return self._line_at_eof()

        raw = bytes(self._buffer[:newline])
        del self._buffer[:newline + 1]

        if raw.endswith(b"\r"):
            raw = raw[:-1]
        if len(raw) > self.max_line_size:
            raise LineTooLong(f"Line exceeds {self.max_line_size} bytes")

        return raw.decode("utf-8", errors="replace")

    def _line_at_eof(self) -> str:
        if self._buffer:
            raw = bytes(self._buffer).rstrip(b"\r")
            self._buffer.clear()
            return raw.decode("utf-8", errors="replace")

        if self._state is ParserState.REQUEST_LINE:
            raise IncompleteRequest("Connection closed before request line was received")

        # Client stopped sending inside the header block; answer with what
        # we have.
        logger.debug("Input ended before blank line, treating header block as complete")
        return ""


def parse_request(data: bytes, max_line_size: int = 8192) -> Request:
    """
    Parse a complete request held in memory.

    Convenience wrapper for tests and tools: feeds ``data`` followed by
    end of input, so it always returns a Request or raises.
    """
    parser = RequestParser(max_line_size=max_line_size)
    parser.feed(data)
    parser.feed_eof()
    return parser.parse()
