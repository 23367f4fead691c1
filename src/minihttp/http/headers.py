"""
=============================================================================
REQUEST HEADERS
=============================================================================

The server only cares about a small, fixed allowlist of headers. Every
other header a client sends is read off the wire and thrown away.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HEADER LINE                                                        │
    │                                                                     │
    │      User-Agent: curl/8.4.0                                         │
    │      ────┬─────  ─────┬────                                         │
    │          │            │                                             │
    │        Name         Value     (split on the FIRST ": ")             │
    │                                                                     │
    │  Name in allowlist   -> (HeaderName.USER_AGENT, "curl/8.4.0")       │
    │  Name not allowed    -> skipped                                     │
    │  No ": " separator   -> skipped                                     │
    └─────────────────────────────────────────────────────────────────────┘

Names are matched case-sensitively against the canonical spelling. The
value is kept exactly as sent (no whitespace trimming).

=============================================================================
WHY AN ENUM AS THE KEY?
=============================================================================

HeaderName members hash and compare as members, not as raw strings, so a
lookup like headers[HeaderName.USER_AGENT] can never be defeated by a
spelling variant once the line has been parsed.

=============================================================================
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from ..errors import InvalidHeaderLine


logger = logging.getLogger(__name__)

HEADER_SEPARATOR = ": "


class HeaderName(Enum):
    """Recognized header names. The value is the canonical wire spelling."""

    USER_AGENT = "User-Agent"
    CONTENT_TYPE = "Content-Type"
    CONTENT_LENGTH = "Content-Length"

    @classmethod
    def lookup(cls, name: str) -> Optional["HeaderName"]:
        """Return the member spelled exactly ``name``, or None."""
        return _BY_NAME.get(name)


_BY_NAME: Dict[str, HeaderName] = {member.value: member for member in HeaderName}


# Read-only mapping from HeaderName to value. Both request and response
# headers use this shape.
Headers = Mapping[HeaderName, str]

EMPTY_HEADERS: Headers = MappingProxyType({})


def freeze_headers(headers: Dict[HeaderName, str]) -> Headers:
    """Wrap a header dict in a read-only view over a private copy."""
    return MappingProxyType(dict(headers))


def split_header_line(line: str) -> tuple[HeaderName, str]:
    """
    Turn one raw header line into a (HeaderName, value) pair.

    Args:
        line: Header line with the line terminator already removed.

    Returns:
        Tuple of (recognized header name, raw value).

    Raises:
        InvalidHeaderLine: If the line has no ": " separator or the name
                           is not in the allowlist.
    """
    name, separator, value = line.partition(HEADER_SEPARATOR)
    if not separator:
        raise InvalidHeaderLine("Header line has no ': ' separator", line=line)

    header = HeaderName.lookup(name)
    if header is None:
        raise InvalidHeaderLine(f"Unrecognized header: {name}", line=line)

    return header, value


def parse_header_line(line: str) -> Optional[tuple[HeaderName, str]]:
    """
    Parse a header line, converting any line-level failure into None.

    None means "skip this line". A bad header never aborts the request.
    """
    try:
        return split_header_line(line)
    except InvalidHeaderLine as e:
        logger.debug(f"Skipping header line: {e}")
        return None


def parse_header_block(lines: Iterable[str]) -> Headers:
    """
    Build a frozen header mapping from already-split header lines.

    Stops at the first empty line. Later duplicates of a recognized
    header replace earlier ones.
    """
    headers: Dict[HeaderName, str] = {}
    for line in lines:
        if not line:
            break
        parsed = parse_header_line(line)
        if parsed is None:
            continue
        name, value = parsed
        headers[name] = value
    return freeze_headers(headers)
