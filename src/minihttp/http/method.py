"""
HTTP request methods.

Only four verbs are accepted. Anything else on the request line is a
parse failure, not a 405: the connection is dropped before routing.
"""

from enum import Enum

from ..errors import NoMatch


class Method(Enum):
    """
    The closed set of HTTP methods the server accepts.

    The value of each member is its literal spelling on the wire.

        >>> Method.parse("GET / HTTP/1.1")
        (<Method.GET: 'GET'>, ' / HTTP/1.1')
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, text: str) -> tuple["Method", str]:
        """
        Match a method literal at the start of ``text``.

        Literals are tried in declaration order. No literal is a prefix of
        another, so the order never changes the outcome.

        Args:
            text: Input starting at the method position.

        Returns:
            Tuple of (method, remaining text after the literal).

        Raises:
            NoMatch: If no literal matches.
        """
        for method in cls:
            if text.startswith(method.value):
                return method, text[len(method.value):]

        expected = ", ".join(method.value for method in cls)
        raise NoMatch(f"Expected one of {expected}", line=text)
