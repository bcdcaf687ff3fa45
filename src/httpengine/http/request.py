"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

The parser is a one-pass state machine over a ByteReader. It never looks
back and never needs the whole request in memory before it starts:

    ┌──────────────┐   ┌──────────────┐   ┌──────────────┐   ┌──────────┐
    │ REQUEST LINE │──►│   HEADERS    │──►│  EMPTY LINE  │──►│   BODY   │
    │ "GET" SP     │   │ "Name: v"    │   │   "\r\n"     │   │ exactly  │
    │ "/echo/x" SP │   │  CR LF       │   │              │   │ Content- │
    │ "HTTP/1.1"LF │   │  (repeat)    │   │              │   │ Length   │
    └──────────────┘   └──────────────┘   └──────────────┘   └──────────┘

Every failure along the way is a FramingError subclass. There is no
recovery inside a connection: the caller answers 500 and closes.

=============================================================================
WHAT IS KEPT
=============================================================================

    method      Method.GET or Method.POST, nothing else
    target      raw request-URI, no percent-decoding, no query splitting
    segments    target split on "/", empty pieces dropped
                "/echo//abc/" → ("echo", "abc")
    headers     every header line verbatim, in wire order, plus two
                derived values: content_length and accept_encoding
    body        exactly content_length bytes, or None

Bytes are decoded as ISO-8859-1 so that every byte maps to exactly one
character and encoding the text back gives the original bytes.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterator, List, Optional, Tuple

from ..core.stream import ByteReader
from ..errors import BodyTooLarge, MissingLineFeed, ParseError, UnsupportedMethod


logger = logging.getLogger(__name__)

ENCODING = "iso-8859-1"

DEFAULT_MAX_LINE_LENGTH = 1024
DEFAULT_MAX_BODY_SIZE = 1024 * 1024


class Method(Enum):
    """Request methods the engine understands."""

    GET = "GET"
    POST = "POST"


def _header_value(line: str) -> str:
    """Return what follows the first ": " of a header line."""
    return line.partition(": ")[2]


@dataclass
class HeaderSet:
    """
    Ordered header lines plus the values derived from them.

    Lines are stored exactly as they appeared ("Name: value"), so lookups
    are prefix matches and are case-sensitive.

    Attributes:
        raw: Header lines in insertion (wire) order.
        content_length: Body length, or None when absent or zero.
        accept_encoding: Trimmed Accept-Encoding tokens, or None when the
                         header never appeared.
    """

    CONTENT_LENGTH: ClassVar[str] = "Content-Length:"
    ACCEPT_ENCODING: ClassVar[str] = "Accept-Encoding:"

    raw: List[str] = field(default_factory=list)
    content_length: Optional[int] = None
    accept_encoding: Optional[List[str]] = None

    def add_line(self, line: str) -> None:
        """
        Append one header line and update the derived fields.

        Raises:
            ParseError: Content-Length is not a non-negative base-10 integer.
        """
        if line.startswith(self.CONTENT_LENGTH):
            value = _header_value(line)
            if not (value.isascii() and value.isdigit()):
                raise ParseError(f"Invalid Content-Length: {value!r}")
            # A zero length is recorded the same as no header at all
            self.content_length = int(value) or None
        elif line.startswith(self.ACCEPT_ENCODING):
            self.accept_encoding = [
                token.strip(" ") for token in _header_value(line).split(",")
            ]

        self.raw.append(line)

    def add(self, name: str, value: str) -> "HeaderSet":
        """Append a "Name: value" line. Returns self for chaining."""
        self.add_line(f"{name}: {value}")
        return self

    def find(self, name: str) -> Optional[str]:
        """
        Get the value of the first line starting with "<name>: ".

        Example:
            headers.find("User-Agent")  # "curl/8.0" or None
        """
        prefix = f"{name}: "
        for line in self.raw:
            if line.startswith(prefix):
                return line[len(prefix):]
        return None

    def __len__(self) -> int:
        return len(self.raw)

    def __iter__(self) -> Iterator[str]:
        return iter(self.raw)


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Created fresh for each connection by RequestParser and dropped once the
    response has been written.
    """

    method: Method
    target: str
    version: str = "HTTP/1.1"
    headers: HeaderSet = field(default_factory=HeaderSet)
    body: Optional[bytes] = None

    # Metadata
    client_address: Tuple[str, int] = ("", 0)

    @property
    def segments(self) -> Tuple[str, ...]:
        """
        Non-empty "/"-separated components of the target, in order.

        Always computed from target, never stored separately:
            "/files/report.txt" → ("files", "report.txt")
        """
        return tuple(segment for segment in self.target.split("/") if segment)

    @property
    def user_agent(self) -> Optional[str]:
        """Value of the first User-Agent header line, if any."""
        return self.headers.find("User-Agent")


class RequestParser:
    """
    Reads one HTTPRequest off a ByteReader.

    ==========================================================================
    PARSER STEPS
    ==========================================================================

        1. Request line
           read_until(" ")   → method      (GET / POST, else UnsupportedMethod)
           read_until(" ")   → target
           read_until("\n")  → version     (trailing CR removed)

        2. Header lines, until an empty one
           read_until("\r")  → line
           read_byte()       → must be "\n", else MissingLineFeed

        3. Body
           read_exact(content_length) if Content-Length was given

    ==========================================================================
    """

    def __init__(
        self,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
    ):
        """
        Args:
            max_line_length: Longest token or header line accepted.
            max_body_size: Largest Content-Length accepted.
        """
        self.max_line_length = max_line_length
        self.max_body_size = max_body_size

    def parse(
        self,
        reader: ByteReader,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse one request from the reader.

        Raises:
            FramingError: Any subclass, when the stream is not a valid request.
        """
        method, target, version = self._read_request_line(reader)

        request = HTTPRequest(
            method=method,
            target=target,
            version=version,
            client_address=client_address,
        )

        self._read_headers(reader, request.headers)
        request.body = self._read_body(reader, request.headers)

        logger.debug(
            f"Parsed {method.value} {target} "
            f"({len(request.headers)} headers, "
            f"{len(request.body) if request.body is not None else 0} body bytes)"
        )
        return request

    def _read_request_line(self, reader: ByteReader) -> Tuple[Method, str, str]:
        # ─────────────────────────────────────────────────────────────────
        # METHOD SP TARGET SP VERSION LF
        # ─────────────────────────────────────────────────────────────────
        raw_method = reader.read_until(b" ", self.max_line_length).decode(ENCODING)
        try:
            method = Method(raw_method)
        except ValueError:
            raise UnsupportedMethod(raw_method) from None

        target = reader.read_until(b" ", self.max_line_length).decode(ENCODING)

        # The version token runs to LF, so it arrives with the CR still on it
        version = reader.read_until(b"\n", self.max_line_length)
        version = version.removesuffix(b"\r").decode(ENCODING)

        return method, target, version

    def _read_header_line(self, reader: ByteReader) -> str:
        line = reader.read_until(b"\r", self.max_line_length)
        if reader.read_byte() != ord("\n"):
            raise MissingLineFeed("Carriage return not followed by line feed")
        return line.decode(ENCODING)

    def _read_headers(self, reader: ByteReader, headers: HeaderSet) -> None:
        while True:
            line = self._read_header_line(reader)
            if not line:
                return  # Empty line ends the header section
            headers.add_line(line)

    def _read_body(self, reader: ByteReader, headers: HeaderSet) -> Optional[bytes]:
        if headers.content_length is None:
            return None

        if headers.content_length > self.max_body_size:
            raise BodyTooLarge(
                f"Content-Length {headers.content_length} exceeds "
                f"{self.max_body_size} bytes"
            )

        return reader.read_exact(headers.content_length)


def parse_request(data: bytes, **kwargs) -> HTTPRequest:
    """
    Parse a complete request held in memory.

    Convenience wrapper used by tests and tooling:
        request = parse_request(b"GET / HTTP/1.1\\r\\n\\r\\n")
    """
    return RequestParser(**kwargs).parse(ByteReader.from_bytes(data))
