"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

Handlers return an HTTPResponse. Nothing is turned into bytes until the
connection handler calls serialize(), which is also where the body gets
compressed and where Content-Length is added:

    Handler returns          serialize()                 Socket sends
    HTTPResponse    ─────►   negotiate encoding  ─────►  raw bytes
        │                    add Content-Length              │
        │                    lay out the wire form           │
    HTTPResponse(                                       b"HTTP/1.1 200 OK\r\n
      status=200,                                         Content-Type: text/plain\r\n
      headers=[Content-Type...],                          Content-Length: 3\r\n
      body=b"abc"                                         \r\n
    )                                                     abc"

=============================================================================
WIRE LAYOUT
=============================================================================

    <version> SP <code> SP <reason> CRLF
    <header> CRLF <header> ... CRLF CRLF     ← when there are headers
    CRLF                                     ← when there are none
    <body>                                   ← when there is one

A response with no headers and no body is therefore exactly:

    b"HTTP/1.1 404 Not Found\r\n\r\n"

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from .encoding import negotiate
from ..errors import EncodingMismatchError
from .request import ENCODING, HeaderSet
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)

# Sent when anything fails before a real response is written
SERVER_ERROR_RESPONSE = b"HTTP/1.1 500 Internal Server Error\r\n\r\n"


@dataclass
class HTTPResponse:
    """
    An HTTP response waiting to be serialized.

    Attributes:
        status: Status code.
        headers: Header lines, built by the handler. Never holds
                 Content-Length; serialize() computes it.
        body: Body bytes, or None for a response without a body.
        version: Protocol version on the status line.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: HeaderSet = field(default_factory=HeaderSet)
    body: Optional[bytes] = None
    version: str = "HTTP/1.1"

    @property
    def status_code(self) -> int:
        return int(self.status)

    @property
    def reason_phrase(self) -> str:
        return self.status.phrase

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {self.status_code} {self.reason_phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Append a response header.

        Returns self for method chaining.

        Raises:
            ValueError: For Content-Length, which only serialize() may write.
        """
        if name.lower() == "content-length":
            raise ValueError("Content-Length is computed at serialization time")
        self.headers.add(name, value)
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body. Strings are encoded byte-for-byte (ISO-8859-1)."""
        self.body = body.encode(ENCODING) if isinstance(body, str) else body
        return self

    def to_bytes(self, request_headers: Optional[HeaderSet] = None) -> bytes:
        """Shortcut for serialize(self, request_headers)."""
        return serialize(self, request_headers)


def serialize(response: HTTPResponse, request_headers: Optional[HeaderSet] = None) -> bytes:
    """
    Turn a response into wire bytes.

    =====================================================================
    STEPS
    =====================================================================

    1. If there is a body and the request sent Accept-Encoding, try to
       agree on an encoding. On success, compress the body and add
       Content-Encoding. On EncodingMismatchError, keep the body as is.
    2. If there is a body, add Content-Length for the final body.
    3. Lay out status line, header section and body.

    The response object itself is not modified.
    =====================================================================

    Args:
        response: The response to send.
        request_headers: Headers of the request being answered, used for
                         content negotiation. None skips negotiation.

    Returns:
        Complete HTTP response as bytes ready for socket.sendall()
    """
    body = response.body
    lines = list(response.headers.raw)

    # ─────────────────────────────────────────────────────────────────
    # CONTENT NEGOTIATION
    # ─────────────────────────────────────────────────────────────────
    if (
        body is not None
        and request_headers is not None
        and request_headers.accept_encoding is not None
    ):
        try:
            token, codec = negotiate(request_headers.accept_encoding)
        except EncodingMismatchError as e:
            # Unsupported encodings are not the client's problem: send plain
            logger.debug(f"Sending uncompressed body: {e}")
        else:
            body = codec(body)
            lines.append(f"Content-Encoding: {token}")

    if body is not None:
        lines.append(f"Content-Length: {len(body)}")

    # ─────────────────────────────────────────────────────────────────
    # LAYOUT
    # ─────────────────────────────────────────────────────────────────
    head = f"{response.status_line}\r\n" + "\r\n".join(lines)
    head += "\r\n\r\n" if lines else "\r\n"

    data = head.encode(ENCODING)
    if body is not None:
        data += body
    return data


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def empty(status: HTTPStatus) -> HTTPResponse:
    """Response with a status line only: no headers, no body."""
    return HTTPResponse(status=status)


def text(body: Union[str, bytes], status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """text/plain response."""
    return (HTTPResponse(status=status)
        .set_header("Content-Type", "text/plain")
        .set_body(body))


def octet_stream(data: bytes, status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """application/octet-stream response carrying raw bytes."""
    return (HTTPResponse(status=status)
        .set_header("Content-Type", "application/octet-stream")
        .set_body(data))


def ok() -> HTTPResponse:
    """200 OK, empty."""
    return empty(HTTPStatus.OK)


def created() -> HTTPResponse:
    """201 Created, empty."""
    return empty(HTTPStatus.CREATED)


def bad_request() -> HTTPResponse:
    """400 Bad Request, empty."""
    return empty(HTTPStatus.BAD_REQUEST)


def not_found() -> HTTPResponse:
    """404 Not Found, empty."""
    return empty(HTTPStatus.NOT_FOUND)


def unprocessable() -> HTTPResponse:
    """422 Unprocessable Content, empty."""
    return empty(HTTPStatus.UNPROCESSABLE_CONTENT)
