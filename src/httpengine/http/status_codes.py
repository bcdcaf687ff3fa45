"""
=============================================================================
HTTP STATUS CODES
=============================================================================

Only the statuses this engine can produce are listed. Each has a reason
phrase that appears on the status line:

    HTTP/1.1 422 Unprocessable Content
             ─── ─────────────────────
              │           │
              │           └── Reason phrase
              └────────────── Status code

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.OK.phrase
        'OK'
    """

    # 2xx SUCCESS
    OK = 200                          # Echo, user-agent, file read, root
    CREATED = 201                     # File written

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400                 # Missing User-Agent header
    NOT_FOUND = 404                   # Unknown route, wrong method, missing file
    UNPROCESSABLE_CONTENT = 422       # Wrong number of path segments

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500       # Framing or storage failure

    @property
    def phrase(self) -> str:
        """Get the reason phrase for this status code."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.UNPROCESSABLE_CONTENT: "Unprocessable Content",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
