"""
Error taxonomy for the engine.

    HTTPEngineError
    ├── FramingError            malformed bytes on the wire  → 500, close
    │   ├── EndOfStream         client closed mid-message
    │   │   └── ShortRead       body shorter than Content-Length
    │   ├── LineTooLong
    │   ├── MissingLineFeed
    │   ├── UnsupportedMethod
    │   ├── ParseError
    │   └── BodyTooLarge
    ├── NotFoundError           missing file                 → 404
    ├── StorageError            other I/O failure            → 500
    └── EncodingMismatchError   nothing we can encode with   → sent uncompressed

A wrong segment count is not here: handlers answer 422 directly.
"""


class HTTPEngineError(Exception):
    """Base exception for everything raised by the engine."""


class FramingError(HTTPEngineError):
    """The byte stream does not form a valid request."""


class EndOfStream(FramingError):
    """The stream ended before the current element was complete."""


class ShortRead(EndOfStream):
    """An exact-length read received fewer bytes than required."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"Expected {expected} bytes, stream ended after {received}")
        self.expected = expected
        self.received = received


class LineTooLong(FramingError):
    """A delimiter-bounded read exceeded its length cap."""


class MissingLineFeed(FramingError):
    """A carriage return was not followed by a line feed."""


class UnsupportedMethod(FramingError):
    """The method token is neither GET nor POST."""

    def __init__(self, method: str):
        super().__init__(f"Unsupported method: {method!r}")
        self.method = method


class ParseError(FramingError):
    """A header value could not be parsed."""


class BodyTooLarge(FramingError):
    """The declared Content-Length exceeds the configured cap."""


class NotFoundError(HTTPEngineError):
    """A requested file does not exist in the storage directory."""


class StorageError(HTTPEngineError):
    """The storage directory could not be read or written."""


class EncodingMismatchError(HTTPEngineError):
    """None of the client's accepted encodings is supported."""
