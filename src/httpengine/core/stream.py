"""
=============================================================================
BYTE READER
=============================================================================

TCP delivers a stream of bytes, not messages. recv() may hand us half a
header line, or a header line plus the first bytes of the body. The
reader keeps whatever was received but not yet consumed in a buffer and
offers two kinds of reads on top of it:

    read_until(b" ")   ─►  bytes up to a delimiter (delimiter consumed)
    read_exact(n)      ─►  exactly n bytes, no delimiter

    ┌─────────────────────────────────────────────────────────────────────┐
    │  recv() chunks:   "GET /ec" │ "ho/abc HTTP/1.1\r\nHo" │ "st: x\r\n"  │
    │                                                                      │
    │  read_until(b" ")  → "GET"                                           │
    │  read_until(b" ")  → "/echo/abc"      (spans two chunks)             │
    │  read_until(b"\n") → "HTTP/1.1\r"                                    │
    │  read_until(b"\r") → "Host: x"                                       │
    │  read_byte()       → 0x0A                                            │
    └─────────────────────────────────────────────────────────────────────┘

The source is any callable with socket.recv() semantics: it takes a
maximum size and returns b"" once the peer has closed. Tests drive the
reader from an in-memory buffer through from_bytes().

=============================================================================
"""

import io
from typing import Callable

from ..errors import EndOfStream, LineTooLong, ShortRead


Recv = Callable[[int], bytes]


class ByteReader:
    """
    Buffered delimiter and exact-length reads over one connection.

    Attributes:
        recv: Callable returning up to N bytes, or b"" at end-of-stream.
        chunk_size: How much to ask recv() for at once.
    """

    def __init__(self, recv: Recv, chunk_size: int = 8192):
        self.recv = recv
        self.chunk_size = chunk_size
        self._buffer = bytearray()
        self._eof = False

    @classmethod
    def from_bytes(cls, data: bytes, chunk_size: int = 8192) -> "ByteReader":
        """Create a reader over an in-memory byte string."""
        return cls(io.BytesIO(data).read, chunk_size=chunk_size)

    @property
    def buffered(self) -> int:
        """Number of received bytes not yet consumed."""
        return len(self._buffer)

    def _fill(self) -> bool:
        """
        Pull one more chunk into the buffer.

        Returns:
            False once the peer has closed the stream.
        """
        if self._eof:
            return False

        try:
            chunk = self.recv(self.chunk_size)
        except (ConnectionResetError, BrokenPipeError):
            # Abrupt disconnect reads the same as a clean close
            chunk = b""

        if not chunk:
            self._eof = True
            return False

        self._buffer += chunk
        return True

    def read_until(self, delimiter: bytes, max_length: int) -> bytes:
        """
        Read up to a one-byte delimiter.

        The delimiter is consumed but not returned.

        Args:
            delimiter: Single byte to stop at.
            max_length: Longest token allowed before the delimiter.

        Raises:
            EndOfStream: Stream ended before the delimiter.
            LineTooLong: max_length bytes seen without the delimiter.
        """
        searched = 0
        while True:
            index = self._buffer.find(delimiter, searched)
            if index != -1:
                if index > max_length:
                    raise LineTooLong(f"Token exceeds {max_length} bytes")
                token = bytes(self._buffer[:index])
                del self._buffer[:index + 1]
                return token

            if len(self._buffer) > max_length:
                raise LineTooLong(f"Token exceeds {max_length} bytes")

            searched = len(self._buffer)
            if not self._fill():
                raise EndOfStream(
                    f"Stream ended before {delimiter!r} "
                    f"({len(self._buffer)} bytes pending)"
                )

    def read_byte(self) -> int:
        """Read a single byte."""
        if not self._buffer and not self._fill():
            raise EndOfStream("Stream ended, expected one more byte")

        value = self._buffer[0]
        del self._buffer[:1]
        return value

    def read_exact(self, length: int) -> bytes:
        """
        Read exactly `length` bytes.

        Raises:
            ShortRead: Stream ended before `length` bytes arrived.
        """
        while len(self._buffer) < length:
            if not self._fill():
                raise ShortRead(length, len(self._buffer))

        data = bytes(self._buffer[:length])
        del self._buffer[:length]
        return data
