"""
Unit tests for the buffered byte reader.
"""

import pytest

from httpengine.core.stream import ByteReader
from httpengine.errors import EndOfStream, LineTooLong, ShortRead


def chunked(*chunks: bytes):
    """recv() stand-in that hands out one chunk per call."""
    pending = list(chunks)

    def recv(size: int) -> bytes:
        return pending.pop(0) if pending else b""

    return recv


class TestReadUntil:
    """Tests for delimiter-bounded reads."""

    def test_consumes_delimiter(self):
        reader = ByteReader.from_bytes(b"GET /echo/abc HTTP/1.1\r\n")

        assert reader.read_until(b" ", 1024) == b"GET"
        assert reader.read_until(b" ", 1024) == b"/echo/abc"
        assert reader.read_until(b"\n", 1024) == b"HTTP/1.1\r"

    def test_token_spans_chunks(self):
        """A token split across recv() calls is reassembled."""
        reader = ByteReader(chunked(b"GET /ec", b"ho/abc HT", b"TP/1.1\r\n"))

        assert reader.read_until(b" ", 1024) == b"GET"
        assert reader.read_until(b" ", 1024) == b"/echo/abc"

    def test_empty_token(self):
        reader = ByteReader.from_bytes(b"\r\n")

        assert reader.read_until(b"\r", 1024) == b""

    def test_end_of_stream(self):
        reader = ByteReader.from_bytes(b"no delimiter here")

        with pytest.raises(EndOfStream):
            reader.read_until(b"\n", 1024)

    def test_too_long(self):
        reader = ByteReader.from_bytes(b"a" * 100 + b"\n")

        with pytest.raises(LineTooLong):
            reader.read_until(b"\n", 10)

    def test_too_long_without_delimiter(self):
        """The cap applies before the whole stream is buffered."""
        reader = ByteReader(chunked(b"a" * 16, b"a" * 16, b"a" * 16), chunk_size=16)

        with pytest.raises(LineTooLong):
            reader.read_until(b"\n", 20)

    def test_exact_cap_allowed(self):
        reader = ByteReader.from_bytes(b"a" * 10 + b"\n")

        assert reader.read_until(b"\n", 10) == b"a" * 10


class TestReadExact:
    """Tests for exact-length reads."""

    def test_reads_buffered_then_stream(self):
        reader = ByteReader(chunked(b"Content\r\nhel", b"lo world"))

        reader.read_until(b"\n", 1024)
        assert reader.buffered == 3
        assert reader.read_exact(11) == b"hello world"

    def test_short_read(self):
        reader = ByteReader.from_bytes(b"abc")

        with pytest.raises(ShortRead) as exc_info:
            reader.read_exact(5)

        assert exc_info.value.expected == 5
        assert exc_info.value.received == 3

    def test_zero_length(self):
        reader = ByteReader.from_bytes(b"")

        assert reader.read_exact(0) == b""


class TestReadByte:
    """Tests for single-byte reads."""

    def test_returns_int(self):
        reader = ByteReader.from_bytes(b"\n")

        assert reader.read_byte() == 0x0A

    def test_end_of_stream(self):
        reader = ByteReader.from_bytes(b"")

        with pytest.raises(EndOfStream):
            reader.read_byte()

    def test_reset_reads_as_end_of_stream(self):
        """A reset connection is reported as end of stream."""
        def recv(size: int) -> bytes:
            raise ConnectionResetError()

        with pytest.raises(EndOfStream):
            ByteReader(recv).read_byte()
