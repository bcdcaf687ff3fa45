"""
=============================================================================
FILE STORAGE HANDLERS
=============================================================================

    GET  /files/<name>   → 200 application/octet-stream, body = file bytes
                           404 when the file does not exist
    POST /files/<name>   → 201, file created or truncated, body written

Files live flat inside one storage directory chosen at startup. A name is
a single path segment, so it can never contain "/". A name that still
resolves outside the directory ("..") is treated as not found.

There is no locking. Two workers touching the same name at the same time
may see a partially written file; different names never interfere.

=============================================================================
"""

import logging
import os
from pathlib import Path

from ..errors import NotFoundError, StorageError
from ..http.request import ENCODING, HTTPRequest
from ..http.response import HTTPResponse, created, not_found, octet_stream, unprocessable


logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 1024 * 1024


class FileStore:
    """
    Byte-level read/write access to files in one directory, keyed by name.

    Attributes:
        root: Resolved storage directory.
        max_file_size: Largest file read() will return.
    """

    def __init__(self, directory: str, max_file_size: int = DEFAULT_MAX_FILE_SIZE):
        """
        Args:
            directory: Storage directory. Must exist.
            max_file_size: Largest file read() will return.

        Raises:
            ValueError: If directory doesn't exist or isn't a directory.
        """
        self.root = Path(directory).resolve()
        self.max_file_size = max_file_size

        if not self.root.is_dir():
            raise ValueError(f"Storage directory does not exist: {directory}")

    def _resolve(self, name: str) -> Path:
        """
        Map a file name to a path inside root.

        The name arrives as decoded request bytes; those same bytes are
        what names the file on disk:
            "caf\\xc3\\xa9.txt" (wire bytes) → "café.txt" on a UTF-8 filesystem

        Raises:
            NotFoundError: The name points outside root or is unusable.
        """
        if not name or "\0" in name:
            raise NotFoundError(f"Invalid file name: {name!r}")

        try:
            raw = name.encode(ENCODING)
        except UnicodeEncodeError:
            raise NotFoundError(f"Invalid file name: {name!r}") from None

        path = (self.root / os.fsdecode(raw)).resolve()
        try:
            path.relative_to(self.root)
        except ValueError:
            raise NotFoundError(f"File name escapes storage directory: {name!r}") from None
        return path

    def read(self, name: str) -> bytes:
        """
        Read a whole file.

        Raises:
            NotFoundError: The file does not exist.
            StorageError: Any other I/O failure, or the file exceeds
                          max_file_size.
        """
        path = self._resolve(name)

        try:
            with open(path, "rb") as f:
                data = f.read(self.max_file_size + 1)
        except FileNotFoundError:
            raise NotFoundError(f"File not found: {name}") from None
        except OSError as e:
            raise StorageError(f"Cannot read {name}: {e}") from e

        if len(data) > self.max_file_size:
            raise StorageError(f"File too large: {name} (max {self.max_file_size} bytes)")

        logger.debug(f"Read {len(data)} bytes from {path}")
        return data

    def write(self, name: str, data: bytes) -> None:
        """
        Create or truncate a file and write data to it.

        Raises:
            NotFoundError: The name points outside the storage directory.
            StorageError: The file could not be written.
        """
        path = self._resolve(name)

        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Cannot write {name}: {e}") from e

        logger.debug(f"Wrote {len(data)} bytes to {path}")


class FileHandler:
    """Route handlers for /files/<name>, backed by a FileStore."""

    def __init__(self, store: FileStore):
        self.store = store

    def read(self, request: HTTPRequest) -> HTTPResponse:
        """GET /files/<name>"""
        segments = request.segments
        if len(segments) != 2:
            return unprocessable()

        try:
            data = self.store.read(segments[1])
        except NotFoundError as e:
            logger.debug(str(e))
            return not_found()

        return octet_stream(data)

    def write(self, request: HTTPRequest) -> HTTPResponse:
        """POST /files/<name>"""
        segments = request.segments
        if len(segments) != 2:
            return unprocessable()

        try:
            # No body (or Content-Length: 0) leaves an empty file
            self.store.write(segments[1], request.body or b"")
        except NotFoundError as e:
            logger.debug(str(e))
            return not_found()

        return created()
