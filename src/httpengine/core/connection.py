"""
=============================================================================
CONNECTION HANDLING
=============================================================================

A Connection wraps one accepted client socket for its whole (short) life.
Each connection carries exactly one request and one response, then closes:

    ACCEPTED ──► PARSED ──► ROUTED ──► HANDLED ──► SERIALIZED ──► WRITTEN
        │           │          │          │             │            │
        └───────────┴──────────┴────┬─────┴─────────────┘            │
                                    ▼                                │
                                 FAILED                              │
                     (one best-effort 500, errors ignored)           │
                                    │                                │
                                    └──────────────► CLOSED ◄────────┘

CLOSED is reached on every path: the server uses the connection as a
context manager and __exit__ always closes the socket.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from .stream import ByteReader


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Recorded on the connection as the exchange advances.
    """
    ACCEPTED = "accepted"      # Just accepted, nothing read yet
    PARSED = "parsed"          # Request read off the wire
    ROUTED = "routed"          # Handler chosen
    HANDLED = "handled"        # Handler returned a response
    SERIALIZED = "serialized"  # Response turned into bytes
    WRITTEN = "written"        # Response bytes sent
    FAILED = "failed"          # Something went wrong before WRITTEN
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        buffer_size: Bytes requested per recv() call.
        timeout: Socket timeout in seconds, None for none.
    """

    # Required parameters
    socket: socket.socket
    address: tuple[str, int]

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192
    timeout: Optional[float] = None

    _reader: Optional[ByteReader] = field(default=None, repr=False)

    def __post_init__(self):
        """Configure the socket: blocking, with the configured timeout."""
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def reader(self) -> ByteReader:
        """Buffered reader over this socket, created on first use."""
        if self._reader is None:
            self._reader = ByteReader(self.socket.recv, chunk_size=self.buffer_size)
        return self._reader

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> None:
        """
        Send a complete response.

        Uses sendall() so the whole response goes out or an error is raised.

        Raises:
            OSError: The client disconnected or the write timed out.
        """
        self.socket.sendall(data)
        self.state = ConnectionState.WRITTEN

    def send_best_effort(self, data: bytes) -> bool:
        """
        Try once to send data, ignoring any failure.

        Returns:
            True if the data was sent.
        """
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Best-effort send failed: {e}")
            return False
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) sends FIN so the client sees end-of-response
        before the descriptor is released.
        """
        if self.state == ConnectionState.CLOSED:
            return  # Already closed

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            # Discard unread request bytes already in the kernel buffer.
            # Closing with unread data sends RST, which can destroy the
            # response before the client reads it.
            self.socket.setblocking(False)
            while self.socket.recv(self.buffer_size):
                pass
        except OSError:
            pass  # Nothing left (BlockingIOError) or peer gone

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
