"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunable values live in one dataclass that is created once at startup
and then handed to every component that needs it. Nothing reads a global:

    ┌──────────────┐
    │ ServerConfig │──► SocketServer   (host, port, backlog, timeout)
    │  (frozen at  │──► ThreadPool     (workers, queue_size)
    │   startup)   │──► RequestParser  (max_line_length, max_body_size)
    └──────────────┘──► FileStore      (directory, max_file_size)

The storage directory is the one value with no default. Starting without
it is a fatal error, caught by validate() before any socket is opened.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP engine.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    STORAGE
    - directory, max_file_size

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    FRAMING LIMITS
    - max_line_length, max_body_size

    WORKER POOL
    - workers, queue_size

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # STORAGE
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Directory that /files/<name> reads from and writes to.
    Required. Fixed at startup and shared read-only by every worker.
    """

    max_file_size: int = 1024 * 1024
    """
    Largest file GET /files/<name> will serve (1 MiB).
    Bigger files are a storage error, never a truncated body.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Loopback only."""

    port: int = 4221
    """
    The port number to listen on.
    0 lets the OS pick a free port (used by the test suite).
    """

    backlog: int = 128
    """Maximum number of connections queued by the kernel before accept()."""

    buffer_size: int = 8192
    """Size of each recv() call in bytes."""

    timeout: Optional[float] = None
    """
    Per-socket timeout in seconds.
    None = no deadline: a client that stops sending mid-request holds its
    worker until it disconnects. Set a value to bound that.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FRAMING LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_line_length: int = 1024
    """Cap for one method/target/version token or one header line."""

    max_body_size: int = 1024 * 1024
    """Largest Content-Length accepted for a request body."""

    # ─────────────────────────────────────────────────────────────────────
    # WORKER POOL
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 10
    """Number of worker threads (N). Each serves one connection at a time."""

    queue_size: Optional[int] = None
    """
    Capacity of the handoff queue between acceptor and workers.
    None = same as workers. When full, the acceptor blocks.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (Apache style) or 'json'."""

    server_name: str = "httpengine/1.0"
    """Shown in the startup log line only."""

    @property
    def handoff_capacity(self) -> int:
        """Effective size of the acceptor → worker queue."""
        return self.queue_size if self.queue_size is not None else self.workers

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_DIRECTORY  Storage directory (required, no default)
        HTTP_HOST       Server host (default: 127.0.0.1)
        HTTP_PORT       Server port (default: 4221)
        HTTP_WORKERS    Worker threads (default: 10)
        HTTP_TIMEOUT    Socket timeout in seconds (default: none)
        HTTP_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        return cls(
            directory=os.getenv("HTTP_DIRECTORY"),
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            workers=int(os.getenv("HTTP_WORKERS", "10")),
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value stops the process before the
        listening socket exists.
        """
        if not self.directory:
            raise ValueError("A storage directory is required (--directory).")

        if not os.path.isdir(self.directory):
            raise ValueError(f"Storage directory does not exist: {self.directory}")

        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.handoff_capacity < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_line_length < 1 or self.max_body_size < 1 or self.max_file_size < 1:
            raise ValueError("size limits must be > 0")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Unknown log format: {self.log_format}")
