"""
=============================================================================
ACCEPTOR (TCP SOCKET SERVER)
=============================================================================

The acceptor owns the listening socket and nothing else. It runs in the
thread that called start() and passes every accepted client on:

    start(on_connection)
      ├──► _listen()          bind + listen on config.host:config.port
      ├──► _trap_signals()    SIGINT/SIGTERM → shutdown() (main thread only)
      └──► _serve(on_connection)
               until shutdown():
                   accept()                 wakes every second
                   on_connection(Connection(...))
                        │
                        └── may block: that is how a full worker pool
                            stops the acceptor from taking more clients

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Dict, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ConnectionCallback = Callable[[Connection], None]

# How often accept() gives up so the loop can see shutdown()
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Listening socket plus the accept loop.

    Usage:
        acceptor = SocketServer(config)
        acceptor.start(pool_submit)     # returns after shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._listener: Optional[socket.socket] = None
        self._bound: Optional[Tuple[str, int]] = None
        self._accepting = threading.Event()
        self._listening = threading.Event()
        self._previous_signals: Dict[int, object] = {}

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening with port=0."""
        return self._bound or (self.config.host, self.config.port)

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is listening.

        Returns:
            True if the server is ready, False on timeout.
        """
        return self._listening.wait(timeout)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, on_connection: ConnectionCallback):
        """
        Listen and hand out connections until shutdown() is called.

        Raises:
            OSError: The address could not be bound.
        """
        self._listener = self._listen()
        self._accepting.set()
        self._trap_signals()

        logger.info(f"Server listening on {self.address[0]}:{self.address[1]}")
        self._listening.set()

        try:
            self._serve(on_connection)
        finally:
            self._close_listener()

    def shutdown(self):
        """Stop accepting. Safe from any thread, and more than once."""
        if self._accepting.is_set():
            logger.info("Shutting down socket server...")
        self._accepting.clear()

    def _listen(self) -> socket.socket:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        listener.settimeout(ACCEPT_POLL_INTERVAL)

        host, port = self.config.host, self.config.port
        try:
            listener.bind((host, port))
            listener.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {host}:{port}: {e}")
            listener.close()
            raise

        self._bound = listener.getsockname()[:2]
        return listener

    def _serve(self, on_connection: ConnectionCallback):
        while self._accepting.is_set():
            try:
                client, peer = self._listener.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._accepting.is_set():
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {peer[0]}:{peer[1]}")

            on_connection(Connection(
                socket=client,
                address=peer,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
            ))

    def _close_listener(self):
        self._accepting.clear()
        self._listening.clear()
        self._release_signals()

        if self._listener is not None:
            try:
                self._listener.close()
            except OSError:
                pass
            self._listener = None

        logger.info("Socket server stopped")

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def _trap_signals(self):
        """
        Route SIGINT/SIGTERM to shutdown().

        Python only allows this from the main thread; a server running in a
        background thread (tests, embedding) leaves signals alone.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def on_signal(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        for signum in (signal.SIGTERM, signal.SIGINT):
            self._previous_signals[signum] = signal.signal(signum, on_signal)

    def _release_signals(self):
        while self._previous_signals:
            signum, handler = self._previous_signals.popitem()
            signal.signal(signum, handler)
