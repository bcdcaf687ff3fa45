"""
=============================================================================
HTTP SERVER
=============================================================================

Wires the pieces together and runs the per-connection state machine:

    SocketServer (acceptor thread)
        │  accept()
        ▼
    _handle_connection(conn) ──submit()──► ThreadPool   (blocks when full)
                                               │
                                               ▼  worker thread
    _process_connection(conn)
        parse      RequestParser.parse(conn.reader)          → PARSED
        route      Router.match(request)                     → ROUTED
        handle     handler(request)                          → HANDLED
        serialize  serialize(response, request.headers)      → SERIALIZED
        write      conn.send_response(bytes)                 → WRITTEN
        close      always, via `with conn:`                  → CLOSED

Any exception before WRITTEN moves the connection to FAILED: one attempt
is made to send a fixed 500 response, then the connection is closed. A
failure in one worker never reaches another.

=============================================================================
"""

import logging
from typing import Optional

from .access_log import log_exchange
from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer, ThreadPool
from .errors import FramingError, StorageError
from .handlers import FileStore
from .http import (
    HTTPRequest,
    RequestParser,
    Router,
    SERVER_ERROR_RESPONSE,
    serialize,
)


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Threaded HTTP/1.1 server for the echo, user-agent and file routes.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(directory="/tmp/data")
        server = HTTPServer(config)
        server.run()            # blocks until SIGINT/SIGTERM or stop()

    =========================================================================
    """

    def __init__(self, config: ServerConfig):
        """
        Initialize the HTTP server.

        Args:
            config: Server configuration. Must name a storage directory.

        Raises:
            ValueError: Invalid configuration.
        """
        self.config = config
        self.config.validate()  # Fail-fast on invalid config

        # ─────────────────────────────────────────────────────────────────
        # CORE COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        self._socket_server = SocketServer(self.config)

        self._thread_pool = ThreadPool(
            workers=self.config.workers,
            queue_size=self.config.handoff_capacity,
        )

        self._parser = RequestParser(
            max_line_length=self.config.max_line_length,
            max_body_size=self.config.max_body_size,
        )

        # ─────────────────────────────────────────────────────────────────
        # APPLICATION COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        store = FileStore(self.config.directory, max_file_size=self.config.max_file_size)
        self._router = Router(store)

        self._running = False

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port). Reflects the real port when port=0."""
        return self._socket_server.address

    @property
    def thread_pool(self) -> ThreadPool:
        return self._thread_pool

    def run(self, configure_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            configure_logging: Set up root logging from config.log_level.
        """
        if configure_logging:
            self._setup_logging()

        self._running = True
        self._thread_pool.start()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"({self.config.workers} workers, storage {self.config.directory})"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is open."""
        return self._socket_server.wait_until_ready(timeout)

    def stop(self):
        """Ask the accept loop to exit. run() then shuts the pool down."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("httpengine").setLevel(level)

    def _shutdown(self):
        """Stop accepting, let queued connections finish, stop the workers."""
        logger.info("Shutting down server...")
        self._running = False

        self._thread_pool.shutdown(wait=True, timeout=30.0)

        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Queue a connection for a worker (runs in the acceptor thread).

        Blocks while every worker is busy and the queue is full.
        """
        try:
            self._thread_pool.submit(self._process_connection, args=(conn,))
        except RuntimeError as e:
            # Pool already stopped
            logger.warning(f"[{conn.id}] Dropping connection: {e}")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Run one request/response exchange (runs in a worker thread).

        Args:
            conn: The client connection.
        """
        request: Optional[HTTPRequest] = None
        status_code = 0
        sent = 0

        with conn:  # Context manager ensures connection is closed
            try:
                # ─────────────────────────────────────────────────────────
                # PARSE
                # ─────────────────────────────────────────────────────────
                request = self._parser.parse(conn.reader, conn.address)
                conn.state = ConnectionState.PARSED

                # ─────────────────────────────────────────────────────────
                # ROUTE + HANDLE
                # ─────────────────────────────────────────────────────────
                handler = self._router.match(request)
                conn.state = ConnectionState.ROUTED

                response = handler(request)
                conn.state = ConnectionState.HANDLED

                # ─────────────────────────────────────────────────────────
                # SERIALIZE + WRITE
                # ─────────────────────────────────────────────────────────
                payload = serialize(response, request.headers)
                conn.state = ConnectionState.SERIALIZED

                conn.send_response(payload)
                status_code, sent = response.status_code, len(payload)

            except FramingError as e:
                logger.warning(f"[{conn.id}] Malformed request: {type(e).__name__}: {e}")
                status_code, sent = self._fail(conn)

            except StorageError as e:
                logger.error(f"[{conn.id}] Storage failure: {e}")
                status_code, sent = self._fail(conn)

            except OSError as e:
                # Socket timeout, reset or broken pipe
                logger.warning(f"[{conn.id}] Connection error: {e}")
                status_code, sent = self._fail(conn)

            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                status_code, sent = self._fail(conn)

        log_exchange(conn, request, status_code, sent, self.config.log_format)

    def _fail(self, conn: Connection) -> tuple[int, int]:
        """
        Move to FAILED and try once to send the generic 500.

        Returns:
            (status_code, bytes_sent) for the access log.
        """
        conn.state = ConnectionState.FAILED

        if conn.send_best_effort(SERVER_ERROR_RESPONSE):
            return 500, len(SERVER_ERROR_RESPONSE)
        return 500, 0
