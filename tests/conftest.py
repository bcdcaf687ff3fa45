"""
pytest configuration and fixtures.
"""

import threading
from pathlib import Path
from typing import Callable, Generator, List

import pytest

from httpengine import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest/8.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"12345 hello world"
    return (
        b"POST /files/notes.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n\r\n".encode()
        + body
    )


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    """Empty storage directory."""
    directory = tmp_path / "storage"
    directory.mkdir()
    return directory


@pytest.fixture
def config(storage_dir: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        directory=str(storage_dir),
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        workers=4,
        log_level="WARNING",
    )


class RunningServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"configure_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.stop()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[RunningServer, None, None]:
    """A live server on a free loopback port."""
    srv = RunningServer(HTTPServer(config))
    srv.start()

    yield srv

    srv.stop()


@pytest.fixture
def server_factory(storage_dir: Path) -> Generator[Callable[..., RunningServer], None, None]:
    """
    Start servers with custom settings; all are stopped at teardown.

    Example:
        srv = server_factory(workers=1, timeout=0.3)
    """
    started: List[RunningServer] = []

    def _start(**overrides) -> RunningServer:
        settings = {
            "directory": str(storage_dir),
            "port": 0,
            "log_level": "WARNING",
        }
        settings.update(overrides)

        srv = RunningServer(HTTPServer(ServerConfig(**settings)))
        srv.start()
        started.append(srv)
        return srv

    yield _start

    for srv in started:
        srv.stop()
