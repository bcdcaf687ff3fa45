"""
Unit tests for the per-connection state machine.

Each test drives HTTPServer._process_connection over a socketpair, so
the exchange runs exactly as it would on a worker, without a listener.
"""

import logging
import socket
from pathlib import Path
from typing import Tuple

import pytest

from httpengine import HTTPServer, ServerConfig
from httpengine.core.connection import Connection, ConnectionState
from httpengine.http.response import SERVER_ERROR_RESPONSE


@pytest.fixture
def server(config: ServerConfig) -> HTTPServer:
    return HTTPServer(config)


def run_exchange(server: HTTPServer, raw: bytes) -> Tuple[bytes, Connection]:
    """Feed raw bytes through one connection and collect the reply."""
    client, server_side = socket.socketpair()
    try:
        conn = Connection(socket=server_side, address=("127.0.0.1", 50000))
        client.sendall(raw)
        client.shutdown(socket.SHUT_WR)

        server._process_connection(conn)

        chunks = []
        while True:
            chunk = client.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks), conn
    finally:
        client.close()


class TestConnectionStateMachine:
    """Tests for _process_connection."""

    def test_successful_exchange(self, server):
        data, conn = run_exchange(server, b"GET /echo/abc HTTP/1.1\r\n\r\n")

        assert data == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )
        assert conn.state is ConnectionState.CLOSED

    def test_not_found(self, server):
        data, _ = run_exchange(server, b"GET /nope HTTP/1.1\r\n\r\n")

        assert data == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_malformed_request_gets_500(self, server):
        data, conn = run_exchange(server, b"GET / HTTP/1.1\r\nHost: x\r!\r\n\r\n")

        assert data == SERVER_ERROR_RESPONSE
        assert conn.state is ConnectionState.CLOSED

    def test_unsupported_method_gets_500(self, server):
        data, _ = run_exchange(server, b"DELETE /files/a HTTP/1.1\r\n\r\n")

        assert data == SERVER_ERROR_RESPONSE

    def test_truncated_request_gets_500(self, server):
        data, _ = run_exchange(server, b"GET /echo/abc HTTP/1.1\r\nHost: x")

        assert data == SERVER_ERROR_RESPONSE

    def test_short_body_gets_500(self, server, storage_dir: Path):
        data, _ = run_exchange(
            server, b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc"
        )

        assert data == SERVER_ERROR_RESPONSE
        assert not (storage_dir / "a").exists()

    def test_storage_failure_gets_500(self, server, storage_dir: Path):
        (storage_dir / "sub").mkdir()  # Writing over a directory fails

        data, conn = run_exchange(
            server, b"POST /files/sub HTTP/1.1\r\nContent-Length: 1\r\n\r\nx"
        )

        assert data == SERVER_ERROR_RESPONSE
        assert conn.state is ConnectionState.CLOSED

    def test_handler_crash_gets_500(self, server, monkeypatch):
        def crash(request):
            raise RuntimeError("bug")

        monkeypatch.setattr(server._router, "match", lambda request: crash)

        data, _ = run_exchange(server, b"GET / HTTP/1.1\r\n\r\n")

        assert data == SERVER_ERROR_RESPONSE

    def test_access_log_line(self, server, caplog):
        with caplog.at_level(logging.INFO, logger="httpengine.access"):
            run_exchange(server, b"GET /user-agent HTTP/1.1\r\nUser-Agent: checker/1.0\r\n\r\n")

        records = [r for r in caplog.records if r.name == "httpengine.access"]
        assert len(records) == 1
        assert '"GET /user-agent" 200' in records[0].getMessage()
        assert '"checker/1.0"' in records[0].getMessage()


class TestConnection:
    """Tests for the Connection wrapper."""

    def test_close_is_idempotent(self):
        client, server_side = socket.socketpair()
        conn = Connection(socket=server_side, address=("127.0.0.1", 1))

        conn.close()
        conn.close()

        assert conn.state is ConnectionState.CLOSED
        client.close()

    def test_context_manager_closes(self):
        client, server_side = socket.socketpair()

        with Connection(socket=server_side, address=("127.0.0.1", 1)) as conn:
            conn.send_response(b"x")
            assert conn.state is ConnectionState.WRITTEN

        assert conn.state is ConnectionState.CLOSED
        assert client.recv(10) == b"x"
        client.close()

    def test_best_effort_send_swallows_errors(self):
        client, server_side = socket.socketpair()
        conn = Connection(socket=server_side, address=("127.0.0.1", 1))
        server_side.close()

        assert conn.send_best_effort(b"x") is False
        client.close()
