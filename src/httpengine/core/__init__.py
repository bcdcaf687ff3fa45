"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                               │
    │  • Binds the loopback address, runs the accept() loop               │
    │  • Hands each accepted client to the worker pool                    │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ submit() (blocks when pool is full)
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          THREAD POOL                                │
    │  • N worker threads, one bounded queue                              │
    │  • One worker runs one connection to completion                     │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONNECTION + BYTE READER                         │
    │  • Buffered delimiter / exact-length reads over the socket          │
    │  • Lifecycle state, one response, always closed                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .stream import ByteReader
from .connection import Connection, ConnectionState
from .socket_server import SocketServer
from .thread_pool import ThreadPool

__all__ = [
    "ByteReader",       # Buffered reads over a recv() callable
    "Connection",       # Wrapper for client socket
    "ConnectionState",  # Enum for connection lifecycle states
    "SocketServer",     # Acceptor
    "ThreadPool",       # Fixed-size worker pool
]
