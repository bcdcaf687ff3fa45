"""
=============================================================================
httpengine - A BYTE-LEVEL HTTP/1.1 SERVER
=============================================================================

Parses HTTP/1.1 straight off the socket, routes to a handful of fixed
resources and writes the response back, one exchange per connection,
on a fixed pool of worker threads.

    GET  /                → 200
    GET  /echo/<text>     → 200 text/plain <text>
    GET  /user-agent      → 200 text/plain <User-Agent>
    GET  /files/<name>    → 200 application/octet-stream <file bytes>
    POST /files/<name>    → 201, file written

Responses with a body are gzip-compressed when the client sends
"Accept-Encoding: gzip".

=============================================================================
QUICK START
=============================================================================

    python -m httpengine --directory /tmp/data

or from Python:

    from httpengine import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(directory="/tmp/data", port=4221))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
