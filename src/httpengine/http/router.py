"""
=============================================================================
ROUTING
=============================================================================

Routing happens in two steps:

    1. classify(target) → Route        one pass over the prefixes, in order
    2. (Route, Method)  → handler      table lookup

    ┌──────────────────────┬─────────────┬────────┬──────────────────────┐
    │ target               │ Route       │ Method │ handler              │
    ├──────────────────────┼─────────────┼────────┼──────────────────────┤
    │ exactly "/"          │ ROOT        │ GET    │ resources.root       │
    │ starts "/echo"       │ ECHO        │ GET    │ resources.echo       │
    │ starts "/user-agent" │ USER_AGENT  │ GET    │ resources.user_agent │
    │ starts "/files"      │ FILES       │ GET    │ FileHandler.read     │
    │                      │             │ POST   │ FileHandler.write    │
    │ anything else        │ UNMATCHED   │ any    │ 404                  │
    └──────────────────────┴─────────────┴────────┴──────────────────────┘

A known route with the wrong method is answered 404, the same as an
unknown route. There is no 405 in this engine.

=============================================================================
"""

import logging
from enum import Enum
from typing import Callable, Dict, Tuple

from ..handlers import resources
from ..handlers.files import FileHandler, FileStore
from .request import HTTPRequest, Method
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)

# Handler: A function that takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


class Route(Enum):
    """Every resource the engine knows, plus UNMATCHED for everything else."""

    ROOT = "root"
    ECHO = "echo"
    USER_AGENT = "user-agent"
    FILES = "files"
    UNMATCHED = "unmatched"


def unmatched(request: HTTPRequest) -> HTTPResponse:
    """Fallback for an unknown route or a wrong method."""
    return not_found()


# Checked in this order; the first prefix that matches wins
_PREFIXES = (
    ("/echo", Route.ECHO),
    ("/user-agent", Route.USER_AGENT),
    ("/files", Route.FILES),
)


def classify(target: str) -> Route:
    """
    Map a request target to its Route.

    Example:
        classify("/")             # Route.ROOT
        classify("/echo/abc")     # Route.ECHO
        classify("/index.html")   # Route.UNMATCHED
    """
    if target == "/":
        return Route.ROOT

    for prefix, route in _PREFIXES:
        if target.startswith(prefix):
            return route

    return Route.UNMATCHED


class Router:
    """
    Dispatches requests to the resource handlers.

    The storage directory reaches the file handlers through the FileStore
    passed in here; there is no module-level state.
    """

    def __init__(self, store: FileStore):
        """
        Args:
            store: File storage used by the /files routes.
        """
        files = FileHandler(store)

        self._handlers: Dict[Tuple[Route, Method], Handler] = {
            (Route.ROOT, Method.GET): resources.root,
            (Route.ECHO, Method.GET): resources.echo,
            (Route.USER_AGENT, Method.GET): resources.user_agent,
            (Route.FILES, Method.GET): files.read,
            (Route.FILES, Method.POST): files.write,
        }

    def match(self, request: HTTPRequest) -> Handler:
        """
        Find the handler for a request.

        Returns:
            The handler, or `unmatched` for an unknown route or a wrong
            method. Calling it is left to the connection handler, which
            also owns any storage or unexpected errors it raises.
        """
        route = classify(request.target)
        handler = self._handlers.get((route, request.method))
        if handler is None:
            logger.debug(f"No route for {request.method.value} {request.target}")
            return unmatched
        return handler
