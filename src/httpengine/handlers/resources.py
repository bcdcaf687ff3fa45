"""
Handlers for the fixed, storage-free routes.

    GET /                → 200, empty
    GET /echo/<text>     → 200 text/plain, body = <text> as sent
    GET /user-agent      → 200 text/plain, body = User-Agent value

A wrong number of path segments is answered with 422. That is a normal
outcome, not an exception.
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, bad_request, ok, text, unprocessable


def root(request: HTTPRequest) -> HTTPResponse:
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Reflect the second path segment.

    The text is returned exactly as it appeared in the target, with no
    percent-decoding: GET /echo/a%20b answers "a%20b".
    """
    segments = request.segments
    if len(segments) != 2:
        return unprocessable()

    return text(segments[1])


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """Reflect the client's User-Agent header, or 400 if it sent none."""
    if len(request.segments) != 1:
        return unprocessable()

    agent = request.user_agent
    if agent is None:
        return bad_request()

    return text(agent)
