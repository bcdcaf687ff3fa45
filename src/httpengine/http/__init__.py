"""
=============================================================================
HTTP LAYER
=============================================================================

Turns bytes into requests and responses into bytes:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   ByteReader over b"GET /echo/hi HTTP/1.1\r\n\r\n"           │
    │ Output:  HTTPRequest(method=Method.GET, target="/echo/hi", ...)     │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTER (router.py)                                                  │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   HTTPRequest                                                │
    │ Output:  HTTPResponse from the matching resource handler            │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE + ENCODING (response.py, encoding.py)                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   HTTPResponse, request headers                              │
    │ Output:  b"HTTP/1.1 200 OK\r\nContent-Type: ...\r\n\r\nhi"          │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from ..errors import (
    HTTPEngineError,
    FramingError,
    EndOfStream,
    ShortRead,
    LineTooLong,
    MissingLineFeed,
    UnsupportedMethod,
    ParseError,
    BodyTooLarge,
    NotFoundError,
    StorageError,
    EncodingMismatchError,
)
from .request import HeaderSet, HTTPRequest, Method, RequestParser, parse_request
from .response import HTTPResponse, SERVER_ERROR_RESPONSE, serialize
from .router import Route, Router, classify
from .status_codes import HTTPStatus

__all__ = [
    # Errors
    "HTTPEngineError",
    "FramingError",
    "EndOfStream",
    "ShortRead",
    "LineTooLong",
    "MissingLineFeed",
    "UnsupportedMethod",
    "ParseError",
    "BodyTooLarge",
    "NotFoundError",
    "StorageError",
    "EncodingMismatchError",

    # Request parsing
    "HeaderSet",
    "HTTPRequest",
    "Method",
    "RequestParser",
    "parse_request",

    # Response building
    "HTTPResponse",
    "SERVER_ERROR_RESPONSE",
    "serialize",

    # Routing
    "Route",
    "Router",
    "classify",

    # Status codes
    "HTTPStatus",
]
