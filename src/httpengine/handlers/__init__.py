"""
=============================================================================
RESOURCE HANDLERS
=============================================================================

A handler takes an HTTPRequest and returns an HTTPResponse:

    resources.root         GET /
    resources.echo         GET /echo/<text>
    resources.user_agent   GET /user-agent
    FileHandler.read       GET /files/<name>
    FileHandler.write      POST /files/<name>

Validation problems (wrong segment count, missing header, missing file)
come back as ordinary responses with a 4xx status. Only storage failures
escape as exceptions.

=============================================================================
"""

from . import resources
from .files import FileHandler, FileStore

__all__ = [
    "resources",
    "FileHandler",
    "FileStore",
]
