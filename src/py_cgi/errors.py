"""Exception hierarchy shared by every layer of the server.

Each failure is mapped exactly once: either to a terminal HTTP
response or to an aborted connection.  Nothing is retried.

- **RequestError** — the client sent something we cannot parse.  It
  carries the status code the client should see.
- **ResponseError** — a response cannot be put on the wire.  Fatal for
  the current connection only.
- **CgiError** — a script could not be run or its output is malformed.
- **ConfigError** — the server was configured with unusable values.
- **PoolError** — the worker pool was used after shutdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from py_cgi.http.status import HttpStatus


class ServerError(Exception):
    """Base class for every error raised by py-cgi."""


class RequestError(ServerError):
    """Raise when an incoming request cannot be turned into an HttpRequest."""

    def __init__(self, status: HttpStatus, message: str = "") -> None:
        """Create the error with the status the client should receive."""
        super().__init__(message or status.phrase)
        self.status = status


class ResponseError(ServerError):
    """Raise when a response cannot be serialized to wire text."""


class CgiError(ServerError):
    """Raise when a CGI script fails or produces malformed output."""


class ConfigError(ServerError):
    """Raise when the server configuration is invalid."""


class PoolError(ServerError):
    """Raise when the worker pool is misused."""
