"""CGI metavariables — the request, as seen by a script.

A CGI script learns about the request through its environment: a set
of ``NAME=value`` string pairs.  Unlike an ordinary child process, the
script inherits **nothing** from the server's own environment; the
block is built from scratch for every request and contains only the
metavariables below.

Key design properties:
    - **Closed key set** — only the names in ``CgiMetavariable`` can be
      stored; anything else is a programming error.
    - **Strings only** — both keys and values are strings.
    - **Built fresh, used once** — one map per request, consumed by the
      subprocess launch and then discarded.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from py_cgi.http.request import HttpRequest

GATEWAY_INTERFACE = "CGI/1.1"
SERVER_PROTOCOL = "HTTP/1.0"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_PORT = "80"


class CgiMetavariable(StrEnum):
    """The environment variable names passed to every script."""

    AUTH_TYPE = "AUTH_TYPE"
    CONTENT_LENGTH = "CONTENT_LENGTH"
    CONTENT_TYPE = "CONTENT_TYPE"
    GATEWAY_INTERFACE = "GATEWAY_INTERFACE"
    PATH_INFO = "PATH_INFO"
    PATH_TRANSLATED = "PATH_TRANSLATED"
    QUERY_STRING = "QUERY_STRING"
    REMOTE_ADDR = "REMOTE_ADDR"
    REMOTE_HOST = "REMOTE_HOST"
    REMOTE_IDENT = "REMOTE_IDENT"
    REMOTE_USER = "REMOTE_USER"
    REQUEST_METHOD = "REQUEST_METHOD"
    SCRIPT_NAME = "SCRIPT_NAME"
    SERVER_NAME = "SERVER_NAME"
    SERVER_PORT = "SERVER_PORT"
    SERVER_PROTOCOL = "SERVER_PROTOCOL"
    SERVER_SOFTWARE = "SERVER_SOFTWARE"


class MetavariableMap:
    """A key-value store restricted to CGI metavariable names."""

    def __init__(self, initial: dict[CgiMetavariable, str] | None = None) -> None:
        """Create a map, optionally pre-populated.

        Args:
            initial: Starting variables (copied, not referenced).

        """
        self._vars: dict[CgiMetavariable, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: CgiMetavariable, default: str | None = None) -> str | None:
        """Return the value for *key*, or *default* if not set."""
        return self._vars.get(key, default)

    def set(self, key: CgiMetavariable | str, value: str) -> None:
        """Set *key* to *value* (creates or overwrites).

        Raises:
            ValueError: If *key* is not a CGI metavariable name.

        """
        self._vars[CgiMetavariable(key)] = value

    def items(self) -> list[tuple[CgiMetavariable, str]]:
        """Return all (key, value) pairs."""
        return list(self._vars.items())

    def as_environ(self) -> dict[str, str]:
        """Return the exact environment block for the subprocess."""
        return {str(key): value for key, value in self._vars.items()}

    def __getitem__(self, key: CgiMetavariable) -> str:
        """Return the value for *key*.

        Raises:
            KeyError: If *key* has not been set.

        """
        return self._vars[key]

    def __contains__(self, key: object) -> bool:
        """Check whether *key* has been set."""
        return key in self._vars

    def __iter__(self) -> Iterator[CgiMetavariable]:
        """Iterate over the keys that have been set."""
        return iter(self._vars)

    def __len__(self) -> int:
        """Return the number of variables."""
        return len(self._vars)


def _split_host(host: str) -> tuple[str, str]:
    """Split a Host header on its last colon into ``(name, port)``."""
    name, sep, port = host.rpartition(":")
    if not sep:
        return host, DEFAULT_PORT
    return name, port


def build_metavariables(
    request: HttpRequest,
    peer: str | None,
    *,
    software: str,
) -> MetavariableMap:
    """Translate a request and its connection into CGI metavariables.

    Args:
        request: The request being delegated to a script.
        peer: Remote address of the connection, or None if unknown.
        software: The SERVER_SOFTWARE identification string.

    Returns:
        A fresh metavariable map for this request only.

    """
    mv = MetavariableMap()

    authorization = request.headers.get("Authorization", "")
    scheme, sep, parameters = authorization.partition(" ")
    if sep:
        mv.set(CgiMetavariable.AUTH_TYPE, scheme)
        mv.set(CgiMetavariable.REMOTE_USER, parameters)
    else:
        mv.set(CgiMetavariable.AUTH_TYPE, "")

    content_length = len(request.body.encode("utf-8"))
    mv.set(CgiMetavariable.CONTENT_LENGTH, str(content_length) if content_length else "")
    mv.set(
        CgiMetavariable.CONTENT_TYPE,
        request.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE,
    )
    mv.set(CgiMetavariable.GATEWAY_INTERFACE, GATEWAY_INTERFACE)
    mv.set(CgiMetavariable.PATH_INFO, "")
    mv.set(CgiMetavariable.PATH_TRANSLATED, "")
    mv.set(CgiMetavariable.QUERY_STRING, request.query or "")

    remote = peer or ""
    mv.set(CgiMetavariable.REMOTE_ADDR, remote)
    mv.set(CgiMetavariable.REMOTE_HOST, remote)
    mv.set(CgiMetavariable.REMOTE_IDENT, "")

    mv.set(CgiMetavariable.REQUEST_METHOD, request.method)
    mv.set(CgiMetavariable.SCRIPT_NAME, request.path)

    server_name, server_port = _split_host(request.headers.get("Host", ""))
    mv.set(CgiMetavariable.SERVER_NAME, server_name)
    mv.set(CgiMetavariable.SERVER_PORT, server_port)
    mv.set(CgiMetavariable.SERVER_PROTOCOL, SERVER_PROTOCOL)
    mv.set(CgiMetavariable.SERVER_SOFTWARE, software)

    return mv
