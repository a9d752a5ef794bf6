"""The connection pipeline — one request, one response, then close.

For every accepted connection a worker runs::

    read (one bounded recv) → parse → dispatch → serialize → sendall → linger → close

Protocol errors become an empty-bodied error response.  Failures on the
connection itself (the write fails, or the response cannot be
serialized) abandon this connection only; they are logged and never
propagate to the worker pool.

After the response is written the write side is shut down and any
request bytes the single read left unread are discarded (bounded by
``LINGER_LIMIT`` bytes and ``LINGER_SECONDS``).  Closing a socket with
unread input makes the kernel reset the connection, which can destroy
the response before the client has read it.
"""

from __future__ import annotations

import socket
from typing import TYPE_CHECKING, Protocol

from py_cgi.errors import RequestError, ResponseError
from py_cgi.http.request import BUFFER_SIZE, read_request
from py_cgi.http.response import error_response, format_response
from py_cgi.logging import Logger, get_logger

if TYPE_CHECKING:
    from py_cgi.handlers.chain import HandlerChain
    from py_cgi.http.response import HttpResponse


LINGER_SECONDS = 0.5
LINGER_LIMIT = 64 * 1024


class Connection(Protocol):
    """The subset of the socket API the pipeline relies on."""

    def recv(self, bufsize: int, /) -> bytes:
        """Read up to *bufsize* bytes."""
        ...  # pragma: no cover

    def sendall(self, data: bytes, /) -> None:
        """Write all of *data*."""
        ...  # pragma: no cover

    def getpeername(self) -> object:
        """Return the remote address."""
        ...  # pragma: no cover

    def shutdown(self, how: int, /) -> None:
        """Shut down one or both halves of the connection."""
        ...  # pragma: no cover

    def settimeout(self, value: float | None, /) -> None:
        """Set the timeout for blocking operations."""
        ...  # pragma: no cover

    def close(self) -> None:
        """Close the connection."""
        ...  # pragma: no cover


def peer_address(conn: Connection) -> str | None:
    """Return the remote IP address of *conn*, or None if unavailable."""
    try:
        address = conn.getpeername()
    except OSError:
        return None
    if isinstance(address, tuple) and address:
        return str(address[0])  # pyright: ignore[reportUnknownArgumentType]
    return None


class ConnectionPipeline:
    """Serve exactly one request per connection through a handler chain."""

    def __init__(self, chain: HandlerChain, *, logger: Logger | None = None) -> None:
        """Create a pipeline dispatching through *chain*."""
        self._chain = chain
        self._logger = logger if logger is not None else get_logger()

    @property
    def chain(self) -> HandlerChain:
        """Return the handler chain."""
        return self._chain

    def respond(self, conn: Connection, peer: str | None) -> HttpResponse:
        """Read and parse one request from *conn* and build its response."""
        try:
            request = read_request(conn)
        except RequestError as e:
            self._logger.info(f"Rejected request: {e}", source="connection", peer=peer)
            return error_response(e.status)

        self._logger.debug(
            f"{request.method} {request.target} {request.version}", source="connection", peer=peer
        )
        return self._chain.dispatch(request, peer)

    def handle(self, conn: Connection) -> None:
        """Run the full lifecycle for *conn* and close it."""
        peer = peer_address(conn)
        self._logger.info("New connection", source="connection", peer=peer)
        try:
            response = self.respond(conn, peer)
            data = format_response(response)
            conn.sendall(data)
            self._logger.info(
                f"Responded {response.status} ({len(data)} bytes)", source="connection", peer=peer
            )
            self._linger(conn, peer)
        except ResponseError as e:
            self._logger.error(f"Unwritable response: {e}", source="connection", peer=peer)
        except OSError as e:
            self._logger.error(f"Connection failed: {e}", source="connection", peer=peer)
        finally:
            conn.close()

    def _linger(self, conn: Connection, peer: str | None) -> None:
        """Shut down the write side and discard unread request bytes."""
        discarded = 0
        try:
            conn.shutdown(socket.SHUT_WR)
            conn.settimeout(LINGER_SECONDS)
            while discarded < LINGER_LIMIT:
                chunk = conn.recv(BUFFER_SIZE)
                if not chunk:
                    break
                discarded += len(chunk)
        except OSError as e:
            self._logger.debug(f"Linger cut short: {e!r}", source="connection", peer=peer)
        if discarded:
            self._logger.debug(
                f"Discarded {discarded} unread request bytes", source="connection", peer=peer
            )
