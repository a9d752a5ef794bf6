"""The dispatch chain — try each handler in order until one answers.

Order matters: the first handler that produces a response wins, and
later handlers are never consulted.  If every handler declines the
client gets an empty 500.

HEAD requests are normalized here, after the winning handler has run:
the body is dropped but the headers (including any Content-Length the
handler computed) are kept as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_cgi.http.response import error_response
from py_cgi.http.status import HttpStatus
from py_cgi.logging import Logger, get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from py_cgi.handlers.base import RequestHandler
    from py_cgi.http.request import HttpRequest
    from py_cgi.http.response import HttpResponse


class HandlerChain:
    """An immutable, ordered sequence of request handlers."""

    def __init__(self, handlers: Iterable[RequestHandler], *, logger: Logger | None = None) -> None:
        """Freeze *handlers* into a chain."""
        self._handlers: tuple[RequestHandler, ...] = tuple(handlers)
        self._logger = logger if logger is not None else get_logger()

    @property
    def handlers(self) -> tuple[RequestHandler, ...]:
        """Return the handlers in dispatch order."""
        return self._handlers

    def __len__(self) -> int:
        """Return the number of handlers."""
        return len(self._handlers)

    def dispatch(self, request: HttpRequest, peer: str | None) -> HttpResponse:
        """Return the response of the first handler that does not decline."""
        response = None
        for handler in self._handlers:
            response = handler.handle(request, peer)
            if response is not None:
                break

        if response is None:
            self._logger.warning(
                f"No handler for {request.method} {request.path}", source="chain", peer=peer
            )
            response = error_response(HttpStatus.INTERNAL_SERVER_ERROR)

        if request.method == "HEAD":
            response.body = ""

        return response
