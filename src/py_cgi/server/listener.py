"""The TCP listener — accept connections and hand them to the pool.

The listener owns the server socket and nothing else.  For each accepted
connection it submits one pipeline job to the worker pool and goes
straight back to ``accept``; it never reads from a client itself.
"""

from __future__ import annotations

import socket
import threading
from functools import partial
from typing import TYPE_CHECKING

from py_cgi.errors import PoolError
from py_cgi.logging import Logger, get_logger
from py_cgi.server.connection import ConnectionPipeline
from py_cgi.server.pool import WorkerPool

if TYPE_CHECKING:
    from types import TracebackType

    from py_cgi.handlers.chain import HandlerChain

LISTEN_BACKLOG = 128
_ACCEPT_POLL_SECONDS = 0.5


class Server:
    """Bind a TCP socket and serve connections through a worker pool."""

    def __init__(
        self,
        chain: HandlerChain,
        *,
        host: str = "127.0.0.1",
        port: int = 8080,
        pool_size: int = 4,
        logger: Logger | None = None,
    ) -> None:
        """Bind and listen; workers start immediately.

        Args:
            chain: The handler chain every connection is dispatched through.
            host: Interface to bind.
            port: Port to bind (0 picks a free port).
            pool_size: Number of worker threads.
            logger: Where events are recorded.

        Raises:
            OSError: If the address cannot be bound.
            PoolError: If *pool_size* is less than one.

        """
        self._logger = logger if logger is not None else get_logger()
        self._pipeline = ConnectionPipeline(chain, logger=self._logger)
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._socket.bind((host, port))
            self._socket.listen(LISTEN_BACKLOG)
            self._socket.settimeout(_ACCEPT_POLL_SECONDS)
            self._pool = WorkerPool(pool_size, logger=self._logger)
        except BaseException:
            self._socket.close()
            raise
        self._stopping = threading.Event()
        self._stopped = threading.Event()
        self._stopped.set()

    @property
    def server_address(self) -> tuple[str, int]:
        """Return the ``(host, port)`` actually bound."""
        host, port = self._socket.getsockname()[:2]
        return str(host), int(port)

    @property
    def pool(self) -> WorkerPool:
        """Return the worker pool."""
        return self._pool

    def serve_forever(self) -> None:
        """Accept connections until ``shutdown`` is called."""
        self._stopped.clear()
        host, port = self.server_address
        self._logger.info(
            f"Serving on http://{host}:{port} with {self._pool.size} workers", source="server"
        )
        try:
            while not self._stopping.is_set():
                try:
                    conn, _ = self._socket.accept()
                except TimeoutError:
                    continue
                except OSError as e:
                    if self._stopping.is_set():
                        break
                    self._logger.error(f"Accept failed: {e}", source="server")
                    continue
                conn.settimeout(None)
                try:
                    self._pool.submit(partial(self._pipeline.handle, conn))
                except PoolError:
                    conn.close()
                    break
        finally:
            self._stopped.set()

    def shutdown(self) -> None:
        """Stop accepting, let queued connections finish, and close the socket."""
        self._stopping.set()
        self._stopped.wait()
        self._pool.shutdown(wait=True)
        self._socket.close()
        self._logger.info("Server stopped", source="server")

    def __enter__(self) -> Server:
        """Return the server for use in a ``with`` block."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Shut the server down."""
        self.shutdown()
