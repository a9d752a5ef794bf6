"""Static file handler — serve text files from a document root.

``/`` maps to ``index.html``; every other path is looked up relative to
the root after stripping the leading slash.  Paths that do not exist or
that resolve outside the root both answer 404, so probing for files
outside the root reveals nothing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_cgi.handlers.base import canonical_root, resolve_under
from py_cgi.http.headers import Headers
from py_cgi.http.response import HttpResponse, error_response
from py_cgi.http.status import HttpStatus
from py_cgi.logging import Logger, get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from py_cgi.http.request import HttpRequest

INDEX_FILE = "index.html"
_ALLOWED_METHODS = frozenset({"GET", "HEAD"})


class StaticHandler:
    """Serve files under a fixed root directory."""

    def __init__(self, root: str | Path, *, logger: Logger | None = None) -> None:
        """Create a handler serving files under *root*.

        Raises:
            ConfigError: If *root* is not an existing directory.

        """
        self._root = canonical_root(root)
        self._logger = logger if logger is not None else get_logger()

    @property
    def root(self) -> Path:
        """Return the canonical document root."""
        return self._root

    def handle(self, request: HttpRequest, peer: str | None) -> HttpResponse | None:
        """Serve the file named by the request path.

        Never declines: every request gets a response.
        """
        if request.method not in _ALLOWED_METHODS:
            return error_response(HttpStatus.METHOD_NOT_ALLOWED)

        relative = INDEX_FILE if request.path == "/" else request.path.removeprefix("/")
        file_path = resolve_under(self._root, relative)
        if file_path is None:
            self._logger.debug(f"Not found: {request.path}", source="static", peer=peer)
            return error_response(HttpStatus.NOT_FOUND)

        self._logger.debug(f"Reading {file_path}", source="static", peer=peer)
        try:
            contents = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self._logger.warning(f"Cannot read {file_path}: {e}", source="static", peer=peer)
            return error_response(HttpStatus.INTERNAL_SERVER_ERROR)

        length = len(contents.encode("utf-8"))
        body = "" if request.method == "HEAD" else contents
        return HttpResponse(
            status=HttpStatus.OK,
            headers=Headers({"content-length": str(length)}),
            body=body,
        )
