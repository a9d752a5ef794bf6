"""The request-handler capability and path containment helper.

A handler looks at a request and either produces a response or
declines by returning ``None``.  Declining means "not mine, ask the
next handler"; producing an error response (404, 405, ...) means "mine,
and this is the answer".

Handlers are shared read-only by every worker thread, so they must not
keep per-request state on ``self``.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from py_cgi.errors import ConfigError

if TYPE_CHECKING:
    from py_cgi.http.request import HttpRequest
    from py_cgi.http.response import HttpResponse


class RequestHandler(Protocol):
    """Interface that every handler in the chain must satisfy."""

    def handle(self, request: HttpRequest, peer: str | None) -> HttpResponse | None:
        """Return a response for *request*, or None to decline.

        Args:
            request: The parsed request.
            peer: Remote address of the originating connection, if known.

        """
        ...  # pragma: no cover


def canonical_root(root: str | Path) -> Path:
    """Resolve a configured root directory once, at construction time.

    Raises:
        ConfigError: If *root* does not exist or is not a directory.

    """
    try:
        resolved = Path(root).resolve(strict=True)
    except OSError as e:
        msg = f"Root directory does not exist: {root}"
        raise ConfigError(msg) from e
    if not resolved.is_dir():
        msg = f"Root is not a directory: {root}"
        raise ConfigError(msg)
    return resolved


def resolve_under(root: Path, relative: str) -> Path | None:
    """Canonicalize *relative* against *root* and check containment.

    Symlinks and ``..`` segments are resolved first, so a path that
    escapes the root (directly or through a link) is rejected.

    Returns:
        The canonical path, or None if it does not exist or lies
        outside *root*.

    """
    try:
        resolved = (root / relative).resolve(strict=True)
    except (OSError, RuntimeError, ValueError):
        return None
    if not resolved.is_relative_to(root):
        return None
    return resolved
