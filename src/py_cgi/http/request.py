r"""HTTP request parsing — raw bytes in, structured request out.

A client opens a connection and sends a single request::

    GET /index.html?lang=en HTTP/1.1\r\n
    Host: localhost:8080\r\n
    \r\n
    [body]

The server performs exactly **one** read of at most ``BUFFER_SIZE``
bytes per connection.  Whatever that read returns is the whole request:
there is no ``Content-Length``-driven loop, so requests (or bodies)
larger than the buffer are rejected rather than streamed.

Parse failures raise ``RequestError`` carrying the status the client
should see: BAD_REQUEST for malformed text, PAYLOAD_TOO_LARGE for
oversized input, INTERNAL_SERVER_ERROR when the read itself fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from py_cgi.errors import RequestError
from py_cgi.http.headers import Headers
from py_cgi.http.status import HttpStatus

BUFFER_SIZE = 8 * 1024
_START_LINE_PARTS = 3


class HttpVersion(StrEnum):
    """The protocol versions a request line may declare."""

    HTTP_09 = "HTTP/0.9"
    HTTP_10 = "HTTP/1.0"
    HTTP_11 = "HTTP/1.1"
    HTTP_2 = "HTTP/2"
    HTTP_3 = "HTTP/3"


@dataclass(frozen=True)
class HttpRequest:
    """A parsed HTTP request.

    Attributes:
        method: The request method token, verbatim (e.g. "GET").
        path: The target path without the query (e.g. "/cgi-bin/hello").
        version: The declared protocol version.
        query: The query string after ``?``, or None if there was none.
        headers: Case-insensitive header mapping.
        body: Request body text (line breaks removed).

    """

    method: str
    path: str
    version: HttpVersion = HttpVersion.HTTP_11
    query: str | None = None
    headers: Headers = field(default_factory=Headers)
    body: str = ""

    @property
    def target(self) -> str:
        """Return the request target as sent: path plus ``?query`` if any."""
        if self.query is None:
            return self.path
        return f"{self.path}?{self.query}"


class Readable(Protocol):
    """Anything we can do a single blocking ``recv`` on (e.g. a socket)."""

    def recv(self, bufsize: int, /) -> bytes:
        """Read up to *bufsize* bytes."""
        ...  # pragma: no cover


def split_target(target: str) -> tuple[str, str | None]:
    """Split a request target into ``(path, query)``."""
    path, sep, query = target.partition("?")
    return path, (query if sep else None)


def split_lines(text: str) -> list[str]:
    r"""Split *text* on ``\n`` (dropping a trailing ``\r`` from each line).

    A final line terminator does not produce an extra empty line, so
    ``"a\r\n\r\n"`` splits into ``["a", ""]``.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def read_request(stream: Readable) -> HttpRequest:
    """Read one request from *stream* with a single bounded read.

    One byte more than ``BUFFER_SIZE`` is requested so that oversized
    requests can be told apart from requests that exactly fill the
    buffer.

    Raises:
        RequestError: If the read fails or the data cannot be parsed.

    """
    try:
        data = stream.recv(BUFFER_SIZE + 1)
    except OSError as e:
        msg = f"Failed to read request: {e}"
        raise RequestError(HttpStatus.INTERNAL_SERVER_ERROR, msg) from e
    return parse_request(data)


def parse_request(data: bytes) -> HttpRequest:
    """Parse raw bytes into an HttpRequest.

    Raises:
        RequestError: If the data is oversized or malformed.

    """
    data = data.rstrip(b"\x00")
    if len(data) > BUFFER_SIZE:
        msg = f"Request exceeds {BUFFER_SIZE} bytes"
        raise RequestError(HttpStatus.PAYLOAD_TOO_LARGE, msg)

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        msg = "Request is not valid UTF-8"
        raise RequestError(HttpStatus.BAD_REQUEST, msg) from e

    lines = iter(split_lines(text))

    start_line = next(lines, None)
    if start_line is None:
        msg = "No data received"
        raise RequestError(HttpStatus.BAD_REQUEST, msg)

    parts = start_line.split()
    if len(parts) != _START_LINE_PARTS:
        msg = f"Malformed start line: {start_line!r}"
        raise RequestError(HttpStatus.BAD_REQUEST, msg)
    method, target, version_text = parts

    try:
        version = HttpVersion(version_text)
    except ValueError as e:
        msg = f"Unsupported protocol version: {version_text!r}"
        raise RequestError(HttpStatus.BAD_REQUEST, msg) from e

    headers = Headers()
    for line in lines:
        if not line:
            break
        name, sep, value = line.partition(":")
        if not sep:
            msg = f"Malformed header line: {line!r}"
            raise RequestError(HttpStatus.BAD_REQUEST, msg)
        headers[name.strip()] = value.strip()
    else:
        msg = "Request ended inside the header section"
        raise RequestError(HttpStatus.BAD_REQUEST, msg)

    body = "".join(lines)
    path, query = split_target(target)
    return HttpRequest(
        method=method,
        path=path,
        version=version,
        query=query,
        headers=headers,
        body=body,
    )
