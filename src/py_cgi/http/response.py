r"""HTTP response building and serialization.

Wire format::

    HTTP/1.1 200 OK\r\n
    Header-Name: value\r\n
    ...\r\n
    \r\n
    [body]

The status line always reports ``HTTP/1.1`` regardless of the version
the client declared.  Headers are written in the order they were set.
No ``Content-Length`` is added here; handlers that need one set it
themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from py_cgi.errors import ResponseError
from py_cgi.http.headers import Headers
from py_cgi.http.status import HttpStatus, status_reason

RESPONSE_VERSION = "HTTP/1.1"
_CRLF = "\r\n"


@dataclass
class HttpResponse:
    """An HTTP response under construction.

    Exactly one handler fills a response in; afterwards it is handed to
    ``format_response`` and not touched again.

    Attributes:
        status: Status code (200, 404, or any script-provided code).
        headers: Ordered, case-insensitive header mapping.
        body: Response body text.

    """

    status: int = HttpStatus.OK
    headers: Headers = field(default_factory=Headers)
    body: str = ""


def error_response(status: HttpStatus) -> HttpResponse:
    """Return an empty-bodied response carrying *status*."""
    return HttpResponse(status=status)


def _header_text(text: object, *, what: str) -> str:
    """Check that *text* can be written as part of a header line."""
    if not isinstance(text, str) or "\r" in text or "\n" in text:
        msg = f"Invalid response header {what}: {text!r}"
        raise ResponseError(msg)
    return text


def format_response(response: HttpResponse) -> bytes:
    """Serialize *response* to wire-format bytes.

    Raises:
        ResponseError: If a header name or value cannot be written as
            header text.

    """
    code = int(response.status)
    parts: list[str] = [f"{RESPONSE_VERSION} {code} {status_reason(code)}", _CRLF]

    for name, value in response.headers.items():
        parts.append(f"{_header_text(name, what='name')}: {_header_text(value, what='value')}")
        parts.append(_CRLF)

    parts.append(_CRLF)
    parts.append(response.body)
    return "".join(parts).encode("utf-8")
