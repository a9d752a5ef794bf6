r"""CGI script output — parsing, classification, and conversion to HTTP.

A script answers by writing a small header block, a blank line, and a
body to its standard output::

    Content-Type: text/html\n
    Status: 404\n
    \n
    <h1>Nothing here</h1>

Only three header names mean anything to the gateway (matched without
regard to case): ``Content-Type``, ``Location`` and ``Status``.  Any
other header line is logged and dropped.

Every script response is exactly one of three kinds:

    - **Document** — no Location; the body is the answer.  A
      Content-Type is required, Status is optional (default 200).
    - **Local redirect** — Location is a path (starts with ``/``); the
      server answers as if the client had asked for that path.
    - **Client redirect** — Location is anything else (usually an
      absolute URL); the client gets a 302 pointing at it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, TypeAlias

from py_cgi.errors import CgiError
from py_cgi.http.headers import Headers
from py_cgi.http.request import HttpRequest, split_lines, split_target
from py_cgi.http.response import HttpResponse, error_response
from py_cgi.http.status import HttpStatus, parse_status_code
from py_cgi.logging import Logger, get_logger

if TYPE_CHECKING:
    from py_cgi.handlers.base import RequestHandler


class CgiResponseHeader(StrEnum):
    """The script response headers the gateway understands."""

    CONTENT_TYPE = "Content-Type"
    LOCATION = "Location"
    STATUS = "Status"

    @classmethod
    def lookup(cls, name: str) -> CgiResponseHeader | None:
        """Return the header matching *name* case-insensitively, or None."""
        wanted = name.strip().lower()
        for header in cls:
            if header.value.lower() == wanted:
                return header
        return None


def _empty_cgi_headers() -> dict[CgiResponseHeader, str]:
    """Return an empty header dict (typed factory for dataclass fields)."""
    return {}


@dataclass(frozen=True)
class CgiScriptResponse:
    """The parsed (but not yet interpreted) output of a script.

    Attributes:
        headers: The recognised headers, keyed by name.
        body: Everything after the blank line, line breaks removed.

    """

    headers: dict[CgiResponseHeader, str] = field(default_factory=_empty_cgi_headers)
    body: str = ""


@dataclass(frozen=True)
class DocumentResult:
    """A script response that supplies the content itself."""

    status: int
    content_type: str
    body: str


@dataclass(frozen=True)
class ClientRedirect:
    """A script response sending the client elsewhere with a 302."""

    location: str


@dataclass(frozen=True)
class LocalRedirect:
    """A script response naming another path on this server."""

    path: str


CgiResult: TypeAlias = DocumentResult | ClientRedirect | LocalRedirect


def parse_cgi_output(output: str, *, logger: Logger | None = None) -> CgiScriptResponse:
    """Split script output into recognised headers and a body.

    Raises:
        CgiError: If the header block has no terminating blank line or
            contains a line without a colon.

    """
    log = logger if logger is not None else get_logger()
    lines = iter(split_lines(output))
    headers: dict[CgiResponseHeader, str] = {}

    for line in lines:
        if not line:
            break
        name, sep, value = line.partition(":")
        if not sep:
            msg = f"Invalid CGI header line: {line!r}"
            raise CgiError(msg)
        header = CgiResponseHeader.lookup(name)
        if header is None:
            log.debug(f"Dropping unrecognised CGI header: {name!r}", source="cgi")
            continue
        headers[header] = value.strip()
    else:
        msg = "CGI output has no blank line after its headers"
        raise CgiError(msg)

    return CgiScriptResponse(headers=headers, body="".join(lines))


def classify(response: CgiScriptResponse) -> CgiResult:
    """Decide which of the three response kinds *response* is.

    Raises:
        CgiError: If a document response has an invalid Status or no
            Content-Type.

    """
    location = response.headers.get(CgiResponseHeader.LOCATION)
    if location is not None:
        if location.startswith("/"):
            return LocalRedirect(path=location)
        return ClientRedirect(location=location)

    status_text = response.headers.get(CgiResponseHeader.STATUS)
    try:
        status = HttpStatus.OK if status_text is None else parse_status_code(status_text)
    except ValueError as e:
        msg = f"Invalid CGI Status header: {status_text!r}"
        raise CgiError(msg) from e

    content_type = response.headers.get(CgiResponseHeader.CONTENT_TYPE)
    if content_type is None:
        msg = "CGI document response has no Content-Type"
        raise CgiError(msg)

    return DocumentResult(status=status, content_type=content_type, body=response.body)


def to_http_response(
    result: CgiResult,
    static_handler: RequestHandler,
    peer: str | None,
) -> HttpResponse:
    """Turn a classified script response into the HTTP response to send.

    Local redirects go straight to *static_handler* as a fresh GET,
    bypassing the dispatch chain.
    """
    match result:
        case LocalRedirect(path=location):
            path, query = split_target(location)
            redirected = HttpRequest(method="GET", path=path, query=query)
            response = static_handler.handle(redirected, peer)
            if response is None:
                return error_response(HttpStatus.INTERNAL_SERVER_ERROR)
            return response
        case ClientRedirect(location=location):
            return HttpResponse(status=HttpStatus.FOUND, headers=Headers({"location": location}))
        case DocumentResult(status=status, content_type=content_type, body=body):
            return HttpResponse(
                status=status,
                headers=Headers({"content-type": content_type}),
                body=body,
            )
