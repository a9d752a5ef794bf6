"""HTTP subsystem — requests, responses, headers, and status codes.

Re-exports public symbols so callers can write::

    from py_cgi.http import HttpRequest, HttpResponse, parse_request
"""

from py_cgi.http.headers import Headers
from py_cgi.http.request import (
    BUFFER_SIZE,
    HttpRequest,
    HttpVersion,
    Readable,
    parse_request,
    read_request,
    split_lines,
    split_target,
)
from py_cgi.http.response import (
    RESPONSE_VERSION,
    HttpResponse,
    error_response,
    format_response,
)
from py_cgi.http.status import HttpStatus, parse_status_code, status_reason

__all__ = [
    "BUFFER_SIZE",
    "RESPONSE_VERSION",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "HttpStatus",
    "HttpVersion",
    "Readable",
    "error_response",
    "format_response",
    "parse_request",
    "parse_status_code",
    "read_request",
    "split_lines",
    "split_target",
    "status_reason",
]
