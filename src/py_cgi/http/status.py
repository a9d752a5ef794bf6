"""HTTP status codes and their reason phrases.

The status line of every response carries a three-digit code and a
short reason phrase (``200 OK``, ``404 Not Found``).  Scripts may send
any code in the 100–999 range; codes outside the standard table are
written with an empty reason phrase.
"""

from enum import IntEnum

MIN_STATUS_CODE = 100
MAX_STATUS_CODE = 999


class HttpStatus(IntEnum):
    """The status codes the server produces itself."""

    OK = 200
    FOUND = 302
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    PAYLOAD_TOO_LARGE = 413
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Return the standard reason phrase for this code."""
        return status_reason(self)


_REASON_PHRASES: dict[int, str] = {
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",
    103: "Early Hints",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    207: "Multi-Status",
    208: "Already Reported",
    226: "IM Used",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    308: "Permanent Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Payload Too Large",
    414: "URI Too Long",
    415: "Unsupported Media Type",
    416: "Range Not Satisfiable",
    417: "Expectation Failed",
    418: "I'm a teapot",
    421: "Misdirected Request",
    422: "Unprocessable Entity",
    423: "Locked",
    424: "Failed Dependency",
    426: "Upgrade Required",
    428: "Precondition Required",
    429: "Too Many Requests",
    431: "Request Header Fields Too Large",
    451: "Unavailable For Legal Reasons",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
    506: "Variant Also Negotiates",
    507: "Insufficient Storage",
    508: "Loop Detected",
    510: "Not Extended",
    511: "Network Authentication Required",
}


def status_reason(code: int) -> str:
    """Return the standard reason phrase for *code*, or ``""`` if unknown."""
    return _REASON_PHRASES.get(int(code), "")


def parse_status_code(text: str) -> int:
    """Parse a status code such as ``"404"`` or ``"404 Not Found"``.

    Only the first token is considered; it must be a three-digit
    number in the 100–999 range.

    Raises:
        ValueError: If *text* does not start with a valid status code.

    """
    token = text.strip().split(" ", 1)[0]
    if len(token) != 3 or not (token.isascii() and token.isdigit()):  # noqa: PLR2004
        msg = f"Invalid status code: {text!r}"
        raise ValueError(msg)
    code = int(token)
    if not MIN_STATUS_CODE <= code <= MAX_STATUS_CODE:
        msg = f"Status code out of range: {code}"
        raise ValueError(msg)
    return code
