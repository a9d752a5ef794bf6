"""CGI gateway — metavariables, script execution, and output conversion.

Re-exports public symbols so callers can write::

    from py_cgi.cgi import CgiHandler, parse_cgi_output
"""

from py_cgi.cgi.handler import SERVER_SOFTWARE, CgiHandler
from py_cgi.cgi.metavariables import (
    DEFAULT_CONTENT_TYPE,
    GATEWAY_INTERFACE,
    CgiMetavariable,
    MetavariableMap,
    build_metavariables,
)
from py_cgi.cgi.output import (
    CgiResponseHeader,
    CgiResult,
    CgiScriptResponse,
    ClientRedirect,
    DocumentResult,
    LocalRedirect,
    classify,
    parse_cgi_output,
    to_http_response,
)
from py_cgi.cgi.runner import ScriptOutput, ScriptRunner, SubprocessRunner

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "GATEWAY_INTERFACE",
    "SERVER_SOFTWARE",
    "CgiHandler",
    "CgiMetavariable",
    "CgiResponseHeader",
    "CgiResult",
    "CgiScriptResponse",
    "ClientRedirect",
    "DocumentResult",
    "LocalRedirect",
    "MetavariableMap",
    "ScriptOutput",
    "ScriptRunner",
    "SubprocessRunner",
    "build_metavariables",
    "classify",
    "parse_cgi_output",
    "to_http_response",
]
