"""Request handlers and the dispatch chain.

Re-exports public symbols so callers can write::

    from py_cgi.handlers import HandlerChain, StaticHandler
"""

from py_cgi.handlers.base import RequestHandler, canonical_root, resolve_under
from py_cgi.handlers.chain import HandlerChain
from py_cgi.handlers.static import INDEX_FILE, StaticHandler

__all__ = [
    "INDEX_FILE",
    "HandlerChain",
    "RequestHandler",
    "StaticHandler",
    "canonical_root",
    "resolve_under",
]
