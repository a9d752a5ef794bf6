"""Server subsystem — connection pipeline, worker pool, and listener.

Re-exports public symbols so callers can write::

    from py_cgi.server import Server, WorkerPool
"""

from py_cgi.server.connection import Connection, ConnectionPipeline, peer_address
from py_cgi.server.listener import LISTEN_BACKLOG, Server
from py_cgi.server.pool import Job, WorkerPool

__all__ = [
    "LISTEN_BACKLOG",
    "Connection",
    "ConnectionPipeline",
    "Job",
    "Server",
    "WorkerPool",
    "peer_address",
]
