"""Command-line entry point — ``py-cgi``.

Reads the configuration (defaults, then ``PY_CGI_*`` environment
variables, then command-line options), validates it, prints a short
banner, and serves until interrupted with Ctrl+C.

The helpers (``build_parser``, ``load_config``, ``format_banner``) are
pure and testable.  ``build_server`` wires the logger, handlers and
listener.  ``main()`` is the I/O entrypoint.
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

from py_cgi import __version__
from py_cgi.config import ServerConfig, build_chain
from py_cgi.errors import ConfigError
from py_cgi.logging import Logger, LogLevel, stderr_sink
from py_cgi.server.listener import Server

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

_BANNER_WIDTH = 38


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``py-cgi`` command."""
    parser = argparse.ArgumentParser(
        prog="py-cgi",
        description="Serve static files and CGI scripts over HTTP.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--host", help="interface to bind (default 127.0.0.1)")
    parser.add_argument("--port", help="port to bind (default 8080, 0 for any)")
    parser.add_argument("--workers", dest="pool_size", help="worker threads (default 4)")
    parser.add_argument("--static-root", help="static file directory (default public_html)")
    parser.add_argument("--cgi-root", help="CGI script directory (default cgi-bin)")
    parser.add_argument("--cgi-mount", help="URL prefix for CGI scripts (default cgi-bin)")
    parser.add_argument(
        "--log-level",
        choices=[level.name.lower() for level in LogLevel],
        help="minimum log level (default info)",
    )
    return parser


def load_config(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Combine defaults, environment, and command-line options.

    Raises:
        ConfigError: If any value is unusable.

    """
    args = build_parser().parse_args(argv)
    return ServerConfig.from_env(environ).with_overrides(**vars(args)).validate()


def format_banner(config: ServerConfig) -> str:
    """Format the startup banner for *config*."""
    border = "=" * _BANNER_WIDTH
    lines = [
        border,
        f"  py-cgi v{__version__}",
        border,
        f"  listen      {config.host}:{config.port}",
        f"  workers     {config.pool_size}",
        f"  static      {config.static_root}",
        f"  cgi         /{config.cgi_mount} -> {config.cgi_root}",
        border,
    ]
    return "\n".join(lines)


def build_server(config: ServerConfig) -> Server:
    """Wire a server for *config* that logs to standard error.

    Raises:
        ConfigError: If a root directory does not exist.
        OSError: If the address cannot be bound.

    """
    logger = Logger(min_level=config.log_level, sink=stderr_sink)
    chain = build_chain(config, logger=logger)
    return Server(
        chain,
        host=config.host,
        port=config.port,
        pool_size=config.pool_size,
        logger=logger,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the server until interrupted.

    This is the ``py-cgi`` console entry point.

    Returns:
        The process exit status.

    """
    try:
        config = load_config(argv)
        server = build_server(config)
    except (ConfigError, OSError) as e:
        print(f"py-cgi: {e}", file=sys.stderr)  # noqa: T201
        return 1

    print(format_banner(config))  # noqa: T201
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nShutting down.")  # noqa: T201
    return 0
