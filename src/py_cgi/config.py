"""Server configuration — defaults, environment overrides, validation.

Settings come from three places, highest priority first:

    1. Command-line options (see ``py_cgi.cli``).
    2. ``PY_CGI_*`` environment variables.
    3. The defaults on ``ServerConfig``.

The configuration is validated once at startup so a bad root directory
or pool size fails immediately rather than on the first request.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from py_cgi.cgi.handler import CgiHandler
from py_cgi.errors import ConfigError
from py_cgi.handlers.chain import HandlerChain
from py_cgi.handlers.static import StaticHandler
from py_cgi.logging import LogLevel

if TYPE_CHECKING:
    from collections.abc import Mapping

    from py_cgi.logging import Logger

ENV_PREFIX = "PY_CGI_"
MAX_PORT = 65535


@dataclass(frozen=True)
class ServerConfig:
    """Everything needed to start a server.

    Attributes:
        host: Interface to bind.
        port: TCP port to bind (0 picks a free port).
        pool_size: Number of worker threads.
        static_root: Directory of static files.
        cgi_root: Directory of executable CGI scripts.
        cgi_mount: URL prefix (without slashes) that selects CGI handling.
        log_level: Minimum level of log entries to keep.

    """

    host: str = "127.0.0.1"
    port: int = 8080
    pool_size: int = 4
    static_root: Path = Path("public_html")
    cgi_root: Path = Path("cgi-bin")
    cgi_mount: str = "cgi-bin"
    log_level: LogLevel = LogLevel.INFO

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerConfig:
        """Build a configuration from ``PY_CGI_*`` variables.

        Args:
            environ: Variables to read (defaults to ``os.environ``).

        Raises:
            ConfigError: If a variable holds an unusable value.

        """
        env = os.environ if environ is None else environ
        return cls().with_overrides(
            host=env.get(f"{ENV_PREFIX}HOST"),
            port=env.get(f"{ENV_PREFIX}PORT"),
            pool_size=env.get(f"{ENV_PREFIX}POOL_SIZE"),
            static_root=env.get(f"{ENV_PREFIX}STATIC_ROOT"),
            cgi_root=env.get(f"{ENV_PREFIX}CGI_ROOT"),
            cgi_mount=env.get(f"{ENV_PREFIX}CGI_MOUNT"),
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL"),
        )

    def with_overrides(self, **values: object) -> ServerConfig:
        """Return a copy with every non-None value in *values* applied.

        String values are converted to the field's type.

        Raises:
            ConfigError: If a name is unknown or a value cannot be converted.

        """
        names = {f.name for f in dataclasses.fields(self)}
        changes: dict[str, object] = {}
        for name, value in values.items():
            if name not in names:
                msg = f"Unknown configuration setting: {name}"
                raise ConfigError(msg)
            if value is not None:
                changes[name] = _convert(name, value)
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]

    def validate(self) -> ServerConfig:
        """Check the settings and return self.

        Raises:
            ConfigError: If any setting is out of range or a root is missing.

        """
        if not 0 <= self.port <= MAX_PORT:
            msg = f"Port out of range: {self.port}"
            raise ConfigError(msg)
        if self.pool_size < 1:
            msg = f"Pool size must be at least 1, got {self.pool_size}"
            raise ConfigError(msg)
        for label, root in (("static", self.static_root), ("CGI", self.cgi_root)):
            if not root.is_dir():
                msg = f"The {label} root is not a directory: {root}"
                raise ConfigError(msg)
        return self


def _convert(name: str, value: object) -> object:
    """Convert a raw override to the type of the setting *name*."""
    if not isinstance(value, str):
        return value
    try:
        match name:
            case "port" | "pool_size":
                return int(value)
            case "static_root" | "cgi_root":
                return Path(value)
            case "log_level":
                return LogLevel.from_name(value)
            case "cgi_mount":
                return value.strip("/")
            case _:
                return value
    except ValueError as e:
        msg = f"Invalid value for {name}: {value!r}"
        raise ConfigError(msg) from e


def build_chain(config: ServerConfig, *, logger: Logger | None = None) -> HandlerChain:
    """Wire the handlers for *config*: the CGI gateway first, then static files.

    Raises:
        ConfigError: If a root directory does not exist.

    """
    static = StaticHandler(config.static_root, logger=logger)
    cgi = CgiHandler(config.cgi_mount, config.cgi_root, static, logger=logger)
    return HandlerChain([cgi, static], logger=logger)
