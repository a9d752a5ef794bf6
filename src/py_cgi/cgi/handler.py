"""The CGI gateway handler.

Requests under the CGI mount (``/cgi-bin/...`` by default) are mapped to
executables under the script root and answered by running them:

    1. Resolve the script under the root (404 if missing, outside, or
       not a regular file).
    2. Build the metavariable environment from the request.
    3. Run the script, feeding it the request body.
    4. Parse the script's output (500 if malformed).
    5. Convert it to an HTTP response: document, client redirect, or
       local redirect through the static handler.

Requests outside the mount are declined so the next handler in the
chain can serve them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_cgi import __version__
from py_cgi.cgi.metavariables import build_metavariables
from py_cgi.cgi.output import classify, parse_cgi_output, to_http_response
from py_cgi.cgi.runner import SubprocessRunner
from py_cgi.errors import CgiError
from py_cgi.handlers.base import canonical_root, resolve_under
from py_cgi.http.response import error_response
from py_cgi.http.status import HttpStatus
from py_cgi.logging import Logger, get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from py_cgi.cgi.runner import ScriptRunner
    from py_cgi.handlers.base import RequestHandler
    from py_cgi.http.request import HttpRequest
    from py_cgi.http.response import HttpResponse

SERVER_SOFTWARE = f"py-cgi/{__version__}"


class CgiHandler:
    """Run scripts under a script root for requests under a mount path."""

    def __init__(
        self,
        mount: str,
        script_root: str | Path,
        static_handler: RequestHandler,
        *,
        runner: ScriptRunner | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a gateway handler.

        Args:
            mount: URL prefix (without the leading slash) that selects
                CGI handling, e.g. ``"cgi-bin"``.
            script_root: Directory holding the executable scripts.
            static_handler: Handler used to answer local redirects.
            runner: How scripts are executed (real subprocesses by default).
            logger: Where events are recorded.

        Raises:
            ConfigError: If *script_root* is not an existing directory.

        """
        self._mount = mount.strip("/")
        self._root = canonical_root(script_root)
        self._static_handler = static_handler
        self._runner: ScriptRunner = runner if runner is not None else SubprocessRunner()
        self._logger = logger if logger is not None else get_logger()

    @property
    def mount(self) -> str:
        """Return the URL prefix served by this handler."""
        return self._mount

    @property
    def root(self) -> Path:
        """Return the canonical script root."""
        return self._root

    def script_name(self, path: str) -> str | None:
        """Return the script path relative to the root, or None if not mounted."""
        relative = path.removeprefix("/")
        if not self._mount:
            return relative
        if relative != self._mount and not relative.startswith(f"{self._mount}/"):
            return None
        return relative.removeprefix(self._mount).removeprefix("/")

    def handle(self, request: HttpRequest, peer: str | None) -> HttpResponse | None:
        """Run the script named by the request, or decline if not mounted."""
        name = self.script_name(request.path)
        if name is None:
            return None

        self._logger.debug(f"CGI script requested: {name!r}", source="cgi", peer=peer)
        script = resolve_under(self._root, name)
        if script is None or not script.is_file():
            self._logger.debug(f"No CGI script for {request.path}", source="cgi", peer=peer)
            return error_response(HttpStatus.NOT_FOUND)

        return self._run_script(request, peer, script)

    def _run_script(self, request: HttpRequest, peer: str | None, script: Path) -> HttpResponse:
        """Execute *script* and convert what it prints."""
        environ = build_metavariables(request, peer, software=SERVER_SOFTWARE).as_environ()
        try:
            output = self._runner.run(script, request.body, environ)
            self._logger.debug(
                f"{script.name} exited with status {output.returncode}", source="cgi", peer=peer
            )
            result = classify(parse_cgi_output(output.stdout, logger=self._logger))
        except CgiError as e:
            self._logger.error(str(e), source="cgi", peer=peer)
            return error_response(HttpStatus.INTERNAL_SERVER_ERROR)

        return to_http_response(result, self._static_handler, peer)
