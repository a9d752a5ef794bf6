"""Running a CGI script — the subprocess boundary.

The runner is the only place the gateway touches the operating system's
process API.  Everything it needs is passed in (script path, body,
environment), which keeps it easy to replace with a fake in tests.

Contract:
    - The environment is **replaced**, not extended: the script sees the
      metavariables and nothing else.
    - The working directory is the script's own directory.
    - The request body is written to the script's stdin, which is then
      closed; stdout is captured in full and decoded leniently.

There is no timeout.  A script that never exits blocks the calling
worker for good; the pool size bounds how many such scripts can pile up.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from py_cgi.errors import CgiError

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class ScriptOutput:
    """What a finished script left behind.

    Attributes:
        returncode: The script's exit status.
        stdout: Everything written to standard output, as text.

    """

    returncode: int
    stdout: str


class ScriptRunner(Protocol):
    """Interface for anything that can execute a CGI script."""

    def run(self, script: Path, body: str, environ: dict[str, str]) -> ScriptOutput:
        """Run *script* with *environ*, feeding it *body* on stdin."""
        ...  # pragma: no cover


class SubprocessRunner:
    """Execute scripts as real child processes."""

    def run(self, script: Path, body: str, environ: dict[str, str]) -> ScriptOutput:
        """Spawn *script*, write *body*, and wait for it to finish.

        Raises:
            CgiError: If the script cannot be started, written to, or
                waited on.

        """
        try:
            process = subprocess.Popen(
                [str(script)],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                env=environ,
                cwd=script.parent,
            )
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            msg = f"Failed to start CGI script {script}: {e}"
            raise CgiError(msg) from e

        try:
            stdout, _ = process.communicate(body.encode("utf-8"))
        except (OSError, subprocess.SubprocessError) as e:
            process.kill()
            process.wait()
            msg = f"Failed to communicate with CGI script {script}: {e}"
            raise CgiError(msg) from e

        return ScriptOutput(
            returncode=process.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
        )
