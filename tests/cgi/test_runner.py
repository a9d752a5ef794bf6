"""Tests for the subprocess script runner.

These run real ``/bin/sh`` scripts, so they check what the child
process actually sees: its environment, working directory and stdin.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import pytest

from py_cgi.cgi.runner import ScriptOutput, SubprocessRunner
from py_cgi.errors import CgiError

MakeScript: TypeAlias = Callable[[str, str], Path]

EXIT_CODE = 3


class TestSubprocessRunner:
    """Verify the child process contract."""

    def test_captures_stdout_and_exit_status(self, make_script: MakeScript) -> None:
        """Everything printed is returned along with the exit status."""
        script = make_script("exit3", f"printf 'out'\nexit {EXIT_CODE}\n")
        output = SubprocessRunner().run(script, "", {})
        assert output == ScriptOutput(returncode=EXIT_CODE, stdout="out")

    def test_environment_is_replaced(self, make_script: MakeScript) -> None:
        """The script sees only the variables it was given."""
        script = make_script("env", "printf '%s|%s' \"$QUERY_STRING\" \"${HOME:-unset}\"\n")
        output = SubprocessRunner().run(script, "", {"QUERY_STRING": "a=1"})
        assert output.stdout == "a=1|unset"

    def test_body_is_written_to_stdin(self, make_script: MakeScript) -> None:
        """The request body arrives on stdin and stdin is then closed."""
        script = make_script("stdin", "IFS= read -r line || true\nprintf '[%s]' \"$line\"\n")
        output = SubprocessRunner().run(script, "name=value", {})
        assert output.stdout == "[name=value]"

    def test_working_directory_is_script_directory(self, make_script: MakeScript) -> None:
        """The script runs from its own directory."""
        script = make_script("nested/dir/pwd", "pwd\n")
        output = SubprocessRunner().run(script, "", {})
        assert output.stdout.strip() == str(script.parent.resolve())

    def test_invalid_utf8_output_is_replaced(self, make_script: MakeScript) -> None:
        """Undecodable bytes become replacement characters, not an error."""
        script = make_script("bytes", "printf 'ok\\377'\n")
        output = SubprocessRunner().run(script, "", {})
        assert output.stdout == "ok�"

    def test_non_executable_script_is_cgi_error(self, cgi_root: Path) -> None:
        """A file without execute permission cannot be started."""
        plain = cgi_root / "plain.txt"
        plain.write_text("not a program", encoding="utf-8")
        with pytest.raises(CgiError, match="Failed to start"):
            SubprocessRunner().run(plain, "", {})

    def test_missing_script_is_cgi_error(self, cgi_root: Path) -> None:
        """A path that does not exist cannot be started."""
        with pytest.raises(CgiError):
            SubprocessRunner().run(cgi_root / "ghost", "", {})

    def test_nul_in_environment_is_cgi_error(self, make_script: MakeScript) -> None:
        """An environment value with a NUL byte cannot be passed to a process."""
        script = make_script("hello", "printf 'hi'\n")
        with pytest.raises(CgiError, match="Failed to start"):
            SubprocessRunner().run(script, "", {"QUERY_STRING": "a\x00b"})
