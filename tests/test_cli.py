"""Tests for the py-cgi command-line entry point."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from py_cgi import __version__
from py_cgi.cli import build_parser, build_server, format_banner, load_config, main
from py_cgi.config import ServerConfig
from py_cgi.errors import ConfigError
from py_cgi.logging import LogLevel

CLI_PORT = 9000
ENV_PORT = 7000
CLI_WORKERS = 8


def _roots(static_root: Path, cgi_root: Path) -> list[str]:
    return ["--static-root", str(static_root), "--cgi-root", str(cgi_root)]


class TestParser:
    """Verify argument parsing."""

    def test_no_arguments_means_no_overrides(self) -> None:
        """Every option defaults to None so lower layers show through."""
        args = vars(build_parser().parse_args([]))
        assert set(args.values()) == {None}
        assert set(args) == {f.name for f in dataclasses.fields(ServerConfig)}

    def test_workers_maps_to_pool_size(self) -> None:
        """--workers sets pool_size."""
        assert build_parser().parse_args(["--workers", "2"]).pool_size == "2"

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        """--version prints the version and exits."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert __version__ in capsys.readouterr().out

    def test_bad_log_level_exits(self) -> None:
        """Only known level names are accepted."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "chatty"])


class TestLoadConfig:
    """Verify layering of defaults, environment, and options."""

    def test_options_override_environment(self, static_root: Path, cgi_root: Path) -> None:
        """A command-line option beats the matching variable."""
        config = load_config(
            ["--port", str(CLI_PORT), *_roots(static_root, cgi_root)],
            {"PY_CGI_PORT": str(ENV_PORT), "PY_CGI_POOL_SIZE": str(CLI_WORKERS)},
        )
        assert config.port == CLI_PORT
        assert config.pool_size == CLI_WORKERS

    def test_log_level_option(self, static_root: Path, cgi_root: Path) -> None:
        """--log-level is converted to a LogLevel."""
        config = load_config(["--log-level", "warning", *_roots(static_root, cgi_root)], {})
        assert config.log_level is LogLevel.WARNING

    def test_invalid_configuration_raises(self, tmp_path: Path) -> None:
        """Missing roots fail validation."""
        with pytest.raises(ConfigError):
            load_config(["--static-root", str(tmp_path / "nope")], {})


class TestBanner:
    """Verify the startup banner."""

    def test_banner_lists_settings(self, static_root: Path, cgi_root: Path) -> None:
        """The banner shows the address, workers, and both roots."""
        config = ServerConfig(port=CLI_PORT, static_root=static_root, cgi_root=cgi_root)
        banner = format_banner(config)
        assert f"127.0.0.1:{CLI_PORT}" in banner
        assert f"py-cgi v{__version__}" in banner
        assert str(static_root) in banner
        assert f"/cgi-bin -> {cgi_root}" in banner


class TestMain:
    """Verify the entry point's failure handling."""

    def test_bad_root_exits_with_status_one(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Configuration errors are reported on stderr, not raised."""
        monkeypatch.delenv("PY_CGI_STATIC_ROOT", raising=False)
        assert main(["--static-root", str(tmp_path / "nope")]) == 1
        assert capsys.readouterr().err.startswith("py-cgi: ")


class TestBuildServer:
    """Verify the logger wiring used by the console entry point."""

    def test_server_events_reach_stderr(
        self, static_root: Path, cgi_root: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Entries logged by the server are echoed to standard error."""
        config = ServerConfig(port=0, pool_size=1, static_root=static_root, cgi_root=cgi_root)
        build_server(config).shutdown()
        assert "[INFO] server: Server stopped" in capsys.readouterr().err

    def test_log_level_filters_stderr(
        self, static_root: Path, cgi_root: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Entries below the configured level are not echoed."""
        config = ServerConfig(
            port=0,
            pool_size=1,
            static_root=static_root,
            cgi_root=cgi_root,
            log_level=LogLevel.WARNING,
        )
        build_server(config).shutdown()
        assert capsys.readouterr().err == ""
