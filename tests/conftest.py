"""Shared fixtures: document roots and executable CGI scripts on disk."""

from __future__ import annotations

import stat
from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import pytest

from py_cgi.logging import Logger

ScriptFactory: TypeAlias = Callable[[str, str], Path]


@pytest.fixture
def logger() -> Logger:
    """Return a private logger that keeps every entry."""
    return Logger()


@pytest.fixture
def static_root(tmp_path: Path) -> Path:
    """Create a document root with an index page and a nested file."""
    root = tmp_path / "public_html"
    root.mkdir()
    (root / "index.html").write_text("<h1>Home</h1>", encoding="utf-8")
    (root / "other").write_text("other page", encoding="utf-8")
    (root / "docs").mkdir()
    (root / "docs" / "guide.txt").write_text("read me", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("top secret", encoding="utf-8")
    return root


@pytest.fixture
def cgi_root(tmp_path: Path) -> Path:
    """Create an empty CGI script directory."""
    root = tmp_path / "cgi-bin"
    root.mkdir()
    return root


@pytest.fixture
def make_script(cgi_root: Path) -> ScriptFactory:
    """Return a factory writing executable ``/bin/sh`` scripts into the CGI root."""

    def _make(name: str, body: str) -> Path:
        script = cgi_root / name
        script.parent.mkdir(parents=True, exist_ok=True)
        script.write_text(f"#!/bin/sh\n{body}", encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make
