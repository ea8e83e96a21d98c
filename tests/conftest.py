# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides file helpers with explicit mtimes, task applications and
Assetfile sources. All I/O happens under pytest's tmp_path.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from assetpipe.engine.application import TaskApplication
from assetpipe.logging.context import clear_context

# One second in nanoseconds; base for deterministic mtimes.
SECOND = 1_000_000_000
T0 = 1_700_000_000 * SECOND


def write_file(path: Path, content: str = "", mtime_ns: int | None = None) -> Path:
    """Write ``content`` to ``path`` and optionally pin its mtime."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if mtime_ns is not None:
        os.utime(path, ns=(mtime_ns, mtime_ns))
    return path


def set_mtime(path: Path, mtime_ns: int) -> None:
    os.utime(path, ns=(mtime_ns, mtime_ns))


def mtime_ns(path: Path | str) -> int:
    return os.stat(path).st_mtime_ns


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


# === FIXTURES: Files ===


class FileHelper:
    """File helpers rooted at tmp_path, with deterministic mtimes."""

    SECOND = SECOND
    T0 = T0

    def __init__(self, root: Path) -> None:
        self.root = root

    def write(self, relpath: str, content: str = "", mtime: int | None = None) -> Path:
        return write_file(self.root / relpath, content, mtime)

    def set_mtime(self, path: Path | str, mtime: int) -> None:
        set_mtime(Path(path), mtime)

    def mtime(self, path: Path | str) -> int:
        return mtime_ns(path)


@pytest.fixture
def files(tmp_path: Path) -> FileHelper:
    return FileHelper(tmp_path)


# === FIXTURES: Engine ===


@pytest.fixture
def app() -> TaskApplication:
    """Empty task application with a fresh session."""
    return TaskApplication()


# === FIXTURES: Assetfiles ===

IMPORT_ASSETFILE = """\
input("app")
output("public")
tmpdir("tmp")

file("out.js", ["in.js"], action=inline_imports(), dynamic=scan_imports())
"""

CONCAT_ASSETFILE = """\
input("app")
output("public")
tmpdir("tmp")

file("javascripts/application.js", ["jquery.js", "ember.js"], action=concat())
"""


@pytest.fixture
def import_project_dir(tmp_path: Path) -> Path:
    """Project dir with an Assetfile whose single task follows @import lines."""
    write_file(tmp_path / "Assetfile", IMPORT_ASSETFILE)
    write_file(tmp_path / "app" / "in.js", '@import "x.js"\nmain();\n', T0)
    write_file(tmp_path / "app" / "x.js", "lib();\n", T0)
    return tmp_path


@pytest.fixture
def concat_project_dir(tmp_path: Path) -> Path:
    """Project dir with an Assetfile concatenating two inputs."""
    write_file(tmp_path / "Assetfile", CONCAT_ASSETFILE)
    write_file(tmp_path / "app" / "jquery.js", "var jQuery = {};", T0)
    write_file(tmp_path / "app" / "ember.js", "var Ember = {};", T0)
    return tmp_path
