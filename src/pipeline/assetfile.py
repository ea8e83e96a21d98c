# src/pipeline/assetfile.py — v1
"""Assetfile loader — evaluate configuration source into a FilePipeline.

An Assetfile is a Python script run against a small set of builder
functions:

    input("app/assets")
    output("public")
    tmpdir("tmp")

    file("app.js", ["main.js"], action=inline_imports(), dynamic=scan_imports())

Paths are relative to the directory containing the Assetfile.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from assetpipe.engine.task import Action
from assetpipe.pipeline import actions
from assetpipe.pipeline.file_pipeline import FilePipeline
from assetpipe.tasks.dynamic_file_task import Resolver

logger = logging.getLogger(__name__)


class AssetfileError(Exception):
    """Raised when an Assetfile cannot be evaluated."""


class PipelineBuilder:
    """Builder functions exposed to Assetfile code."""

    def __init__(self, base_dir: Path | str) -> None:
        self.pipeline = FilePipeline(base_dir)

    def input(self, root: str) -> None:
        self.pipeline.input_root = root

    def output(self, root: str) -> None:
        self.pipeline.output_root = root

    def tmpdir(self, path: str) -> None:
        self.pipeline.tmpdir = path

    def manifest(self, backend: str) -> None:
        if backend not in ("json", "sqlite"):
            raise AssetfileError(f"Unsupported manifest backend: {backend!r}")
        self.pipeline.manifest_backend = backend

    def file(
        self,
        output: str,
        inputs: str | Iterable[str],
        action: Action | None = None,
        dynamic: Resolver | None = None,
    ) -> None:
        if isinstance(inputs, str):
            inputs = [inputs]
        self.pipeline.add_rule(output, inputs, action or actions.concat(), dynamic)

    def namespace(self) -> dict[str, Any]:
        return {
            "__name__": "__assetfile__",
            "input": self.input,
            "output": self.output,
            "tmpdir": self.tmpdir,
            "manifest": self.manifest,
            "file": self.file,
            "concat": actions.concat,
            "copy": actions.copy,
            "scan_imports": actions.scan_imports,
            "inline_imports": actions.inline_imports,
        }


def build_pipeline(source: str, path: Path | str) -> FilePipeline:
    """Evaluate Assetfile ``source`` read from ``path``.

    Raises:
        AssetfileError: On syntax errors or errors raised by the script.
    """
    path = Path(path)
    builder = PipelineBuilder(path.parent)
    try:
        code = compile(source, str(path), "exec")
    except SyntaxError as e:
        raise AssetfileError(f"Syntax error in {path}: {e}") from e
    try:
        exec(code, builder.namespace())  # noqa: S102
    except AssetfileError:
        raise
    except Exception as e:
        raise AssetfileError(f"Error evaluating {path}: {e}") from e
    logger.debug("Assetfile %s defined %d rules", path, len(builder.pipeline.rules))
    return builder.pipeline


def load_pipeline(path: Path | str) -> FilePipeline:
    """Read and evaluate the Assetfile at ``path``."""
    path = Path(path)
    return build_pipeline(path.read_text(encoding="utf-8"), path)
