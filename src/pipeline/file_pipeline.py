# src/pipeline/file_pipeline.py — v1
"""File pipeline — a set of file rules turned into a task graph.

Each invocation is one build session: the last-run manifest is loaded from
the pipeline's temp subdirectory, every rule task is invoked in static
topological order, and the current manifest is written back.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from assetpipe.engine.application import TaskApplication
from assetpipe.engine.dag_builder import ExecutionPlan
from assetpipe.engine.task import Action
from assetpipe.manifest.store_factory import create_manifest_store
from assetpipe.tasks.dynamic_file_task import DynamicFileTask, Resolver

logger = logging.getLogger(__name__)

DEFAULT_INPUT_ROOT = "app"
DEFAULT_OUTPUT_ROOT = "public"
DEFAULT_TMPDIR = "tmp"
DEFAULT_TMPSUBDIR = "pipeline"


@dataclass
class FileRule:
    """One output file built from input files."""

    output: str
    inputs: list[str]
    action: Action
    dynamic: Resolver | None = None


@dataclass
class BuildResult:
    """Result of one pipeline invocation."""

    executed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def up_to_date(self) -> bool:
        return not self.executed


class FilePipeline:
    """Rules plus the directories they read from and write to.

    Relative roots are resolved against ``base_dir``; rule inputs are
    relative to the input root, rule outputs to the output root.
    """

    def __init__(
        self,
        base_dir: Path | str = ".",
        input_root: str = DEFAULT_INPUT_ROOT,
        output_root: str = DEFAULT_OUTPUT_ROOT,
        tmpdir: str = DEFAULT_TMPDIR,
        manifest_backend: str = "json",
    ) -> None:
        self.base_dir = Path(base_dir).resolve()
        self.input_root = input_root
        self.output_root = output_root
        self.tmpdir = tmpdir
        self.tmpsubdir = DEFAULT_TMPSUBDIR
        self.manifest_backend = manifest_backend
        self.rules: list[FileRule] = []
        self._application: TaskApplication | None = None
        self._invoke_lock = threading.RLock()

    # --- Paths ---

    @property
    def input_root(self) -> Path:
        return self._input_root

    @input_root.setter
    def input_root(self, value: Path | str) -> None:
        self._input_root = self._resolve(value)

    @property
    def output_root(self) -> Path:
        return self._output_root

    @output_root.setter
    def output_root(self, value: Path | str) -> None:
        self._output_root = self._resolve(value)

    @property
    def tmpdir(self) -> Path:
        """Root under which temp subdirectories live."""
        return self._tmpdir

    @tmpdir.setter
    def tmpdir(self, value: Path | str) -> None:
        self._tmpdir = self._resolve(value)

    @property
    def tmp_path(self) -> Path:
        """The current temp subdirectory; holds the manifest."""
        return self.tmpdir / self.tmpsubdir

    def _resolve(self, value: Path | str) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.base_dir / path

    # --- Rules ---

    def add_rule(
        self,
        output: str,
        inputs: Iterable[str],
        action: Action,
        dynamic: Resolver | None = None,
    ) -> FileRule:
        rule = FileRule(output=output, inputs=list(inputs), action=action, dynamic=dynamic)
        self.rules.append(rule)
        self._application = None
        return rule

    @property
    def output_files(self) -> list[Path]:
        """Absolute paths of every declared output."""
        return [self.output_root / rule.output for rule in self.rules]

    # --- Task graph ---

    @property
    def application(self) -> TaskApplication:
        if self._application is None:
            self._application = self._define_tasks()
        return self._application

    def _define_tasks(self) -> TaskApplication:
        app = TaskApplication()
        for rule in self.rules:
            app.define_task(
                DynamicFileTask,
                str(self.output_root / rule.output),
                prerequisites=[str(self.input_root / p) for p in rule.inputs],
                action=rule.action,
                dynamic=rule.dynamic,
            )
        logger.debug("Defined %d tasks", len(self.rules))
        return app

    def execution_plan(self) -> ExecutionPlan:
        return self.application.execution_plan(str(p) for p in self.output_files)

    # --- Invocation ---

    def invoke(self) -> BuildResult:
        """Run a build session over the current task graph."""
        with self._invoke_lock:
            start_ns = time.monotonic_ns()
            app = self.application
            plan = self.execution_plan()
            store = create_manifest_store(self.tmp_path, self.manifest_backend)
            try:
                session = app.begin_session(store.load(), store=store)
                for name in plan.flat_order:
                    app.invoke(name)
                store.flush(session.manifest)
            finally:
                close = getattr(store, "close", None)
                if close is not None:
                    close()

            executed = [n for n in plan.flat_order if n in session.executed]
            result = BuildResult(
                executed=executed,
                skipped=[n for n in plan.flat_order if n not in executed],
                duration_ms=(time.monotonic_ns() - start_ns) // 1_000_000,
            )
            logger.info(
                "Build complete: %d built, %d up to date, %dms",
                len(result.executed),
                len(result.skipped),
                result.duration_ms,
            )
            return result

    def invoke_clean(self) -> BuildResult:
        """Discard the task graph, redefine it from the rules and invoke."""
        with self._invoke_lock:
            self._application = None
            return self.invoke()
