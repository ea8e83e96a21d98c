# src/tasks/dynamic_file_task.py — v1
"""File task with dynamic dependencies.

A plain FileTask only knows the prerequisites declared before the build
starts. A DynamicFileTask also accepts a resolver that returns additional
dependencies once the static prerequisites are up to date, typically by
reading and parsing an input file:

    /* app.css */
    @import "reset.css";

Resolving can be expensive, so the result is recorded in the manifest
together with the dependency and output mtimes. On the next run the
recorded list is reused as long as the output file still carries the mtime
recorded for it, and the resolver is not called at all.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from assetpipe.engine.invocation_chain import InvocationChain
from assetpipe.engine.task import Action, FileTask
from assetpipe.manifest.models import ManifestEntry

if TYPE_CHECKING:
    from assetpipe.engine.application import TaskApplication

logger = logging.getLogger(__name__)

Resolver = Callable[["DynamicFileTask"], Iterable[str]]


def mtime_or_now(path: str) -> int:
    """Return the file's mtime in ns, or the current time if it is not a file."""
    if os.path.isfile(path):
        return os.stat(path).st_mtime_ns
    return time.time_ns()


class DynamicFileTask(FileTask):
    """FileTask whose dependencies may be discovered at build time."""

    def __init__(
        self,
        name: str,
        application: TaskApplication,
        prerequisites: Iterable[str] = (),
        actions: Iterable[Action] = (),
        dynamic: Resolver | None = None,
    ) -> None:
        super().__init__(name, application, prerequisites, actions)
        self._dynamic = dynamic

    # --- Resolver ---

    def dynamic(self, resolver: Resolver) -> DynamicFileTask:
        """Set the resolver. It may assume all static prerequisites are up to date."""
        self._dynamic = resolver
        return self

    @property
    def has_dynamic_block(self) -> bool:
        return self._dynamic is not None

    def invoke_dynamic_block(self) -> list[str]:
        """Call the resolver. Exceptions propagate to the caller."""
        if self._dynamic is None:
            raise RuntimeError(f"Task '{self.name}' has no dynamic dependency resolver")
        logger.debug("Resolving dynamic dependencies of %s", self.name)
        return [os.fspath(dep) for dep in self._dynamic(self)]

    # --- Manifest access ---

    @property
    def last_manifest_entry(self) -> ManifestEntry | None:
        """Entry from the previous run, as loaded from the manifest store."""
        return self.application.session.last_entry(self.name)

    @property
    def manifest_entry(self) -> ManifestEntry | None:
        """Entry for the current run, persisted once the task has run."""
        return self.application.session.entry(self.name)

    @manifest_entry.setter
    def manifest_entry(self, entry: ManifestEntry) -> None:
        self.application.session.set_entry(self.name, entry)

    # --- Staleness ---

    def needed(self) -> bool:
        """Also needed without a previous manifest entry or when a recorded
        dynamic dependency is gone or has been modified since."""
        if super().needed():
            return True

        if not self.has_dynamic_block:
            return False

        last = self.last_manifest_entry
        if last is None:
            return True

        for dep, recorded in last.deps.items():
            try:
                current = os.stat(dep).st_mtime_ns
            except FileNotFoundError:
                return True
            if current > recorded:
                return True

        return False

    def dynamic_prerequisites(self) -> list[str]:
        """Paths of this task's dynamic dependencies, computed once per session."""
        return self.application.session.memoize_deps(
            self.name, self._resolve_dynamic_prerequisites
        )

    def _resolve_dynamic_prerequisites(self) -> list[str]:
        if not self.has_dynamic_block:
            return []

        last = self.last_manifest_entry
        recorded_mtime = None
        if last is not None and not self.needed():
            recorded_mtime = last.mtime

        # Output untouched since the last run: reuse its dependency list.
        if recorded_mtime is not None and os.path.exists(self.name):
            if os.stat(self.name).st_mtime_ns == recorded_mtime:
                logger.debug("Reusing manifest dependencies of %s", self.name)
                return last.dep_paths  # type: ignore[union-attr]

        return self.invoke_dynamic_block()

    # --- Invocation ---

    def invoke_prerequisites(self, invocation_chain: InvocationChain) -> None:
        super().invoke_prerequisites(invocation_chain)

        if not self.has_dynamic_block:
            return

        dynamics = self.dynamic_prerequisites()

        for prereq in dynamics:
            self.lookup_prerequisite(prereq).invoke_with_call_chain(invocation_chain)

        # Timestamps are taken now that the dependencies are up to date.
        self.manifest_entry = ManifestEntry(
            deps={dep: mtime_or_now(dep) for dep in dynamics}
        )

    def invoke_with_call_chain(self, invocation_chain: InvocationChain) -> None:
        super().invoke_with_call_chain(invocation_chain)
        if not self.has_dynamic_block:
            return
        with self._lock:
            self.application.session.finalize_entry(self.name, mtime_or_now(self.name))
