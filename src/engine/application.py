# src/engine/application.py — v1
"""Task application — registry of tasks and owner of the build session.

The interface the rest of the system relies on is deliberately small:
``lookup(name)``, ``app[name]`` (lookup or synthesize a file task),
``invoke(name)`` and the invocation chain each task carries.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable
from typing import TypeVar

import networkx as nx

from assetpipe.engine.dag_builder import ExecutionPlan, build_dag, build_graph
from assetpipe.engine.session import BuildSession
from assetpipe.engine.task import Action, FileTask, Task
from assetpipe.manifest.base_manifest_store import BaseManifestStore
from assetpipe.manifest.models import Manifest

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Task)


class TaskNotFoundError(Exception):
    """Raised when a prerequisite is neither a task nor an existing file."""


class TaskApplication:
    """Registry of tasks keyed by name."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._lock = threading.RLock()
        self.session = BuildSession()

    @property
    def tasks(self) -> dict[str, Task]:
        """Return mapping of task name -> task."""
        with self._lock:
            return dict(self._tasks)

    @property
    def task_names(self) -> list[str]:
        return sorted(self._tasks)

    def define_task(
        self,
        task_class: type[T],
        name: str,
        prerequisites: Iterable[str] = (),
        action: Action | None = None,
        **kwargs: object,
    ) -> T:
        """Define a task, or enhance it if a task of that name exists.

        Extra keyword arguments are passed to the constructor and only apply
        when the task is created.
        """
        name = os.fspath(name)
        with self._lock:
            existing = self._tasks.get(name)
            if existing is not None:
                if not isinstance(existing, task_class):
                    raise TypeError(
                        f"Task '{name}' already defined as {type(existing).__name__}"
                    )
                existing.enhance(prerequisites, action)
                return existing
            task = task_class(
                name,
                self,
                prerequisites=prerequisites,
                actions=[action] if action is not None else [],
                **kwargs,
            )
            self._tasks[name] = task
            return task

    def lookup(self, name: str) -> Task | None:
        """Return the task called ``name`` or None."""
        with self._lock:
            return self._tasks.get(os.fspath(name))

    def __getitem__(self, name: str) -> Task:
        task = self.lookup(name)
        if task is not None:
            return task
        if os.path.exists(name):
            return self.define_task(FileTask, name)
        raise TaskNotFoundError(f"Don't know how to build task '{name}'")

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def invoke(self, name: str) -> None:
        self[name].invoke()

    def begin_session(
        self,
        last_manifest: Manifest | None = None,
        store: BaseManifestStore | None = None,
    ) -> BuildSession:
        """Start a new session and re-enable every task."""
        with self._lock:
            self.session = BuildSession(
                last_manifest=last_manifest if last_manifest is not None else Manifest(),
                store=store,
            )
            for task in self._tasks.values():
                task.reenable()
        logger.debug("Session %s started", self.session.session_id)
        return self.session

    def dependency_map(self, names: Iterable[str] | None = None) -> dict[str, list[str]]:
        """Return name -> static prerequisites for ``names`` (default: all tasks)."""
        with self._lock:
            selected = self._tasks if names is None else {
                n: self._tasks[n] for n in names if n in self._tasks
            }
            return {name: list(task.prerequisites) for name, task in selected.items()}

    def build_graph(self) -> nx.DiGraph:
        return build_graph(self.dependency_map())

    def execution_plan(self, names: Iterable[str] | None = None) -> ExecutionPlan:
        return build_dag(self.dependency_map(names))
