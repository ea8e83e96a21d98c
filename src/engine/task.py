# src/engine/task.py — v1
"""Task and FileTask — the units the task graph invokes.

A task first invokes its prerequisites, then runs its actions if ``needed()``.
A task runs at most once per session; ``reenable()`` clears that flag.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from assetpipe.engine.invocation_chain import EMPTY_CHAIN, InvocationChain
from assetpipe.logging.context import reset_task_context, set_task_context

if TYPE_CHECKING:
    from assetpipe.engine.application import TaskApplication

logger = logging.getLogger(__name__)

Action = Callable[["Task"], None]

# Timestamp of a file that does not exist: older than everything.
EARLY = float("-inf")


class Task:
    """A named unit of work with prerequisites and actions."""

    def __init__(
        self,
        name: str,
        application: TaskApplication,
        prerequisites: Iterable[str] = (),
        actions: Iterable[Action] = (),
    ) -> None:
        self.name = name
        self.application = application
        self.prerequisites: list[str] = [os.fspath(p) for p in prerequisites]
        self.actions: list[Action] = list(actions)
        self.already_invoked = False
        self._lock = threading.RLock()

    def enhance(
        self, prerequisites: Iterable[str] = (), action: Action | None = None
    ) -> Task:
        """Add prerequisites and an action to an existing task."""
        for prereq in prerequisites:
            prereq = os.fspath(prereq)
            if prereq not in self.prerequisites:
                self.prerequisites.append(prereq)
        if action is not None:
            self.actions.append(action)
        return self

    def invoke(self) -> None:
        """Invoke the task if needed, after its prerequisites."""
        self.invoke_with_call_chain(EMPTY_CHAIN)

    def invoke_with_call_chain(self, invocation_chain: InvocationChain) -> None:
        new_chain = invocation_chain.append(self)
        with self._lock:
            if self.already_invoked:
                return
            self.already_invoked = True
            token = set_task_context(self.name)
            try:
                self.invoke_prerequisites(new_chain)
                if self.needed():
                    self.execute()
                else:
                    logger.debug("Up to date: %s", self.name)
            finally:
                reset_task_context(token)

    def invoke_prerequisites(self, invocation_chain: InvocationChain) -> None:
        for prereq in self.prerequisites:
            self.lookup_prerequisite(prereq).invoke_with_call_chain(invocation_chain)

    def lookup_prerequisite(self, name: str) -> Task:
        return self.application[name]

    def needed(self) -> bool:
        """Plain tasks always run."""
        return True

    def timestamp(self) -> float:
        """Plain tasks are always newer than anything that depends on them."""
        return time.time_ns()

    def execute(self) -> None:
        start_ns = time.monotonic_ns()
        for action in self.actions:
            action(self)
        self.application.session.record_executed(self.name)
        logger.info(
            "Built %s in %dms",
            self.name,
            (time.monotonic_ns() - start_ns) // 1_000_000,
        )

    def reenable(self) -> None:
        self.already_invoked = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class FileTask(Task):
    """A task whose name is the path of the file it produces.

    Needed when the file is missing or older than any prerequisite.
    """

    def needed(self) -> bool:
        if not os.path.exists(self.name):
            return True
        return self._out_of_date(self.timestamp())

    def timestamp(self) -> float:
        try:
            return os.stat(self.name).st_mtime_ns
        except FileNotFoundError:
            return EARLY

    def _out_of_date(self, stamp: float) -> bool:
        return any(
            self.application[prereq].timestamp() > stamp
            for prereq in self.prerequisites
        )
