# src/engine/invocation_chain.py — v1
"""Invocation chain — the active stack of task invocations.

Every prerequisite, static or dynamic, is invoked with the chain of its
dependents, so a task that reappears in its own chain is a cycle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from assetpipe.engine.task import Task


class CycleError(Exception):
    """Raised when a dependency cycle is detected."""


class InvocationChain:
    """Immutable linked list of task names, newest last."""

    __slots__ = ("_name", "_parent")

    def __init__(self, name: str | None = None, parent: InvocationChain | None = None) -> None:
        self._name = name
        self._parent = parent

    def append(self, task: Task) -> InvocationChain:
        """Return a new chain ending in ``task``.

        Raises:
            CycleError: If the task is already part of this chain.
        """
        if task.name in self:
            raise CycleError(f"Circular dependency detected: {self} => {task.name}")
        return InvocationChain(task.name, self)

    def names(self) -> list[str]:
        """Return task names from the outermost invocation inwards."""
        names: list[str] = []
        node: InvocationChain | None = self
        while node is not None and node._name is not None:
            names.append(node._name)
            node = node._parent
        names.reverse()
        return names

    def __contains__(self, name: object) -> bool:
        node: InvocationChain | None = self
        while node is not None and node._name is not None:
            if node._name == name:
                return True
            node = node._parent
        return False

    def __len__(self) -> int:
        return len(self.names())

    def __str__(self) -> str:
        return " => ".join(["TOP", *self.names()])

    def __repr__(self) -> str:
        return f"InvocationChain({self.names()!r})"


EMPTY_CHAIN = InvocationChain()
