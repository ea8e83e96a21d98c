# src/logging/context.py — v2
"""Contextual logging support — attach project, fingerprint and task to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per project invocation.
_project: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "project", default=None
)
_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)
_task: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "task", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    project: str | None = None
    fingerprint: str | None = None
    task: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        project=_project.get(),
        fingerprint=_fingerprint.get(),
        task=_task.get(),
    )


def set_project_context(project: str, fingerprint: str | None = None) -> None:
    """Set project-level context (called once per invocation)."""
    _project.set(project)
    _fingerprint.set(fingerprint)


def set_task_context(task: str | None) -> contextvars.Token[str | None]:
    """Set the task currently being invoked; returns a token for reset."""
    return _task.set(task)


def reset_task_context(token: contextvars.Token[str | None]) -> None:
    """Restore the task context saved by ``set_task_context``."""
    _task.reset(token)


def clear_context() -> None:
    """Reset all context variables."""
    _project.set(None)
    _fingerprint.set(None)
    _task.set(None)
