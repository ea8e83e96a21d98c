# src/pipeline/actions.py — v1
"""Ready-made task actions and dynamic dependency resolvers.

Actions receive the task and write ``task.name``; resolvers receive the task
and return the paths of its dynamic dependencies.
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Callable
from pathlib import Path

from assetpipe.engine.task import Task

IMPORT_PATTERN = r'@import\s+"([^"]+)"'


def _ensure_parent(path: str) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


def concat(separator: str = "\n") -> Callable[[Task], None]:
    """Concatenate all static prerequisites into the output."""

    def action(task: Task) -> None:
        parts = [Path(p).read_text(encoding="utf-8") for p in task.prerequisites]
        _ensure_parent(task.name).write_text(separator.join(parts), encoding="utf-8")

    return action


def copy() -> Callable[[Task], None]:
    """Copy the first static prerequisite to the output."""

    def action(task: Task) -> None:
        if not task.prerequisites:
            raise ValueError(f"Task '{task.name}' has no input to copy")
        shutil.copyfile(task.prerequisites[0], _ensure_parent(task.name))

    return action


def _imports_of(path: Path, regex: re.Pattern[str]) -> list[Path]:
    text = path.read_text(encoding="utf-8")
    return [(path.parent / match).resolve() for match in regex.findall(text)]


def scan_imports(pattern: str = IMPORT_PATTERN) -> Callable[[Task], list[str]]:
    """Resolver returning files referenced by ``pattern`` in the static inputs.

    Paths are resolved relative to the file containing the reference. Only
    direct references are returned; nested ones are found by the resolvers of
    the tasks building those files, if any.
    """
    regex = re.compile(pattern)

    def resolver(task: Task) -> list[str]:
        found: list[str] = []
        for prereq in task.prerequisites:
            for dep in _imports_of(Path(prereq), regex):
                if str(dep) not in found:
                    found.append(str(dep))
        return found

    return resolver


def inline_imports(pattern: str = IMPORT_PATTERN) -> Callable[[Task], None]:
    """Concatenate the static inputs, replacing each reference with the
    content of the referenced file."""
    regex = re.compile(pattern)

    def action(task: Task) -> None:
        parts: list[str] = []
        for prereq in task.prerequisites:
            source = Path(prereq)
            text = source.read_text(encoding="utf-8")
            parts.append(
                regex.sub(
                    lambda m: (source.parent / m.group(1)).read_text(encoding="utf-8"),
                    text,
                )
            )
        _ensure_parent(task.name).write_text("\n".join(parts), encoding="utf-8")

    return action
