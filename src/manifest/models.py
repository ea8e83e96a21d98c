# src/manifest/models.py — v1
"""Manifest domain models: ManifestEntry, Manifest.

Timestamps are integer nanoseconds (``os.stat().st_mtime_ns``) so they
round-trip through JSON and SQLite without loss.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ManifestEntry(BaseModel):
    """Recorded state of one dynamic file task.

    ``mtime`` is the output's modification time after the task's last run
    (None while the entry is pending); ``deps`` maps each dynamic dependency
    to its modification time when the edge was recorded.
    """

    mtime: int | None = None
    deps: dict[str, int] = Field(default_factory=dict)

    @property
    def dep_paths(self) -> list[str]:
        """Return dependency paths in recorded order."""
        return list(self.deps)


class Manifest(BaseModel):
    """Mapping of task name (output path) to ManifestEntry."""

    entries: dict[str, ManifestEntry] = Field(default_factory=dict)

    def get(self, name: str) -> ManifestEntry | None:
        """Return the entry for ``name`` or None."""
        return self.entries.get(name)

    def set(self, name: str, entry: ManifestEntry) -> None:
        """Create or replace the entry for ``name``."""
        self.entries[name] = entry

    def remove(self, name: str) -> None:
        """Drop the entry for ``name`` if present."""
        self.entries.pop(name, None)

    def names(self) -> list[str]:
        """Return sorted task names."""
        return sorted(self.entries)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)
