# src/engine/session.py — v1
"""Build session — state owned by a single pipeline invocation.

Holds the last-run manifest (read-only), the current manifest being built,
the per-task memo of resolved dynamic dependencies and execution records.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from assetpipe.manifest.base_manifest_store import BaseManifestStore
from assetpipe.manifest.models import Manifest, ManifestEntry

logger = logging.getLogger(__name__)


@dataclass
class BuildSession:
    """Per-invocation state shared by all tasks of one application."""

    last_manifest: Manifest = field(default_factory=Manifest)
    manifest: Manifest = field(default_factory=Manifest)
    store: BaseManifestStore | None = None
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    resolved_deps: dict[str, list[str]] = field(default_factory=dict)
    executed: list[str] = field(default_factory=list)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def last_entry(self, name: str) -> ManifestEntry | None:
        return self.last_manifest.get(name)

    def entry(self, name: str) -> ManifestEntry | None:
        return self.manifest.get(name)

    def set_entry(self, name: str, entry: ManifestEntry) -> None:
        """Store a pending entry in the current manifest."""
        self.manifest.set(name, entry)

    def finalize_entry(self, name: str, mtime: int) -> ManifestEntry | None:
        """Stamp the current entry with its output mtime and persist it.

        An entry is finalized once; later calls return it unchanged.
        """
        entry = self.manifest.get(name)
        if entry is None or entry.mtime is not None:
            return entry
        entry.mtime = mtime
        if self.store is not None:
            self.store.put(name, entry)
        return entry

    def memoize_deps(self, name: str, compute: Callable[[], list[str]]) -> list[str]:
        """Return the memoized dynamic deps for ``name``, computing them once."""
        if name in self.resolved_deps:
            return self.resolved_deps[name]
        deps = compute()
        self.resolved_deps[name] = deps
        return deps

    def record_executed(self, name: str) -> None:
        with self._lock:
            self.executed.append(name)
