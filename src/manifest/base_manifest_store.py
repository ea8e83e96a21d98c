# src/manifest/base_manifest_store.py — v1
"""Abstract manifest store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from assetpipe.manifest.models import Manifest, ManifestEntry


class ManifestStoreError(Exception):
    """Raised when a manifest cannot be persisted."""


class BaseManifestStore(ABC):
    """Unified interface for manifest storage backends.

    A store is keyed by task name and supports loading everything at session
    start, single-entry reads and writes, and flushing a whole manifest at
    session end.
    """

    @property
    @abstractmethod
    def path(self) -> Path:
        """Location of the backing file."""

    @abstractmethod
    def load(self) -> Manifest:
        """Load all entries. A missing or unreadable store yields an empty manifest."""

    @abstractmethod
    def get(self, name: str) -> ManifestEntry | None:
        """Retrieve one entry by task name."""

    @abstractmethod
    def put(self, name: str, entry: ManifestEntry) -> None:
        """Create or replace one entry."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove one entry."""

    @abstractmethod
    def flush(self, manifest: Manifest) -> None:
        """Replace the stored contents with ``manifest``."""
