# src/manifest/store_factory.py — v1
"""Factory for manifest store instantiation."""

from __future__ import annotations

from pathlib import Path

from assetpipe.manifest.base_manifest_store import BaseManifestStore


def create_manifest_store(directory: Path, backend: str = "json") -> BaseManifestStore:
    """Instantiate the configured manifest backend inside ``directory``.

    Args:
        directory: Directory holding the manifest (the pipeline's temp subdir).
        backend: "json" or "sqlite".

    Returns:
        Configured BaseManifestStore implementation.
    """
    if backend == "json":
        from assetpipe.manifest.json_store import MANIFEST_FILENAME, JsonManifestStore
        return JsonManifestStore(Path(directory) / MANIFEST_FILENAME)

    if backend == "sqlite":
        from assetpipe.manifest.sqlite_store import (
            MANIFEST_DB_FILENAME,
            SqliteManifestStore,
        )
        return SqliteManifestStore(Path(directory) / MANIFEST_DB_FILENAME)

    raise ValueError(f"Unsupported manifest backend: {backend!r}")
