# src/manifest/json_store.py — v1
"""JSON file manifest store (default MANIFEST_BACKEND=json).

The whole manifest lives in one ``manifest.json``. Single-entry writes update
the in-memory copy and rewrite the file.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from assetpipe.manifest.base_manifest_store import BaseManifestStore, ManifestStoreError
from assetpipe.manifest.models import Manifest, ManifestEntry

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


class JsonManifestStore(BaseManifestStore):
    """File-based manifest store using a single JSON document."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()
        self._cache: Manifest | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Manifest:
        """Read the manifest file; missing or corrupt files load as empty."""
        self._cache = self._read()
        return self._cache.model_copy(deep=True)

    def _read(self) -> Manifest:
        manifest = Manifest()
        if self._path.is_file():
            try:
                data = json.loads(self._path.read_text(encoding="utf-8"))
                manifest = Manifest(entries=data)
            except (json.JSONDecodeError, ValidationError, TypeError) as e:
                logger.warning("Ignoring unreadable manifest %s: %s", self._path, e)
        logger.debug("Loaded %d manifest entries from %s", len(manifest), self._path)
        return manifest

    def get(self, name: str) -> ManifestEntry | None:
        entry = self._current().get(name)
        return entry.model_copy(deep=True) if entry is not None else None

    def put(self, name: str, entry: ManifestEntry) -> None:
        manifest = self._current()
        manifest.set(name, entry.model_copy(deep=True))
        self._write(manifest)

    def delete(self, name: str) -> None:
        manifest = self._current()
        if name in manifest:
            manifest.remove(name)
            self._write(manifest)

    def flush(self, manifest: Manifest) -> None:
        self._cache = manifest.model_copy(deep=True)
        self._write(self._cache)
        logger.debug("Wrote %d manifest entries to %s", len(manifest), self._path)

    def _current(self) -> Manifest:
        if self._cache is None:
            self._cache = self._read()
        return self._cache

    def _write(self, manifest: Manifest) -> None:
        """Write atomically via a sibling temp file."""
        payload = {
            name: entry.model_dump() for name, entry in sorted(manifest.entries.items())
        }
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            raise ManifestStoreError(f"Cannot write manifest {self._path}: {e}") from e
