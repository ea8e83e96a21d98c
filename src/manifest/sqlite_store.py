# src/manifest/sqlite_store.py — v1
"""SQLite-based manifest store (MANIFEST_BACKEND=sqlite).

Uses stdlib sqlite3. Each entry is one row, so single-entry writes do not
rewrite the whole manifest.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from pathlib import Path

from pydantic import ValidationError

from assetpipe.manifest.base_manifest_store import BaseManifestStore, ManifestStoreError
from assetpipe.manifest.models import Manifest, ManifestEntry

logger = logging.getLogger(__name__)

MANIFEST_DB_FILENAME = "manifest.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS manifest_entries (
    name TEXT PRIMARY KEY,
    mtime INTEGER,
    deps TEXT NOT NULL
);
"""


class SqliteManifestStore(BaseManifestStore):
    """SQLite-backed manifest store."""

    def __init__(self, db_path: Path | str) -> None:
        self._path = Path(db_path).expanduser()
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Manifest:
        manifest = Manifest()
        if not self._path.is_file():
            return manifest
        with self._lock:
            rows = self._connect().execute(
                "SELECT name, mtime, deps FROM manifest_entries"
            ).fetchall()
        for name, mtime, deps in rows:
            entry = _row_to_entry(name, mtime, deps)
            if entry is not None:
                manifest.set(name, entry)
        logger.debug("Loaded %d manifest entries from %s", len(manifest), self._path)
        return manifest

    def get(self, name: str) -> ManifestEntry | None:
        if not self._path.is_file():
            return None
        with self._lock:
            row = self._connect().execute(
                "SELECT name, mtime, deps FROM manifest_entries WHERE name = ?",
                (name,),
            ).fetchone()
        if row is None:
            return None
        return _row_to_entry(*row)

    def put(self, name: str, entry: ManifestEntry) -> None:
        with self._lock:
            conn = self._connect()
            try:
                conn.execute(
                    "INSERT OR REPLACE INTO manifest_entries (name, mtime, deps) "
                    "VALUES (?, ?, ?)",
                    (name, entry.mtime, json.dumps(entry.deps)),
                )
                conn.commit()
            except sqlite3.Error as e:
                raise ManifestStoreError(f"Cannot write manifest entry {name}: {e}") from e

    def delete(self, name: str) -> None:
        with self._lock:
            conn = self._connect()
            conn.execute("DELETE FROM manifest_entries WHERE name = ?", (name,))
            conn.commit()

    def flush(self, manifest: Manifest) -> None:
        rows = [
            (name, entry.mtime, json.dumps(entry.deps))
            for name, entry in manifest.entries.items()
        ]
        with self._lock:
            conn = self._connect()
            try:
                with conn:
                    conn.execute("DELETE FROM manifest_entries")
                    conn.executemany(
                        "INSERT INTO manifest_entries (name, mtime, deps) "
                        "VALUES (?, ?, ?)",
                        rows,
                    )
            except sqlite3.Error as e:
                raise ManifestStoreError(f"Cannot flush manifest {self._path}: {e}") from e
        logger.debug("Wrote %d manifest entries to %s", len(rows), self._path)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
            self._conn.executescript(_SCHEMA)
        return self._conn


def _row_to_entry(name: str, mtime: int | None, deps: str) -> ManifestEntry | None:
    try:
        return ManifestEntry(mtime=mtime, deps=json.loads(deps))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Skipping unreadable manifest entry %s: %s", name, e)
        return None
