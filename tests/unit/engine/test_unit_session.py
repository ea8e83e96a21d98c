# tests/unit/engine/test_unit_session.py — v1
"""Tests for engine/session.py — manifests, memo and finalization."""

from __future__ import annotations

from assetpipe.engine.session import BuildSession
from assetpipe.manifest.json_store import JsonManifestStore
from assetpipe.manifest.models import Manifest, ManifestEntry


class TestBuildSession:
    def test_defaults(self):
        session = BuildSession()
        assert len(session.manifest) == 0
        assert len(session.last_manifest) == 0
        assert session.store is None
        assert session.executed == []

    def test_entry_accessors(self):
        session = BuildSession(
            last_manifest=Manifest(entries={"a": ManifestEntry(mtime=5)})
        )
        assert session.last_entry("a").mtime == 5
        assert session.entry("a") is None
        session.set_entry("a", ManifestEntry(deps={"d": 1}))
        assert session.entry("a").deps == {"d": 1}

    def test_memoize_deps_computes_once(self):
        session = BuildSession()
        calls: list[int] = []

        def compute():
            calls.append(1)
            return ["dep"]

        assert session.memoize_deps("a", compute) == ["dep"]
        assert session.memoize_deps("a", compute) == ["dep"]
        assert len(calls) == 1

    def test_memoize_empty_result(self):
        session = BuildSession()
        calls: list[int] = []

        def compute():
            calls.append(1)
            return []

        session.memoize_deps("a", compute)
        session.memoize_deps("a", compute)
        assert len(calls) == 1

    def test_finalize_stamps_once(self):
        session = BuildSession()
        session.set_entry("a", ManifestEntry(deps={"d": 1}))
        assert session.finalize_entry("a", 10).mtime == 10
        assert session.finalize_entry("a", 20).mtime == 10

    def test_finalize_without_entry(self):
        assert BuildSession().finalize_entry("a", 10) is None

    def test_finalize_persists_to_store(self, tmp_path):
        store = JsonManifestStore(tmp_path / "manifest.json")
        session = BuildSession(store=store)
        session.set_entry("a", ManifestEntry(deps={"d": 1}))
        session.finalize_entry("a", 10)
        assert JsonManifestStore(store.path).get("a") == ManifestEntry(mtime=10, deps={"d": 1})

    def test_session_ids_differ(self):
        assert BuildSession().session_id != BuildSession().session_id
