# tests/unit/manifest/test_unit_manifest_models.py — v1
"""Tests for manifest/models.py — ManifestEntry and Manifest."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from assetpipe.manifest.models import Manifest, ManifestEntry


class TestManifestEntry:
    def test_defaults_pending(self):
        entry = ManifestEntry()
        assert entry.mtime is None
        assert entry.deps == {}

    def test_dep_paths_keep_order(self):
        entry = ManifestEntry(deps={"b.js": 2, "a.js": 1})
        assert entry.dep_paths == ["b.js", "a.js"]

    def test_large_ns_timestamps_roundtrip(self):
        entry = ManifestEntry(mtime=1_700_000_000_123_456_789, deps={"a": 1_700_000_000_987_654_321})
        restored = ManifestEntry.model_validate_json(entry.model_dump_json())
        assert restored == entry

    def test_rejects_non_integer_mtime(self):
        with pytest.raises(ValidationError):
            ManifestEntry(mtime="yesterday")


class TestManifest:
    def test_set_get_remove(self):
        manifest = Manifest()
        manifest.set("out.js", ManifestEntry(mtime=1))
        assert "out.js" in manifest
        assert manifest.get("out.js").mtime == 1
        manifest.remove("out.js")
        assert manifest.get("out.js") is None
        assert len(manifest) == 0

    def test_remove_missing_is_noop(self):
        Manifest().remove("nope")

    def test_names_sorted(self):
        manifest = Manifest(entries={"b": ManifestEntry(), "a": ManifestEntry()})
        assert manifest.names() == ["a", "b"]

    def test_validates_nested_entries(self):
        manifest = Manifest(entries={"a": {"mtime": 3, "deps": {"x": 1}}})
        assert manifest.get("a") == ManifestEntry(mtime=3, deps={"x": 1})
