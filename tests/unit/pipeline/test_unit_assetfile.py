# tests/unit/pipeline/test_unit_assetfile.py — v1
"""Tests for pipeline/assetfile.py — Assetfile evaluation."""

from __future__ import annotations

import pytest

from assetpipe.pipeline.assetfile import AssetfileError, build_pipeline, load_pipeline


class TestBuildPipeline:
    def test_roots_relative_to_assetfile(self, tmp_path):
        pipeline = build_pipeline(
            'input("src")\noutput("dist")\ntmpdir("cache")\n',
            tmp_path / "Assetfile",
        )
        base = tmp_path.resolve()
        assert pipeline.input_root == base / "src"
        assert pipeline.output_root == base / "dist"
        assert pipeline.tmpdir == base / "cache"

    def test_defaults(self, tmp_path):
        pipeline = build_pipeline("", tmp_path / "Assetfile")
        base = tmp_path.resolve()
        assert pipeline.input_root == base / "app"
        assert pipeline.output_root == base / "public"
        assert pipeline.manifest_backend == "json"
        assert pipeline.rules == []

    def test_file_rules(self, tmp_path):
        pipeline = build_pipeline(
            'file("a.js", "x.js")\n'
            'file("b.js", ["y.js", "z.js"], action=copy(), dynamic=scan_imports())\n',
            tmp_path / "Assetfile",
        )
        assert [r.output for r in pipeline.rules] == ["a.js", "b.js"]
        assert pipeline.rules[0].inputs == ["x.js"]
        assert pipeline.rules[0].dynamic is None
        assert pipeline.rules[1].inputs == ["y.js", "z.js"]
        assert pipeline.rules[1].dynamic is not None

    def test_manifest_backend(self, tmp_path):
        pipeline = build_pipeline('manifest("sqlite")', tmp_path / "Assetfile")
        assert pipeline.manifest_backend == "sqlite"

    def test_unknown_manifest_backend(self, tmp_path):
        with pytest.raises(AssetfileError, match="redis"):
            build_pipeline('manifest("redis")', tmp_path / "Assetfile")

    def test_syntax_error(self, tmp_path):
        with pytest.raises(AssetfileError, match="Syntax error") as exc_info:
            build_pipeline("file(", tmp_path / "Assetfile")
        assert isinstance(exc_info.value.__cause__, SyntaxError)

    def test_runtime_error_wrapped(self, tmp_path):
        with pytest.raises(AssetfileError, match="Error evaluating") as exc_info:
            build_pipeline("undefined_helper()", tmp_path / "Assetfile")
        assert isinstance(exc_info.value.__cause__, NameError)


class TestLoadPipeline:
    def test_reads_file(self, concat_project_dir):
        pipeline = load_pipeline(concat_project_dir / "Assetfile")
        assert [p.name for p in pipeline.output_files] == ["application.js"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_pipeline(tmp_path / "Assetfile")
