# tests/unit/engine/test_unit_task.py — v1
"""Tests for engine/task.py — Task and FileTask invocation and staleness."""

from __future__ import annotations

from pathlib import Path

import pytest

from assetpipe.engine.invocation_chain import CycleError
from assetpipe.engine.task import EARLY, FileTask, Task
from assetpipe.logging.context import get_context


def _writer(path: Path):
    def action(task):
        path.write_text(task.name, encoding="utf-8")
    return action


class TestTask:
    def test_always_needed(self, app):
        assert Task("t", app).needed() is True

    def test_runs_prerequisites_first(self, app):
        order: list[str] = []
        app.define_task(Task, "a", action=lambda t: order.append("a"))
        app.define_task(Task, "b", ["a"], action=lambda t: order.append("b"))
        app.invoke("b")
        assert order == ["a", "b"]

    def test_runs_once_per_session(self, app):
        calls: list[str] = []
        app.define_task(Task, "a", action=lambda t: calls.append("a"))
        app.define_task(Task, "b", ["a"])
        app.define_task(Task, "c", ["a", "b"])
        app.invoke("c")
        assert calls == ["a"]

    def test_reenable_allows_rerun(self, app):
        calls: list[str] = []
        task = app.define_task(Task, "a", action=lambda t: calls.append("a"))
        task.invoke()
        task.reenable()
        task.invoke()
        assert calls == ["a", "a"]

    def test_enhance_adds_prerequisites_and_actions(self, app):
        calls: list[str] = []
        task = app.define_task(Task, "a", ["x"], action=lambda t: calls.append("1"))
        task.enhance(["x", "y"], lambda t: calls.append("2"))
        assert task.prerequisites == ["x", "y"]
        assert len(task.actions) == 2

    def test_static_cycle_detected(self, app):
        app.define_task(Task, "a", ["b"])
        app.define_task(Task, "b", ["a"])
        with pytest.raises(CycleError):
            app.invoke("a")

    def test_execute_records_in_session(self, app):
        app.define_task(Task, "a")
        app.invoke("a")
        assert app.session.executed == ["a"]

    def test_task_context_set_during_action(self, app):
        seen: list[str | None] = []
        app.define_task(Task, "a", action=lambda t: seen.append(get_context().task))
        app.invoke("a")
        assert seen == ["a"]
        assert get_context().task is None


class TestFileTask:
    def test_needed_when_missing(self, app, files):
        task = FileTask(str(files.root / "out.txt"), app)
        assert task.needed() is True

    def test_timestamp_of_missing_file(self, app, files):
        assert FileTask(str(files.root / "nope"), app).timestamp() == EARLY

    def test_not_needed_when_newer_than_prerequisites(self, app, files):
        src = files.write("src.txt", "", files.T0)
        out = files.write("out.txt", "", files.T0 + files.SECOND)
        task = app.define_task(FileTask, str(out), [str(src)])
        assert task.needed() is False

    def test_needed_when_prerequisite_newer(self, app, files):
        src = files.write("src.txt", "", files.T0 + files.SECOND)
        out = files.write("out.txt", "", files.T0)
        task = app.define_task(FileTask, str(out), [str(src)])
        assert task.needed() is True

    def test_same_mtime_is_up_to_date(self, app, files):
        src = files.write("src.txt", "", files.T0)
        out = files.write("out.txt", "", files.T0)
        task = app.define_task(FileTask, str(out), [str(src)])
        assert task.needed() is False

    def test_plain_task_prerequisite_forces_rebuild(self, app, files):
        out = files.write("out.txt", "", files.T0)
        app.define_task(Task, "phony")
        task = app.define_task(FileTask, str(out), ["phony"])
        assert task.needed() is True

    def test_builds_missing_output(self, app, files):
        src = files.write("src.txt", "data", files.T0)
        out = files.root / "out.txt"
        app.define_task(FileTask, str(out), [str(src)], action=_writer(out))
        app.invoke(str(out))
        assert out.read_text(encoding="utf-8") == str(out)
        assert app.session.executed == [str(out)]
