# tests/unit/engine/test_unit_invocation_chain.py — v1
"""Tests for engine/invocation_chain.py — cycle detection chain."""

from __future__ import annotations

import pytest

from assetpipe.engine.invocation_chain import EMPTY_CHAIN, CycleError, InvocationChain
from assetpipe.engine.task import Task


@pytest.fixture
def tasks(app):
    return {name: Task(name, app) for name in ("a", "b", "c")}


class TestInvocationChain:
    def test_empty(self):
        assert EMPTY_CHAIN.names() == []
        assert len(EMPTY_CHAIN) == 0
        assert str(EMPTY_CHAIN) == "TOP"

    def test_append_returns_new_chain(self, tasks):
        chain = EMPTY_CHAIN.append(tasks["a"])
        assert chain.names() == ["a"]
        assert EMPTY_CHAIN.names() == []

    def test_order_outermost_first(self, tasks):
        chain = EMPTY_CHAIN.append(tasks["a"]).append(tasks["b"]).append(tasks["c"])
        assert chain.names() == ["a", "b", "c"]
        assert str(chain) == "TOP => a => b => c"

    def test_contains(self, tasks):
        chain = EMPTY_CHAIN.append(tasks["a"]).append(tasks["b"])
        assert "a" in chain
        assert "b" in chain
        assert "c" not in chain

    def test_cycle_raises(self, tasks):
        chain = EMPTY_CHAIN.append(tasks["a"]).append(tasks["b"])
        with pytest.raises(CycleError, match="TOP => a => b => a"):
            chain.append(tasks["a"])

    def test_sibling_branches_share_parent(self, tasks):
        parent = EMPTY_CHAIN.append(tasks["a"])
        left = parent.append(tasks["b"])
        right = parent.append(tasks["c"])
        assert left.names() == ["a", "b"]
        assert right.names() == ["a", "c"]

    def test_repr(self, tasks):
        chain = InvocationChain().append(tasks["a"])
        assert repr(chain) == "InvocationChain(['a'])"
