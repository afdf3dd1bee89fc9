"""Tests for the critical flag, risk classification and the critical-path walk."""

from __future__ import annotations

import pytest

from assetgraph.domain.impact import classify_risk, is_flagged_critical, walk_dependency_chain
from assetgraph.domain.types import RiskLevel


class TestIsFlaggedCritical:
    @pytest.mark.parametrize(
        ("fields", "expected"),
        [
            ({"is_critical": "true"}, True),
            ({"is_critical": True}, True),
            ({"is_critical": "TRUE"}, True),
            ({"is_critical": "false"}, False),
            ({"is_critical": 1}, False),
            ({}, False),
        ],
    )
    def test_flag(self, fields: dict[str, object], expected: bool) -> None:
        assert is_flagged_critical(fields) is expected


class TestClassifyRisk:
    @pytest.mark.parametrize(
        ("direct", "total", "spof", "expected"),
        [
            (0, 0, False, RiskLevel.LOW),
            (1, 0, False, RiskLevel.MEDIUM),
            (0, 6, False, RiskLevel.HIGH),
            (0, 11, True, RiskLevel.CRITICAL),
            (3, 11, False, RiskLevel.HIGH),
            (1, 10, True, RiskLevel.HIGH),
            (2, 5, True, RiskLevel.MEDIUM),
        ],
    )
    def test_thresholds(self, direct: int, total: int, spof: bool, expected: RiskLevel) -> None:
        assert classify_risk(direct, total, spof) is expected


class TestWalkDependencyChain:
    def test_collects_parents_of_traversed_edges(self) -> None:
        graph = {"R": ["A"], "A": ["B"], "B": []}
        assert walk_dependency_chain("R", lambda n: graph.get(n, []), max_depth=10) == {"R", "A"}

    def test_leaf_root_discovers_nothing(self) -> None:
        assert walk_dependency_chain("R", lambda n: [], max_depth=10) == set()

    def test_depth_bound(self) -> None:
        chain = {f"n{i}": [f"n{i + 1}"] for i in range(20)}
        found = walk_dependency_chain("n0", lambda n: chain.get(n, []), max_depth=3)
        # Edges at depth 1..3 are traversed; their parents are n0, n1, n2.
        assert found == {"n0", "n1", "n2"}

    def test_cycle_terminates(self) -> None:
        graph = {"A": ["B"], "B": ["C"], "C": ["A"]}
        assert walk_dependency_chain("A", lambda n: graph.get(n, []), max_depth=10) == {
            "A",
            "B",
            "C",
        }
