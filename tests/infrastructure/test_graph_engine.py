"""Tests for GraphEngine — per-call NetworkX projections."""

from __future__ import annotations

from sqlalchemy.engine import Engine

from assetgraph.infrastructure.graph.engine import GraphEngine
from tests.conftest import insert_asset, insert_assets, insert_edge


class TestDependencyGraph:
    def test_empty(self, db_engine: Engine) -> None:
        with db_engine.connect() as conn:
            g = GraphEngine().dependency_graph(conn)
        assert g.number_of_nodes() == 0

    def test_only_selected_types(self, db_engine: Engine) -> None:
        insert_assets(db_engine, "a", "b", "c")
        insert_edge(db_engine, "a", "b", "dependency")
        insert_edge(db_engine, "b", "c", "component")
        with db_engine.connect() as conn:
            engine = GraphEngine()
            deps = engine.dependency_graph(conn)
            both = engine.dependency_graph(conn, ["dependency", "component"])
        assert set(deps.edges()) == {("a", "b")}
        assert "c" not in deps
        assert set(both.edges()) == {("a", "b"), ("b", "c")}

    def test_parallel_edges_kept(self, db_engine: Engine) -> None:
        insert_assets(db_engine, "a", "b")
        insert_edge(db_engine, "a", "b", "dependency")
        insert_edge(db_engine, "a", "b", "upgrade")
        with db_engine.connect() as conn:
            g = GraphEngine().dependency_graph(conn, ["dependency", "upgrade"])
        assert g.number_of_edges("a", "b") == 2
        assert g.out_degree("a") == 2

    def test_node_attributes(self, db_engine: Engine) -> None:
        insert_asset(db_engine, "a", custom_fields={"is_critical": "true"})
        insert_asset(db_engine, "b", status="retired", custom_fields="{broken")
        insert_edge(db_engine, "a", "b")
        with db_engine.connect() as conn:
            g = GraphEngine().dependency_graph(conn)
        assert g.nodes["a"] == {"status": "active", "is_critical": True}
        assert g.nodes["b"] == {"status": "retired", "is_critical": False}

    def test_fresh_projection_per_call(self, db_engine: Engine) -> None:
        insert_assets(db_engine, "a", "b", "c")
        insert_edge(db_engine, "a", "b")
        engine = GraphEngine()
        with db_engine.connect() as conn:
            first = engine.dependency_graph(conn)
        insert_edge(db_engine, "b", "c")
        with db_engine.connect() as conn:
            second = engine.dependency_graph(conn)
        assert first.number_of_edges() == 1
        assert second.number_of_edges() == 2
