"""RelationshipService — typed asset edges and the graph questions over them.

Write path (``create_relationship``): type check, endpoint existence,
self-reference, dependency cycle check, duplicate check, insert. Steps after
the type check share one ``BEGIN IMMEDIATE`` transaction; history is
dispatched only once it has committed.

Read path: neighbor listings, bounded dependency trees, impact analysis and
the global cycle scan. Nothing is cached between calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import IntegrityError

from assetgraph.domain.models import AssetRelationship
from assetgraph.domain.types import (
    HistoryAction,
    NeighborDirection,
    RelationshipType,
    parse_relationship_type,
)
from assetgraph.services._helpers import clamp_depth, new_relationship_id, now_iso
from assetgraph.services.base import BaseService
from assetgraph.services.cycles import CycleChecker
from assetgraph.services.impact import ImpactAnalyzer
from assetgraph.services.result import ErrorCode, ServiceResult
from assetgraph.services.telemetry import trace_span, traced
from assetgraph.services.trees import DependencyTreeBuilder

if TYPE_CHECKING:
    from assetgraph.infrastructure.inventory import InventorySession

_VALID_TYPES = ", ".join(t.value for t in RelationshipType)


def _invalid_type(op: str, raw: str) -> ServiceResult:
    return ServiceResult.failure(
        op,
        ErrorCode.INVALID_RELATIONSHIP_TYPE,
        f"Invalid relationship type '{raw}' (expected one of: {_VALID_TYPES})",
        relationship_type=raw,
    )


def _invalid_direction(op: str, raw: str, allowed: tuple[NeighborDirection, ...]) -> ServiceResult:
    expected = ", ".join(d.value for d in allowed)
    return ServiceResult.failure(
        op,
        ErrorCode.INVALID_DIRECTION,
        f"Invalid direction '{raw}' (expected one of: {expected})",
        direction=raw,
    )


def _parse_direction(
    raw: str, allowed: tuple[NeighborDirection, ...]
) -> NeighborDirection | None:
    try:
        direction = NeighborDirection(raw)
    except ValueError:
        return None
    return direction if direction in allowed else None


def _assets_exist(session: InventorySession, *asset_ids: str) -> bool:
    """True only when every distinct id resolves in the catalog."""
    distinct = set(asset_ids)
    return session.assets.count_existing(distinct) == len(distinct)


class RelationshipService(BaseService):
    """Creates, removes and analyzes relationships between assets."""

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @traced
    def create_relationship(
        self,
        parent_id: str,
        child_id: str,
        relationship_type: str,
        *,
        notes: str | None = None,
        actor_id: str | None = None,
    ) -> ServiceResult:
        """Link *child_id* to *parent_id* with a typed edge.

        For ``dependency`` edges the child depends on the parent.
        """
        op = "create_relationship"
        warnings: list[str] = []

        rel_type = parse_relationship_type(relationship_type)
        if rel_type is None:
            return _invalid_type(op, relationship_type)

        try:
            with self._inventory.transaction() as session:
                with trace_span("validate"):
                    if not _assets_exist(session, parent_id, child_id):
                        return ServiceResult.failure(
                            op,
                            ErrorCode.NOT_FOUND,
                            "One or both assets do not exist",
                            parent_asset_id=parent_id,
                            child_asset_id=child_id,
                        )
                    if parent_id == child_id:
                        return ServiceResult.failure(
                            op,
                            ErrorCode.SELF_REFERENCE,
                            "An asset cannot have a relationship with itself",
                            asset_id=parent_id,
                        )

                with trace_span("cycle_check") as span:
                    closes = CycleChecker(session).would_create_cycle(parent_id, child_id, rel_type)
                    if span:
                        span.annotate("closes_cycle", closes)
                if closes:
                    return ServiceResult.failure(
                        op,
                        ErrorCode.CIRCULAR_DEPENDENCY,
                        f"Adding {parent_id} -> {child_id} would create a circular dependency",
                        parent_asset_id=parent_id,
                        child_asset_id=child_id,
                    )

                if session.relationships.exists(parent_id, child_id, rel_type):
                    return ServiceResult.failure(
                        op,
                        ErrorCode.ALREADY_EXISTS,
                        "Relationship already exists",
                        parent_asset_id=parent_id,
                        child_asset_id=child_id,
                        relationship_type=rel_type.value,
                    )

                with trace_span("insert"):
                    relationship = session.relationships.insert(
                        AssetRelationship(
                            id=new_relationship_id(),
                            parent_asset_id=parent_id,
                            child_asset_id=child_id,
                            relationship_type=rel_type,
                            notes=notes,
                            created_at=now_iso(),
                        )
                    )
        except IntegrityError:
            return ServiceResult.failure(
                op,
                ErrorCode.ALREADY_EXISTS,
                "Relationship already exists",
                parent_asset_id=parent_id,
                child_asset_id=child_id,
                relationship_type=rel_type.value,
            )

        with trace_span("record_history"):
            self._record_edge_history(
                relationship, HistoryAction.RELATIONSHIP_ADDED, "added", actor_id, warnings
            )

        return ServiceResult(
            ok=True,
            op=op,
            data=relationship.model_dump(mode="json"),
            warnings=warnings,
        )

    @traced
    def delete_relationship(
        self,
        relationship_id: str,
        *,
        actor_id: str | None = None,
    ) -> ServiceResult:
        """Remove one edge and record the removal on both endpoints."""
        op = "delete_relationship"
        warnings: list[str] = []

        with self._inventory.transaction() as session:
            removed = session.relationships.delete(relationship_id)
        if removed is None:
            return ServiceResult.failure(
                op,
                ErrorCode.NOT_FOUND,
                f"Relationship not found: {relationship_id}",
                relationship_id=relationship_id,
            )

        with trace_span("record_history"):
            self._record_edge_history(
                removed, HistoryAction.RELATIONSHIP_REMOVED, "removed", actor_id, warnings
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "relationship_id": removed.id,
                "parent_asset_id": removed.parent_asset_id,
                "child_asset_id": removed.child_asset_id,
                "relationship_type": removed.relationship_type.value,
            },
            warnings=warnings,
        )

    def _record_edge_history(
        self,
        relationship: AssetRelationship,
        action: HistoryAction,
        verb: str,
        actor_id: str | None,
        warnings: list[str],
    ) -> None:
        """One history record per endpoint, each naming the other end as peer."""
        ends = (
            (relationship.parent_asset_id, relationship.child_asset_id),
            (relationship.child_asset_id, relationship.parent_asset_id),
        )
        for asset_id, peer_id in ends:
            self._record_history(
                asset_id,
                action,
                actor_id,
                {
                    "relationship_type": relationship.relationship_type.value,
                    "peer_asset_id": peer_id,
                    "relationship_id": relationship.id,
                    "action": verb,
                },
                warnings,
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @traced
    def get_relationship_graph(
        self,
        asset_id: str,
        *,
        max_depth: int | None = None,
    ) -> ServiceResult:
        """Neighbor lists plus upstream and downstream dependency trees.

        *max_depth* outside ``0..max_depth_cap`` falls back to the
        configured default; ``0`` omits the trees.
        """
        op = "get_relationship_graph"
        graph_cfg = self._inventory.settings.graph
        depth = clamp_depth(
            max_depth, default=graph_cfg.default_max_depth, cap=graph_cfg.max_depth_cap
        )

        with self._inventory.read() as session:
            with trace_span("build_graph") as span:
                graph = DependencyTreeBuilder(session).build_graph(asset_id, depth)
                if span:
                    span.annotate("max_depth", depth)

        if graph is None:
            return ServiceResult.failure(
                op, ErrorCode.NOT_FOUND, f"Asset not found: {asset_id}", asset_id=asset_id
            )

        data = graph.model_dump(mode="json")
        data["max_depth"] = depth
        return ServiceResult(ok=True, op=op, data=data)

    @traced
    def get_asset_impact_analysis(self, asset_id: str) -> ServiceResult:
        """What depends on *asset_id* and how severe its failure would be."""
        op = "get_asset_impact_analysis"

        with self._inventory.read() as session:
            if not session.assets.exists(asset_id):
                return ServiceResult.failure(
                    op, ErrorCode.NOT_FOUND, f"Asset not found: {asset_id}", asset_id=asset_id
                )
            with trace_span("analyze"):
                analysis = ImpactAnalyzer(
                    session, self._inventory.graph, self._inventory.settings.graph
                ).analyze(asset_id)

        return ServiceResult(ok=True, op=op, data=analysis.model_dump(mode="json"))

    @traced
    def get_assets_by_relationship(
        self,
        asset_id: str,
        *,
        relationship_type: str | None = None,
        direction: str = NeighborDirection.BOTH,
    ) -> ServiceResult:
        """Assets linked to *asset_id*, optionally filtered by edge type."""
        op = "get_assets_by_relationship"
        allowed = (NeighborDirection.PARENT, NeighborDirection.CHILD, NeighborDirection.BOTH)

        parsed = _parse_direction(direction, allowed)
        if parsed is None:
            return _invalid_direction(op, direction, allowed)
        rel_type: RelationshipType | None = None
        if relationship_type is not None:
            rel_type = parse_relationship_type(relationship_type)
            if rel_type is None:
                return _invalid_type(op, relationship_type)

        with self._inventory.read() as session:
            found = session.assets.find_by_relationship(asset_id, parsed, rel_type)

        items = [asset.model_dump(mode="json") for asset in found]
        return ServiceResult(
            ok=True,
            op=op,
            data=self._listing(asset_id, parsed, rel_type, items),
        )

    @traced
    def list_relationships(
        self,
        asset_id: str,
        *,
        direction: str = NeighborDirection.CHILD,
        relationship_type: str | None = None,
    ) -> ServiceResult:
        """Edges touching *asset_id* on one side, with peer summaries."""
        op = "list_relationships"
        allowed = (NeighborDirection.PARENT, NeighborDirection.CHILD)

        parsed = _parse_direction(direction, allowed)
        if parsed is None:
            return _invalid_direction(op, direction, allowed)
        rel_type: RelationshipType | None = None
        if relationship_type is not None:
            rel_type = parse_relationship_type(relationship_type)
            if rel_type is None:
                return _invalid_type(op, relationship_type)

        with self._inventory.read() as session:
            edges = session.relationships.neighbors(asset_id, parsed, rel_type)

        items = [edge.model_dump(mode="json") for edge in edges]
        return ServiceResult(
            ok=True,
            op=op,
            data=self._listing(asset_id, parsed, rel_type, items),
        )

    @traced
    def find_circular_dependencies(self) -> ServiceResult:
        """Scan every stored dependency edge for cycles. Diagnostic only."""
        op = "find_circular_dependencies"

        with self._inventory.read() as session:
            with trace_span("scan") as span:
                cycles = CycleChecker(session).find_cycles()
                if span:
                    span.annotate("cycles", len(cycles))

        return ServiceResult(
            ok=True,
            op=op,
            data={"count": len(cycles), "cycles": cycles},
        )

    @staticmethod
    def _listing(
        asset_id: str,
        direction: NeighborDirection,
        relationship_type: RelationshipType | None,
        items: list[dict[str, Any]],
    ) -> dict[str, Any]:
        return {
            "asset_id": asset_id,
            "direction": direction.value,
            "relationship_type": relationship_type.value if relationship_type else None,
            "count": len(items),
            "items": items,
        }
