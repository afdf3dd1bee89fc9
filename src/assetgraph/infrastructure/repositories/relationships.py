"""RelationshipRepository — SQL for typed edges between assets.

Bound to a single connection so a caller can run several checks and the
insert inside one transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, func, insert, or_, select

from assetgraph.domain.models import AssetRelationship, AssetSummary
from assetgraph.domain.types import NeighborDirection, RelationshipType
from assetgraph.infrastructure.database.schema import asset_relationships, assets

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Connection

_rel = asset_relationships


def _to_relationship(row: Any, *, peer_side: str | None = None) -> AssetRelationship:
    """Build an :class:`AssetRelationship` from a row mapping.

    When *peer_side* is ``"parent"`` or ``"child"``, the row is expected to
    carry ``peer_tag``/``peer_name`` columns for that end of the edge.
    """
    data: dict[str, Any] = {
        "id": row["id"],
        "parent_asset_id": row["parent_asset_id"],
        "child_asset_id": row["child_asset_id"],
        "relationship_type": row["relationship_type"],
        "notes": row["notes"],
        "created_at": row["created_at"],
    }
    if peer_side is not None:
        peer_id = data[f"{peer_side}_asset_id"]
        data[f"{peer_side}_asset"] = AssetSummary(
            id=peer_id, asset_tag=row["peer_tag"], name=row["peer_name"]
        )
    return AssetRelationship.model_validate(data)


class RelationshipRepository:
    """Encapsulates SQL for the ``asset_relationships`` table."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    # ------------------------------------------------------------------
    # Point lookups and writes
    # ------------------------------------------------------------------

    def exists(self, parent_id: str, child_id: str, relationship_type: str) -> bool:
        """Whether the ``(parent, child, type)`` triple is already stored."""
        stmt = select(_rel.c.id).where(
            _rel.c.parent_asset_id == parent_id,
            _rel.c.child_asset_id == child_id,
            _rel.c.relationship_type == relationship_type,
        )
        return self._conn.execute(stmt).first() is not None

    def get(self, relationship_id: str) -> AssetRelationship | None:
        """Fetch one edge by id."""
        stmt = select(_rel).where(_rel.c.id == relationship_id)
        row = self._conn.execute(stmt).mappings().first()
        return _to_relationship(row) if row is not None else None

    def insert(self, relationship: AssetRelationship) -> AssetRelationship:
        """Insert *relationship*.

        Raises ``sqlalchemy.exc.IntegrityError`` if the unique triple is
        already present or either endpoint is missing.
        """
        self._conn.execute(
            insert(_rel).values(
                id=relationship.id,
                parent_asset_id=relationship.parent_asset_id,
                child_asset_id=relationship.child_asset_id,
                relationship_type=str(relationship.relationship_type),
                notes=relationship.notes,
                created_at=relationship.created_at,
            )
        )
        return relationship

    def delete(self, relationship_id: str) -> AssetRelationship | None:
        """Delete one edge. Returns the deleted edge, or None if absent."""
        existing = self.get(relationship_id)
        if existing is None:
            return None
        self._conn.execute(_rel.delete().where(_rel.c.id == relationship_id))
        return existing

    # ------------------------------------------------------------------
    # Neighbor listings
    # ------------------------------------------------------------------

    def neighbors(
        self,
        asset_id: str,
        direction: NeighborDirection,
        relationship_type: str | None = None,
    ) -> list[AssetRelationship]:
        """List edges touching *asset_id* with the peer's tag and name attached.

        ``PARENT`` returns edges where the asset is the child (peers it
        depends on); ``CHILD`` returns edges where it is the parent.
        """
        if direction is NeighborDirection.PARENT:
            own_col, peer_col, peer_side = _rel.c.child_asset_id, _rel.c.parent_asset_id, "parent"
        elif direction is NeighborDirection.CHILD:
            own_col, peer_col, peer_side = _rel.c.parent_asset_id, _rel.c.child_asset_id, "child"
        else:
            msg = f"neighbors() needs a parent or child direction, got {direction!r}"
            raise ValueError(msg)

        stmt = (
            select(
                _rel,
                assets.c.asset_tag.label("peer_tag"),
                assets.c.name.label("peer_name"),
            )
            .join(assets, assets.c.id == peer_col)
            .where(own_col == asset_id)
        )
        if relationship_type is not None:
            stmt = stmt.where(_rel.c.relationship_type == relationship_type)
        stmt = stmt.order_by(_rel.c.created_at, _rel.c.id)

        rows = self._conn.execute(stmt).mappings().all()
        return [_to_relationship(row, peer_side=peer_side) for row in rows]

    def by_type(
        self,
        asset_id: str,
        relationship_type: str,
        direction: NeighborDirection,
    ) -> list[AssetRelationship]:
        """List edges of one type; ``BOTH`` matches either endpoint."""
        if direction is NeighborDirection.PARENT:
            where = _rel.c.parent_asset_id == asset_id
        elif direction is NeighborDirection.CHILD:
            where = _rel.c.child_asset_id == asset_id
        else:
            where = or_(_rel.c.parent_asset_id == asset_id, _rel.c.child_asset_id == asset_id)

        stmt = (
            select(_rel)
            .where(and_(where, _rel.c.relationship_type == relationship_type))
            .order_by(_rel.c.created_at, _rel.c.id)
        )
        rows = self._conn.execute(stmt).mappings().all()
        return [_to_relationship(row) for row in rows]

    # ------------------------------------------------------------------
    # Traversal primitives (one query per visited node)
    # ------------------------------------------------------------------

    def dependency_children(self, asset_id: str) -> list[str]:
        """Child ids of dependency edges where *asset_id* is the parent."""
        stmt = (
            select(_rel.c.child_asset_id)
            .where(
                _rel.c.parent_asset_id == asset_id,
                _rel.c.relationship_type == RelationshipType.DEPENDENCY,
            )
            .order_by(_rel.c.child_asset_id)
        )
        return [str(v) for v in self._conn.execute(stmt).scalars()]

    def dependency_parents(self, asset_id: str) -> list[str]:
        """Parent ids of dependency edges where *asset_id* is the child."""
        stmt = (
            select(_rel.c.parent_asset_id)
            .where(
                _rel.c.child_asset_id == asset_id,
                _rel.c.relationship_type == RelationshipType.DEPENDENCY,
            )
            .order_by(_rel.c.parent_asset_id)
        )
        return [str(v) for v in self._conn.execute(stmt).scalars()]

    def count_dependents(self, asset_id: str) -> int:
        """Number of dependency edges where *asset_id* is the parent."""
        stmt = select(func.count()).where(
            _rel.c.parent_asset_id == asset_id,
            _rel.c.relationship_type == RelationshipType.DEPENDENCY,
        )
        return int(self._conn.execute(stmt).scalar_one())

    def edges_of_types(self, relationship_types: Iterable[str]) -> list[tuple[str, str]]:
        """All ``(parent_id, child_id)`` pairs whose type is in *relationship_types*."""
        stmt = (
            select(_rel.c.parent_asset_id, _rel.c.child_asset_id)
            .where(_rel.c.relationship_type.in_(list(relationship_types)))
            .order_by(_rel.c.parent_asset_id, _rel.c.child_asset_id)
        )
        rows = self._conn.execute(stmt)
        return [(str(row.parent_asset_id), str(row.child_asset_id)) for row in rows]

    def all_dependency_edges(self) -> list[tuple[str, str]]:
        """Every dependency edge, for the global cycle scan."""
        return self.edges_of_types([RelationshipType.DEPENDENCY])
