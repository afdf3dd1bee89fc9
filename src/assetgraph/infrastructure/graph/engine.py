"""GraphEngine — per-call NetworkX projection of typed asset edges.

Built fresh on every request; nothing is cached across calls, so a
projection always reflects the connection it was read from. Used where an
algorithm wants the whole edge set in one fetch (the critical-path walk)
instead of one query per visited node.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, TypeAlias

import networkx as nx
from sqlalchemy import select

from assetgraph.domain.impact import is_flagged_critical
from assetgraph.domain.types import RelationshipType
from assetgraph.infrastructure.database.schema import assets
from assetgraph.infrastructure.repositories.relationships import RelationshipRepository

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Connection

logger = logging.getLogger(__name__)

# Parallel edges are kept: the same pair may be linked under several types.
_Graph: TypeAlias = nx.MultiDiGraph


class GraphEngine:
    """Builds edge-type-filtered projections from the relationship table."""

    def dependency_graph(
        self,
        conn: Connection,
        edge_types: Iterable[str] = (RelationshipType.DEPENDENCY,),
    ) -> _Graph:
        """Project edges whose type is in *edge_types* onto a MultiDiGraph.

        Only assets touched by a selected edge become nodes. Nodes found in
        the catalog carry ``status`` and ``is_critical`` attributes.
        """
        g: _Graph = nx.MultiDiGraph()
        g.add_edges_from(RelationshipRepository(conn).edges_of_types(edge_types))

        if g.number_of_nodes() == 0:
            return g

        rows = conn.execute(
            select(assets.c.id, assets.c.status, assets.c.custom_fields).where(
                assets.c.id.in_(list(g.nodes))
            )
        )
        for row in rows:
            g.nodes[row.id]["status"] = row.status
            g.nodes[row.id]["is_critical"] = _flagged_critical(row.custom_fields, row.id)
        return g


def _flagged_critical(raw: str | None, asset_id: str) -> bool:
    """Decode the ``custom_fields`` column; unreadable JSON is not critical."""
    if not raw:
        return False
    try:
        fields = json.loads(raw)
    except ValueError:
        logger.debug("Unreadable custom_fields for asset %s", asset_id)
        return False
    if not isinstance(fields, dict):
        return False
    return is_flagged_critical(fields)
