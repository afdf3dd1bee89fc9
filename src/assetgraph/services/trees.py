"""DependencyTreeBuilder — bounded-depth trees and neighbor listings.

Trees carry no cycle protection of their own: ``max_depth`` is the only
termination guarantee, so callers must pass a small finite bound.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from assetgraph.domain.models import Asset, DependencyNode, RelationshipGraph
from assetgraph.domain.types import NeighborDirection, RelationshipType, TreeDirection

if TYPE_CHECKING:
    from assetgraph.infrastructure.inventory import InventorySession

logger = logging.getLogger(__name__)


class DependencyTreeBuilder:
    """Builds upstream/downstream trees and the full relationship graph."""

    def __init__(self, session: InventorySession) -> None:
        self._session = session

    def build_tree(
        self,
        asset_id: str,
        direction: TreeDirection | str,
        max_depth: int,
        current_depth: int = 0,
    ) -> list[DependencyNode]:
        """Recursively collect dependency peers up to *max_depth* levels.

        ``upstream`` yields the assets *asset_id* depends on (its parents),
        ``downstream`` the assets depending on it (its children).

        Raises:
            ValueError: *direction* is not ``upstream`` or ``downstream``.
        """
        direction = TreeDirection(direction)
        if current_depth >= max_depth:
            return []

        relationships = self._session.relationships
        if direction is TreeDirection.UPSTREAM:
            peers = relationships.dependency_parents(asset_id)
        else:
            peers = relationships.dependency_children(asset_id)

        return [
            DependencyNode(
                asset_id=peer_id,
                depth=current_depth + 1,
                asset=self._fetch_asset(peer_id),
                dependencies=self.build_tree(peer_id, direction, max_depth, current_depth + 1),
            )
            for peer_id in peers
        ]

    def build_graph(self, asset_id: str, max_depth: int) -> RelationshipGraph | None:
        """Assemble the relationship neighborhood of *asset_id*.

        Returns None if the root asset does not exist.
        """
        root = self._session.assets.get(asset_id)
        if root is None:
            return None

        relationships = self._session.relationships
        dependencies: dict[str, list[DependencyNode]] = {}
        if max_depth > 0:
            dependencies[TreeDirection.UPSTREAM] = self.build_tree(
                asset_id, TreeDirection.UPSTREAM, max_depth
            )
            dependencies[TreeDirection.DOWNSTREAM] = self.build_tree(
                asset_id, TreeDirection.DOWNSTREAM, max_depth
            )

        return RelationshipGraph(
            root_asset=root,
            parents=relationships.neighbors(asset_id, NeighborDirection.PARENT),
            children=relationships.neighbors(asset_id, NeighborDirection.CHILD),
            components=relationships.by_type(
                asset_id, RelationshipType.COMPONENT, NeighborDirection.PARENT
            ),
            related=relationships.by_type(
                asset_id, RelationshipType.RELATED, NeighborDirection.BOTH
            ),
            dependencies=dependencies,
        )

    def _fetch_asset(self, asset_id: str) -> Asset | None:
        """Best-effort detail lookup; a failure leaves the node without details."""
        try:
            return self._session.assets.get(asset_id)
        except (SQLAlchemyError, ValueError):
            logger.warning("Could not load details for asset %s", asset_id, exc_info=True)
            return None
