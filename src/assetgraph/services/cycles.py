"""CycleChecker — keeps the dependency subgraph acyclic.

Only ``dependency`` edges are checked; ``related``, ``component`` and
``upgrade`` edges may loop freely.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from assetgraph.domain.cycles import closes_cycle, find_cycles
from assetgraph.domain.types import RelationshipType

if TYPE_CHECKING:
    from assetgraph.infrastructure.inventory import InventorySession


class CycleChecker:
    """Local pre-insert check and global diagnostic scan."""

    def __init__(self, session: InventorySession) -> None:
        self._session = session

    def would_create_cycle(self, parent_id: str, child_id: str, relationship_type: str) -> bool:
        """True if ``parent_id -> child_id`` of this type would close a dependency loop.

        Walks forward from the child one query per visited asset.
        """
        if relationship_type != RelationshipType.DEPENDENCY:
            return False
        return closes_cycle(parent_id, child_id, self._session.relationships.dependency_children)

    def find_cycles(self) -> list[list[str]]:
        """All dependency cycles currently stored, as lists of asset ids."""
        adjacency: dict[str, list[str]] = {}
        for parent_id, child_id in self._session.relationships.all_dependency_edges():
            adjacency.setdefault(parent_id, []).append(child_id)
        return find_cycles(adjacency)
