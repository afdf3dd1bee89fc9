"""ImpactAnalyzer — what depends on an asset, and how risky its failure is."""

from __future__ import annotations

from typing import TYPE_CHECKING

from assetgraph.domain.impact import classify_risk, walk_dependency_chain
from assetgraph.domain.models import ImpactAnalysis
from assetgraph.domain.types import AssetStatus, RiskLevel

if TYPE_CHECKING:
    from assetgraph.config.models import GraphConfig
    from assetgraph.infrastructure.graph.engine import GraphEngine
    from assetgraph.infrastructure.inventory import InventorySession


class ImpactAnalyzer:
    """Downstream impact, critical-path discovery, and risk classification.

    Dependents of an asset are the children of its ``dependency`` edges;
    every walk here moves forward along ``parent_asset_id = current``.
    """

    def __init__(
        self,
        session: InventorySession,
        graph: GraphEngine,
        config: GraphConfig,
    ) -> None:
        self._session = session
        self._graph = graph
        self._config = config

    def direct_dependents(self, asset_id: str) -> int:
        return self._session.relationships.count_dependents(asset_id)

    def downstream_count(self, asset_id: str) -> int:
        """Distinct assets reachable forward from *asset_id*, excluding itself.

        One visited set spans the whole walk, so shared descendants count
        once and a stray cycle cannot loop forever.
        """
        visited: set[str] = {asset_id}
        stack = [asset_id]
        while stack:
            current = stack.pop()
            for child_id in self._session.relationships.dependency_children(current):
                if child_id not in visited:
                    visited.add(child_id)
                    stack.append(child_id)
        return len(visited) - 1

    def critical_path_assets(self, root_id: str) -> list[str]:
        """Active assets on the root's dependency chains that are critical.

        An asset on a chain is critical if it has more than one direct
        dependent along the configured edge types, or is flagged
        ``is_critical`` in its custom fields.
        """
        g = self._graph.dependency_graph(self._session.conn, self._config.critical_path_types)
        if root_id not in g:
            return []

        on_chain = walk_dependency_chain(
            root_id,
            g.successors,
            max_depth=self._config.critical_path_max_depth,
        )
        critical = [
            node
            for node in on_chain
            if (g.out_degree(node) > 1 or g.nodes[node].get("is_critical", False))
            and g.nodes[node].get("status") == AssetStatus.ACTIVE
        ]
        return sorted(critical)

    def is_single_point_of_failure(self, asset_id: str) -> bool:
        """Coarse signal: anything depends on this asset at all."""
        return self.direct_dependents(asset_id) > 0

    @staticmethod
    def risk_level(direct_dependents: int, total_downstream: int, is_spof: bool) -> RiskLevel:
        return classify_risk(direct_dependents, total_downstream, is_spof)

    def analyze(self, asset_id: str) -> ImpactAnalysis:
        """Compute a fresh :class:`ImpactAnalysis` for *asset_id*."""
        direct = self.direct_dependents(asset_id)
        total = self.downstream_count(asset_id)
        is_spof = direct > 0
        return ImpactAnalysis(
            asset_id=asset_id,
            direct_dependents=direct,
            total_downstream_assets=total,
            critical_assets=self.critical_path_assets(asset_id),
            is_single_point_of_failure=is_spof,
            risk_level=self.risk_level(direct, total, is_spof),
        )
