"""Connection-bound repositories for relationship and asset reads/writes."""

from assetgraph.infrastructure.repositories.assets import AssetRepository
from assetgraph.infrastructure.repositories.relationships import RelationshipRepository

__all__ = ["AssetRepository", "RelationshipRepository"]
