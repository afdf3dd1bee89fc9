"""Pydantic models for assets, edges, and graph projections.

All models are frozen. They are the payload shapes services serialize into
``ServiceResult.data`` via ``model_dump(mode="json")``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from assetgraph.domain.types import AssetStatus, RelationshipType, RiskLevel


class AssetSummary(BaseModel):
    """Denormalized peer details attached to neighbor listings."""

    model_config = {"frozen": True}

    id: str
    asset_tag: str
    name: str


class Asset(BaseModel):
    """Read-side view of an asset owned by the external catalog."""

    model_config = {"frozen": True}

    id: str
    asset_tag: str
    name: str
    description: str | None = None
    status: str = AssetStatus.ACTIVE
    custom_fields: dict[str, Any] = Field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None


class AssetRelationship(BaseModel):
    """A directed, typed edge between two assets."""

    model_config = {"frozen": True}

    id: str
    parent_asset_id: str
    child_asset_id: str
    relationship_type: RelationshipType
    notes: str | None = None
    created_at: str
    parent_asset: AssetSummary | None = None
    child_asset: AssetSummary | None = None


class DependencyNode(BaseModel):
    """One node of an upstream or downstream dependency tree."""

    model_config = {"frozen": True}

    asset_id: str
    depth: int
    asset: Asset | None = None
    dependencies: list[DependencyNode] = Field(default_factory=list)


class RelationshipGraph(BaseModel):
    """Full relationship neighborhood of a root asset."""

    model_config = {"frozen": True}

    root_asset: Asset
    parents: list[AssetRelationship] = Field(default_factory=list)
    children: list[AssetRelationship] = Field(default_factory=list)
    components: list[AssetRelationship] = Field(default_factory=list)
    related: list[AssetRelationship] = Field(default_factory=list)
    dependencies: dict[str, list[DependencyNode]] = Field(default_factory=dict)


class ImpactAnalysis(BaseModel):
    """What breaks if an asset fails, and how badly."""

    model_config = {"frozen": True}

    asset_id: str
    direct_dependents: int
    total_downstream_assets: int
    critical_assets: list[str] = Field(default_factory=list)
    is_single_point_of_failure: bool
    risk_level: RiskLevel
