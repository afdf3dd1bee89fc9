"""Tests for domain enums and frozen models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from assetgraph.domain.models import Asset, AssetRelationship, DependencyNode
from assetgraph.domain.types import RelationshipType, parse_relationship_type


class TestParseRelationshipType:
    @pytest.mark.parametrize("raw", ["component", "dependency", "related", "upgrade"])
    def test_valid(self, raw: str) -> None:
        assert parse_relationship_type(raw) == RelationshipType(raw)

    @pytest.mark.parametrize("raw", ["depends_on", "requires", "", "Dependency"])
    def test_invalid(self, raw: str) -> None:
        assert parse_relationship_type(raw) is None


class TestAsset:
    def test_frozen(self) -> None:
        asset = Asset(id="a", asset_tag="T", name="n")
        with pytest.raises(ValidationError):
            asset.name = "other"  # type: ignore[misc]


class TestAssetRelationship:
    def test_rejects_unknown_type(self) -> None:
        with pytest.raises(ValidationError):
            AssetRelationship(
                id="r",
                parent_asset_id="a",
                child_asset_id="b",
                relationship_type="depends_on",  # type: ignore[arg-type]
                created_at="2025-01-01T00:00:00+00:00",
            )

    def test_json_dump_uses_type_value(self) -> None:
        rel = AssetRelationship(
            id="r",
            parent_asset_id="a",
            child_asset_id="b",
            relationship_type=RelationshipType.DEPENDENCY,
            created_at="2025-01-01T00:00:00+00:00",
        )
        dumped = rel.model_dump(mode="json")
        assert dumped["relationship_type"] == "dependency"
        assert dumped["parent_asset"] is None


class TestDependencyNode:
    def test_nested_dump(self) -> None:
        node = DependencyNode(
            asset_id="a",
            depth=1,
            dependencies=[DependencyNode(asset_id="b", depth=2)],
        )
        dumped = node.model_dump(mode="json")
        assert dumped["dependencies"][0]["asset_id"] == "b"
        assert dumped["dependencies"][0]["dependencies"] == []
