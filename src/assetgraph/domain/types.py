"""Relationship, direction, and classification enums.

Directionality matters: for ``dependency`` edges the child depends on the
parent, so a parent's *dependents* are its children.
"""

from __future__ import annotations

from enum import StrEnum


class RelationshipType(StrEnum):
    """Edge types between two assets."""

    COMPONENT = "component"
    DEPENDENCY = "dependency"
    RELATED = "related"
    UPGRADE = "upgrade"


class NeighborDirection(StrEnum):
    """Which end of an edge the *peer* asset sits on.

    ``parent`` selects edges where the asset is the child (the peers are
    assets it depends on); ``child`` selects edges where the asset is the
    parent (the peers depend on it).
    """

    PARENT = "parent"
    CHILD = "child"
    BOTH = "both"


class TreeDirection(StrEnum):
    """Dependency tree orientation."""

    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"


class AssetStatus(StrEnum):
    """Lifecycle states owned by the asset catalog."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"
    DISPOSED = "disposed"


class RiskLevel(StrEnum):
    """Impact severity buckets, lowest to highest."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class HistoryAction(StrEnum):
    """Actions recorded on an asset's history when its edges change."""

    RELATIONSHIP_ADDED = "relationship_added"
    RELATIONSHIP_REMOVED = "relationship_removed"


def parse_relationship_type(raw: str) -> RelationshipType | None:
    """Return the matching :class:`RelationshipType`, or None if unknown."""
    try:
        return RelationshipType(raw)
    except ValueError:
        return None
