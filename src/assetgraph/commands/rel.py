"""Command group: create, remove and list asset relationships."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from assetgraph.commands._base import AssetGraphGroup
from assetgraph.domain.types import NeighborDirection, RelationshipType
from assetgraph.services.relationships import RelationshipService

if TYPE_CHECKING:
    from assetgraph.commands._context import AppContext

_REL_EXAMPLES = """\
  assetgraph rel add srv-db-01 app-web-01 --type dependency
  assetgraph rel add rack-a1 srv-db-01 --type component --notes "slot 4"
  assetgraph rel remove 3f0c9a52-8a6e-4f4e-9d3b-2b1e6f0f2a11
  assetgraph rel list srv-db-01 --direction child
  assetgraph rel assets app-web-01 --direction parent --type dependency"""

# Unvalidated at the click layer; the service reports INVALID_* codes.
_TYPE_HELP = "Relationship type: " + ", ".join(t.value for t in RelationshipType) + "."


@click.group(cls=AssetGraphGroup, examples=_REL_EXAMPLES)
@click.pass_obj
def rel(app: AppContext) -> None:
    """Manage typed relationships between assets."""


@rel.command(
    examples="""\
  assetgraph rel add srv-db-01 app-web-01 --type dependency
  assetgraph --json rel add rack-a1 srv-db-01 --type component --actor alice"""
)
@click.argument("parent_id")
@click.argument("child_id")
@click.option("--type", "relationship_type", required=True, help=_TYPE_HELP)
@click.option("--notes", default=None, help="Free-text note stored on the edge.")
@click.option("--actor", "actor_id", default=None, help="Actor recorded in asset history.")
@click.pass_obj
def add(
    app: AppContext,
    parent_id: str,
    child_id: str,
    relationship_type: str,
    notes: str | None,
    actor_id: str | None,
) -> None:
    """Link CHILD_ID to PARENT_ID (for dependencies, the child depends on the parent)."""
    app.emit(
        RelationshipService(app.inventory).create_relationship(
            parent_id, child_id, relationship_type, notes=notes, actor_id=actor_id
        )
    )


@rel.command(
    examples="""\
  assetgraph rel remove 3f0c9a52-8a6e-4f4e-9d3b-2b1e6f0f2a11
  assetgraph rel remove 3f0c9a52-8a6e-4f4e-9d3b-2b1e6f0f2a11 --actor alice"""
)
@click.argument("relationship_id")
@click.option("--actor", "actor_id", default=None, help="Actor recorded in asset history.")
@click.pass_obj
def remove(app: AppContext, relationship_id: str, actor_id: str | None) -> None:
    """Delete a relationship by id."""
    app.emit(
        RelationshipService(app.inventory).delete_relationship(relationship_id, actor_id=actor_id)
    )


@rel.command(
    name="list",
    examples="""\
  assetgraph rel list srv-db-01
  assetgraph rel list app-web-01 --direction parent --type dependency""",
)
@click.argument("asset_id")
@click.option(
    "--direction",
    default=NeighborDirection.CHILD.value,
    show_default=True,
    help="parent: edges to assets this one depends on; child: edges from its dependents.",
)
@click.option("--type", "relationship_type", default=None, help=_TYPE_HELP)
@click.pass_obj
def list_cmd(
    app: AppContext, asset_id: str, direction: str, relationship_type: str | None
) -> None:
    """List relationships on one side of an asset."""
    app.emit(
        RelationshipService(app.inventory).list_relationships(
            asset_id, direction=direction, relationship_type=relationship_type
        )
    )


@rel.command(
    examples="""\
  assetgraph rel assets srv-db-01
  assetgraph -q rel assets app-web-01 --direction parent"""
)
@click.argument("asset_id")
@click.option(
    "--direction",
    default=NeighborDirection.BOTH.value,
    show_default=True,
    help="parent, child, or both.",
)
@click.option("--type", "relationship_type", default=None, help=_TYPE_HELP)
@click.pass_obj
def assets(
    app: AppContext, asset_id: str, direction: str, relationship_type: str | None
) -> None:
    """List assets linked to an asset."""
    app.emit(
        RelationshipService(app.inventory).get_assets_by_relationship(
            asset_id, relationship_type=relationship_type, direction=direction
        )
    )
