"""Command group: dependency trees, impact analysis and cycle scans."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from assetgraph.commands._base import AssetGraphGroup
from assetgraph.services.relationships import RelationshipService

if TYPE_CHECKING:
    from assetgraph.commands._context import AppContext

_GRAPH_EXAMPLES = """\
  assetgraph graph show srv-db-01
  assetgraph graph show srv-db-01 --depth 5
  assetgraph graph impact srv-db-01
  assetgraph graph cycles"""


@click.group(cls=AssetGraphGroup, examples=_GRAPH_EXAMPLES)
@click.pass_obj
def graph(app: AppContext) -> None:
    """Analyze the asset relationship graph."""


@graph.command(
    examples="""\
  assetgraph graph show srv-db-01
  assetgraph graph show srv-db-01 --depth 0
  assetgraph --json graph show srv-db-01 --depth 5"""
)
@click.argument("asset_id")
@click.option(
    "--depth",
    "max_depth",
    default=None,
    type=int,
    help="Dependency tree depth (0-10, default 3).",
)
@click.pass_obj
def show(app: AppContext, asset_id: str, max_depth: int | None) -> None:
    """Show an asset's relationships and dependency trees."""
    app.emit(
        RelationshipService(app.inventory).get_relationship_graph(asset_id, max_depth=max_depth)
    )


@graph.command(
    examples="""\
  assetgraph graph impact srv-db-01
  assetgraph --json graph impact srv-db-01"""
)
@click.argument("asset_id")
@click.pass_obj
def impact(app: AppContext, asset_id: str) -> None:
    """Estimate what breaks if an asset fails."""
    app.emit(RelationshipService(app.inventory).get_asset_impact_analysis(asset_id))


@graph.command(
    examples="""\
  assetgraph graph cycles
  assetgraph -q graph cycles"""
)
@click.pass_obj
def cycles(app: AppContext) -> None:
    """Report every circular dependency currently stored."""
    app.emit(RelationshipService(app.inventory).find_circular_dependencies())
