"""Subcommand modules for assetgraph.

``register_commands()`` imports command modules lazily so
``assetgraph --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``rel`` and ``graph`` groups on the root CLI group."""
    from assetgraph.commands.graph import graph
    from assetgraph.commands.rel import rel

    cli.add_command(rel)
    cli.add_command(graph)
