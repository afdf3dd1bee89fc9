"""Click classes for assetgraph commands.

Each ``rel`` and ``graph`` command carries copy-pasteable invocations with
realistic asset ids. They print on ``--examples`` rather than inside
``--help``; the help text ends with a pointer to them instead.
"""

from __future__ import annotations

import textwrap
from typing import Any

import click

_EXAMPLES_HINT = "Run with --examples for sample invocations."


def _examples_option(examples: str) -> click.Option:
    """Eager flag that prints *examples* and exits before argument checks."""

    def _show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(textwrap.dedent(examples).rstrip())
        ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=_show,
        help="Show usage examples and exit.",
    )


class _ExamplesMixin:
    """Adds ``examples=`` to a Click command or group constructor."""

    examples: str | None

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))  # type: ignore[attr-defined]

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        super().format_epilog(ctx, formatter)  # type: ignore[misc]
        if self.examples:
            formatter.write_paragraph()
            formatter.write_text(_EXAMPLES_HINT)


class AssetGraphCommand(_ExamplesMixin, click.Command):
    """Leaf command (``rel add``, ``graph show``, ...)."""


class AssetGraphGroup(_ExamplesMixin, click.Group):
    """Command group whose subcommands are :class:`AssetGraphCommand`."""

    command_class = AssetGraphCommand
