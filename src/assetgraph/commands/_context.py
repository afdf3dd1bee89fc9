"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Owns lazy Inventory construction and result emission
(stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from assetgraph.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from assetgraph.config.settings import AssetGraphSettings
    from assetgraph.infrastructure.inventory import Inventory
    from assetgraph.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The inventory is created on first use, so ``--help`` and ``--version``
    never open the database.
    """

    def __init__(self, settings: AssetGraphSettings) -> None:
        self.settings = settings
        self._inventory: Inventory | None = None

        from assetgraph.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from assetgraph.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def inventory(self) -> Inventory:
        """The inventory (created lazily, with its history bus wired up)."""
        if self._inventory is None:
            from assetgraph.config.logging import bind_command
            from assetgraph.infrastructure.inventory import Inventory

            ctx = click.get_current_context(silent=True)
            if ctx is not None:
                bind_command(" ".join(ctx.command_path.split()[1:]))
            self._inventory = Inventory(self.settings)
            self._inventory.init_event_bus(sync=self.settings.sync)
        return self._inventory

    def emit(self, result: ServiceResult) -> None:
        """Print a ServiceResult with the right stream and exit code.

        Success goes to stdout; warnings go to stderr outside JSON mode.
        Failure goes to stderr and exits with status 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def close(self) -> None:
        """Flush pending history and release the database."""
        if self._inventory is not None:
            self._inventory.close()
            self._inventory = None
