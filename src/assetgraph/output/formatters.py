"""Adapt a ServiceResult to the requested output mode.

Three modes: ``--json`` (the full serialized result), ``--quiet`` (ids
only), and Rich-rendered human output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from assetgraph.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from assetgraph.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    JSON takes precedence over quiet, which takes precedence over Rich.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2, exclude_none=False)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
