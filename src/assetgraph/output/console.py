"""Rich Console factory and theme for assetgraph output.

Consoles render into a StringIO buffer so ``format_result() -> str`` stays
a plain string function. Rich drops colour codes when no terminal is
attached (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ASSETGRAPH_THEME = Theme(
    {
        "ag.ok": "bold green",
        "ag.error": "bold red",
        "ag.warning": "bold yellow",
        "ag.op": "bold cyan",
        "ag.key": "dim",
        "ag.id": "bold blue",
        "ag.tag": "bold",
        "ag.type.component": "cyan",
        "ag.type.dependency": "yellow",
        "ag.type.related": "green",
        "ag.type.upgrade": "magenta",
        "ag.risk.low": "green",
        "ag.risk.medium": "yellow",
        "ag.risk.high": "bold yellow",
        "ag.risk.critical": "bold red",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=ASSETGRAPH_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_relationship(relationship_type: str) -> str:
    """Theme style for an edge type; empty for unknown types."""
    style = f"ag.type.{relationship_type}"
    return style if style in ASSETGRAPH_THEME.styles else ""


def style_for_risk(risk_level: str) -> str:
    style = f"ag.risk.{risk_level}"
    return style if style in ASSETGRAPH_THEME.styles else ""
