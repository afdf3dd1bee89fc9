"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO); the caller
extracts the text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from assetgraph.output.console import (
    create_console,
    get_output,
    style_for_relationship,
    style_for_risk,
)

if TYPE_CHECKING:
    from rich.console import Console

    from assetgraph.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        ids = [str(item["id"]) for item in items if isinstance(item, dict) and "id" in item]
        return "\n".join(ids)

    cycles = result.data.get("cycles")
    if isinstance(cycles, list):
        return "\n".join(" -> ".join(cycle) for cycle in cycles)

    for key in ("id", "relationship_id", "asset_id"):
        if key in result.data:
            return str(result.data[key])
    root = result.data.get("root_asset")
    if isinstance(root, dict) and "id" in root:
        return str(root["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="ag.ok")
    op = Text(f"  {result.op}", style="ag.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="ag.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="ag.id")
    elif key == "relationship_type":
        v = Text(str(value), style=style_for_relationship(str(value)))
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block, including the telemetry span tree."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    """Render a hierarchical span tree with colour-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{ak}={av}" for ak, av in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _asset_label(asset: dict[str, Any] | None, fallback_id: str) -> Text:
    """``TAG  name  (id)``, or just the id when details are missing."""
    if not asset:
        return Text(fallback_id, style="ag.id")
    label = Text()
    label.append(str(asset.get("asset_tag", "")), style="ag.tag")
    label.append(f"  {asset.get('name', '')}  ")
    label.append(f"({asset.get('id', fallback_id)})", style="ag.key")
    return label


def _edge_peer(edge: dict[str, Any]) -> tuple[str, dict[str, Any] | None]:
    """The peer end of a neighbor-listing edge."""
    if edge.get("parent_asset"):
        return str(edge["parent_asset_id"]), edge["parent_asset"]
    if edge.get("child_asset"):
        return str(edge["child_asset_id"]), edge["child_asset"]
    return str(edge.get("child_asset_id", "")), None


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="ag.error")
    op = Text(f"  {result.op}", style="ag.op")
    code = Text(f" [{err.code}]" if err else "", style="ag.key")
    console.print(label, op, code, Text(" - "), msg)
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Mutation renderers ────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create_relationship and delete_relationship results."""
    _status_line(console, result)
    for key in (
        "id",
        "relationship_id",
        "parent_asset_id",
        "child_asset_id",
        "relationship_type",
        "notes",
    ):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


# ── Listing renderers ─────────────────────────────────────────────────


def _render_edge_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_relationships as a table of edges and peers."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="ag.id", no_wrap=True)
    table.add_column("Type")
    table.add_column("Peer")
    table.add_column("Notes")
    if verbose:
        table.add_column("Created", style="dim")

    for edge in items:
        peer_id, peer = _edge_peer(edge)
        rel_type = str(edge.get("relationship_type", ""))
        row: list[Any] = [
            str(edge.get("id", "")),
            Text(rel_type, style=style_for_relationship(rel_type)),
            _asset_label(peer, peer_id),
            str(edge.get("notes") or ""),
        ]
        if verbose:
            row.append(str(edge.get("created_at", "")))
        table.add_row(*row)

    console.print(table)
    count = result.data.get("count", len(items))
    console.print(f"\n{count} relationships ({result.data.get('direction')})")


def _render_asset_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render get_assets_by_relationship as an asset table."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="ag.id", no_wrap=True)
    table.add_column("Tag", style="ag.tag")
    table.add_column("Name")
    table.add_column("Status")
    if verbose:
        table.add_column("Updated", style="dim")

    for asset in items:
        row = [
            str(asset.get("id", "")),
            str(asset.get("asset_tag", "")),
            str(asset.get("name", "")),
            str(asset.get("status", "")),
        ]
        if verbose:
            row.append(str(asset.get("updated_at") or ""))
        table.add_row(*row)

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} assets")


# ── Graph renderers ───────────────────────────────────────────────────


def _add_dependency_nodes(branch: Tree, nodes: list[dict[str, Any]]) -> None:
    for node in nodes:
        label = _asset_label(node.get("asset"), str(node.get("asset_id", "?")))
        label.append(f"  depth {node.get('depth', '?')}", style="dim")
        _add_dependency_nodes(branch.add(label), node.get("dependencies", []))


def _render_relationship_graph(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render get_relationship_graph as a Rich tree."""
    d = result.data
    root = d.get("root_asset") or {}
    tree = Tree(_asset_label(root, str(root.get("id", "?"))))

    for key in ("parents", "children", "components", "related"):
        edges = d.get(key, [])
        branch = tree.add(Text(f"{key} ({len(edges)})", style="bold"))
        for edge in edges:
            peer_id, peer = _edge_peer(edge)
            rel_type = str(edge.get("relationship_type", ""))
            label = Text(f"{rel_type}  ", style=style_for_relationship(rel_type))
            label.append_text(_asset_label(peer, peer_id))
            branch.add(label)

    dependencies = d.get("dependencies", {})
    for direction in ("upstream", "downstream"):
        if direction in dependencies:
            branch = tree.add(Text(direction, style="bold"))
            _add_dependency_nodes(branch, dependencies[direction])

    console.print(tree)
    console.print(f"\nmax depth: {d.get('max_depth', '?')}")
    if verbose:
        _render_meta(console, result)


def _render_impact(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render get_asset_impact_analysis."""
    d = result.data
    _status_line(console, result)
    _field(console, "asset_id", d.get("asset_id", ""))
    _field(console, "direct_dependents", d.get("direct_dependents", 0))
    _field(console, "total_downstream_assets", d.get("total_downstream_assets", 0))
    _field(console, "single_point_of_failure", d.get("is_single_point_of_failure", False))

    risk = str(d.get("risk_level", ""))
    console.print(Text.assemble(("  risk_level: ", "ag.key"), (risk, style_for_risk(risk))))

    critical = d.get("critical_assets", [])
    if critical:
        console.print(Text("  critical_assets:", style="ag.key"))
        for asset_id in critical:
            console.print(f"    [ag.id]{asset_id}[/ag.id]")
    if verbose:
        _render_meta(console, result)


def _render_cycles(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render find_circular_dependencies as one chain per cycle."""
    cycles = result.data.get("cycles", [])
    if not cycles:
        console.print("[ag.ok]No circular dependencies.[/ag.ok]")
        return

    console.print(f"[ag.warning]{len(cycles)} circular dependencies[/ag.warning]")
    for cycle in cycles:
        chain = " -> ".join(f"[ag.id]{asset_id}[/ag.id]" for asset_id in [*cycle, cycle[0]])
        console.print(f"  {chain}")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line plus all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "create_relationship": _render_mutation,
    "delete_relationship": _render_mutation,
    "list_relationships": _render_edge_table,
    "get_assets_by_relationship": _render_asset_table,
    "get_relationship_graph": _render_relationship_graph,
    "get_asset_impact_analysis": _render_impact,
    "find_circular_dependencies": _render_cycles,
}
