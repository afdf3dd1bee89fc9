"""Pure impact-analysis rules: critical flag, risk thresholds, critical-path walk."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from assetgraph.domain.types import RiskLevel

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

CRITICAL_DOWNSTREAM_THRESHOLD = 10
HIGH_DOWNSTREAM_THRESHOLD = 5


def is_flagged_critical(custom_fields: Mapping[str, Any]) -> bool:
    """Whether an asset's ``custom_fields.is_critical`` reads as true.

    Accepts the JSON boolean and any casing of the string ``"true"``.

    Examples:
        >>> is_flagged_critical({"is_critical": "TRUE"})
        True
        >>> is_flagged_critical({"is_critical": False})
        False
        >>> is_flagged_critical({})
        False
    """
    return str(custom_fields.get("is_critical", "")).lower() == "true"


def classify_risk(direct_dependents: int, total_downstream: int, is_spof: bool) -> RiskLevel:
    """Bucket an asset's failure impact.

    Examples:
        >>> classify_risk(0, 0, False)
        <RiskLevel.LOW: 'low'>
        >>> classify_risk(0, 11, True)
        <RiskLevel.CRITICAL: 'critical'>
    """
    if is_spof and total_downstream > CRITICAL_DOWNSTREAM_THRESHOLD:
        return RiskLevel.CRITICAL
    if total_downstream > HIGH_DOWNSTREAM_THRESHOLD:
        return RiskLevel.HIGH
    if direct_dependents > 0:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def walk_dependency_chain(
    root_id: str,
    successors: Callable[[str], Iterable[str]],
    *,
    max_depth: int,
) -> set[str]:
    """Collect every asset that is the parent of an edge on a chain from *root_id*.

    Enumerates paths, not nodes: an asset is skipped only if it already sits
    on the current path, so the walk stays finite on cyclic input. Edges
    deeper than *max_depth* are never followed.
    """
    discovered: set[str] = set()
    stack: list[tuple[str, int, tuple[str, ...]]] = [(root_id, 1, (root_id,))]

    while stack:
        node, depth, path = stack.pop()
        for child in successors(node):
            discovered.add(node)
            if depth < max_depth and child not in path:
                stack.append((child, depth + 1, (*path, child)))

    return discovered
