"""Pluggy hook specifications for relationship lifecycle notifications.

History is a secondary effect: hooks run after the relationship change has
committed, and a failing hook never undoes it.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("assetgraph")


class AssetGraphHookSpec:
    """Hook specifications for the assetgraph plugin system."""

    @hookspec
    def record_history(
        self,
        asset_id: str,
        action: str,
        actor_id: str | None,
        payload: dict[str, Any],
    ) -> None:
        """Append one immutable history record for *asset_id*.

        *action* is ``relationship_added`` or ``relationship_removed``;
        *payload* carries ``relationship_type``, ``peer_asset_id``,
        ``relationship_id`` and ``action``.
        """
