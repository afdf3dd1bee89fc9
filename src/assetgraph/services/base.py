"""BaseService — foundation for assetgraph services.

Every service receives an :class:`Inventory` at construction time. The
inventory provides read sessions, serialized write transactions, the graph
projection engine, and the history event bus.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from assetgraph.infrastructure.inventory import Inventory

logger = logging.getLogger(__name__)

RECORD_HISTORY_HOOK = "record_history"


class BaseService:
    """Base for service-layer classes."""

    def __init__(self, inventory: Inventory) -> None:
        self._inventory = inventory

    def _record_history(
        self,
        asset_id: str,
        action: str,
        actor_id: str | None,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Emit one history notification. No-op without an event bus.

        INVARIANT: History failures are warnings, never errors.
        """
        bus = self._inventory.event_bus
        if bus is None:
            return
        try:
            bus.dispatch(
                RECORD_HISTORY_HOOK,
                {
                    "asset_id": asset_id,
                    "action": action,
                    "actor_id": actor_id,
                    "payload": payload,
                },
            )
        except Exception:
            logger.warning("History dispatch failed for asset %s", asset_id, exc_info=True)
            warnings.append(f"History not recorded for asset {asset_id}")
