"""Built-in history sink: appends relationship events to ``asset_history``.

Registered by the inventory when ``[history] enabled`` is true. Rows are
never updated or deleted.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import pluggy
from sqlalchemy import insert

from assetgraph.infrastructure.database.schema import asset_history
from assetgraph.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

hookimpl = pluggy.HookimplMarker("assetgraph")

logger = logging.getLogger(__name__)


class HistoryPlugin:
    """Persist each ``record_history`` call as one history row."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @hookimpl
    def record_history(
        self,
        asset_id: str,
        action: str,
        actor_id: str | None,
        payload: dict[str, Any],
    ) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                insert(asset_history).values(
                    asset_id=asset_id,
                    action=action,
                    actor_id=actor_id,
                    new_values=json.dumps(payload, sort_keys=True),
                    created_at=now_iso(),
                )
            )
        logger.debug("History recorded: %s %s", asset_id, action)
