"""AssetRepository — read-only access to the external asset catalog.

assetgraph never writes ``assets``; the catalog owns that table. Only the
two narrow lookups the relationship layer needs live here, plus the
relationship-joined asset listing.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, func, or_, select

from assetgraph.domain.models import Asset
from assetgraph.domain.types import NeighborDirection
from assetgraph.infrastructure.database.schema import asset_relationships, assets

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Connection

_rel = asset_relationships


def _to_asset(row: Any) -> Asset:
    """Build an :class:`Asset` from a row mapping.

    Raises ``ValueError`` if ``custom_fields`` is not valid JSON.
    """
    data = dict(row)
    raw = data.get("custom_fields") or "{}"
    data["custom_fields"] = json.loads(raw)
    return Asset.model_validate(data)


class AssetRepository:
    """Encapsulates SQL for reading ``assets``."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, asset_id: str) -> Asset | None:
        """Fetch one asset by id."""
        row = self._conn.execute(select(assets).where(assets.c.id == asset_id)).mappings().first()
        return _to_asset(row) if row is not None else None

    def exists(self, asset_id: str) -> bool:
        """Whether *asset_id* resolves in the catalog."""
        stmt = select(assets.c.id).where(assets.c.id == asset_id)
        return self._conn.execute(stmt).first() is not None

    def count_existing(self, asset_ids: Iterable[str]) -> int:
        """Count how many of the distinct *asset_ids* exist."""
        ids = sorted(set(asset_ids))
        if not ids:
            return 0
        stmt = select(func.count()).select_from(assets).where(assets.c.id.in_(ids))
        return int(self._conn.execute(stmt).scalar_one())

    def find_by_relationship(
        self,
        asset_id: str,
        direction: NeighborDirection,
        relationship_type: str | None = None,
    ) -> list[Asset]:
        """Assets linked to *asset_id*, distinct and ordered by name.

        ``PARENT`` returns assets *asset_id* depends on, ``CHILD`` the ones
        depending on it, ``BOTH`` every linked asset except itself.
        """
        if direction is NeighborDirection.PARENT:
            on = _rel.c.parent_asset_id == assets.c.id
            where = _rel.c.child_asset_id == asset_id
        elif direction is NeighborDirection.CHILD:
            on = _rel.c.child_asset_id == assets.c.id
            where = _rel.c.parent_asset_id == asset_id
        else:
            on = or_(_rel.c.parent_asset_id == assets.c.id, _rel.c.child_asset_id == assets.c.id)
            where = and_(
                or_(_rel.c.parent_asset_id == asset_id, _rel.c.child_asset_id == asset_id),
                assets.c.id != asset_id,
            )

        stmt = select(assets).distinct().join(_rel, on).where(where)
        if relationship_type is not None:
            stmt = stmt.where(_rel.c.relationship_type == relationship_type)
        stmt = stmt.order_by(assets.c.name, assets.c.id)

        rows = self._conn.execute(stmt).mappings().all()
        return [_to_asset(row) for row in rows]
