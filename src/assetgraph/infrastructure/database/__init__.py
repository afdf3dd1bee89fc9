"""SQLite database engine and schema via SQLAlchemy Core."""

from assetgraph.infrastructure.database.engine import (
    create_db_engine,
    default_db_path,
    init_database,
)
from assetgraph.infrastructure.database.schema import (
    asset_history,
    asset_relationships,
    assets,
    event_wal,
    metadata,
)

__all__ = [
    "asset_history",
    "asset_relationships",
    "assets",
    "create_db_engine",
    "default_db_path",
    "event_wal",
    "init_database",
    "metadata",
]
