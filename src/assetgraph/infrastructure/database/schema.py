"""SQLAlchemy Core table definitions for the assetgraph database.

``assets`` is a read-side projection of the external asset catalog; this
package only ever reads it. ``asset_relationships`` is owned here.
``asset_history`` is append-only and written by the built-in history plugin.
"""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

assets = Table(
    "assets",
    metadata,
    Column("id", Text, primary_key=True),
    Column("asset_tag", Text, nullable=False, unique=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("status", Text, nullable=False, default="active", server_default="active"),
    Column("custom_fields", Text, nullable=False, default="{}", server_default="{}"),  # JSON
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

asset_relationships = Table(
    "asset_relationships",
    metadata,
    Column("id", Text, primary_key=True),
    Column(
        "parent_asset_id",
        Text,
        ForeignKey("assets.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "child_asset_id",
        Text,
        ForeignKey("assets.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("relationship_type", Text, nullable=False),
    Column("notes", Text),
    Column("created_at", Text, nullable=False),
    UniqueConstraint("parent_asset_id", "child_asset_id", "relationship_type"),
    CheckConstraint(
        "relationship_type IN ('component', 'dependency', 'related', 'upgrade')",
        name="ck_relationship_type",
    ),
    CheckConstraint("parent_asset_id <> child_asset_id", name="ck_no_self_reference"),
)

asset_history = Table(
    "asset_history",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("asset_id", Text, nullable=False),
    Column("action", Text, nullable=False),
    Column("actor_id", Text),
    Column("new_values", Text),  # JSON
    Column("created_at", Text, nullable=False),
)

event_wal = Table(
    "event_wal",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hook_name", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON
    Column("status", Text, nullable=False),
    Column("error", Text),
    Column("retries", Integer, default=0, server_default="0"),
    Column("created", Text, nullable=False),
    Column("completed", Text),
)

# ---------------------------------------------------------------------------
# Indexes for traversal lookups
# ---------------------------------------------------------------------------

Index("ix_assets_status", assets.c.status)
Index("ix_relationships_parent", asset_relationships.c.parent_asset_id)
Index("ix_relationships_child", asset_relationships.c.child_asset_id)
Index("ix_relationships_type", asset_relationships.c.relationship_type)
Index("ix_asset_history_asset_id", asset_history.c.asset_id)
Index("ix_event_wal_status", event_wal.c.status)
