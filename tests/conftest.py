"""Shared pytest fixtures and test helpers for assetgraph tests."""

from __future__ import annotations

import json
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy import insert, select
from sqlalchemy.engine import Engine

from assetgraph.config.settings import AssetGraphSettings
from assetgraph.infrastructure.database.engine import init_database
from assetgraph.infrastructure.database.schema import (
    asset_history,
    asset_relationships,
    assets,
)
from assetgraph.infrastructure.inventory import Inventory

_NOW = datetime.now(UTC).isoformat()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's ASSETGRAPH_* environment out of the tests."""
    monkeypatch.delenv("ASSETGRAPH_CONFIG", raising=False)
    monkeypatch.delenv("ASSETGRAPH_ROOT", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def inventory(tmp_path: Path) -> Iterator[Inventory]:
    """Inventory on a temp directory, without a history bus."""
    inv = Inventory(AssetGraphSettings.from_cli(root=tmp_path))
    try:
        yield inv
    finally:
        inv.close()


@pytest.fixture
def synced_inventory(inventory: Inventory) -> Inventory:
    """Inventory whose history bus dispatches inline."""
    inventory.init_event_bus(sync=True, discover=False)
    return inventory


@pytest.fixture
def _isolated_inventory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI opens an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_inventory")`` on command
    test classes.
    """
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def insert_asset(engine: Engine, asset_id: str, **kwargs: Any) -> None:
    """Insert an asset row directly; ``custom_fields`` dicts are JSON-encoded."""
    custom_fields = kwargs.pop("custom_fields", {})
    if not isinstance(custom_fields, str):
        custom_fields = json.dumps(custom_fields)
    values: dict[str, Any] = {
        "id": asset_id,
        "asset_tag": f"TAG-{asset_id}",
        "name": f"Asset {asset_id}",
        "status": "active",
        "custom_fields": custom_fields,
        "created_at": _NOW,
        "updated_at": _NOW,
    }
    values.update(kwargs)
    with engine.begin() as conn:
        conn.execute(insert(assets).values(**values))


def insert_edge(
    engine: Engine,
    parent_id: str,
    child_id: str,
    relationship_type: str = "dependency",
    **kwargs: Any,
) -> str:
    """Insert an edge directly, bypassing the cycle check. Returns its id."""
    edge_id = kwargs.pop("id", f"{parent_id}->{child_id}:{relationship_type}")
    values: dict[str, Any] = {
        "id": edge_id,
        "parent_asset_id": parent_id,
        "child_asset_id": child_id,
        "relationship_type": relationship_type,
        "created_at": _NOW,
    }
    values.update(kwargs)
    with engine.begin() as conn:
        conn.execute(insert(asset_relationships).values(**values))
    return edge_id


def insert_assets(engine: Engine, *asset_ids: str) -> None:
    for asset_id in asset_ids:
        insert_asset(engine, asset_id)


def history_rows(engine: Engine) -> list[dict[str, Any]]:
    """All ``asset_history`` rows, oldest first, with ``new_values`` decoded."""
    with engine.connect() as conn:
        rows = conn.execute(select(asset_history).order_by(asset_history.c.id)).mappings().all()
    out = []
    for row in rows:
        data = dict(row)
        data["new_values"] = json.loads(data["new_values"]) if data["new_values"] else None
        out.append(data)
    return out
