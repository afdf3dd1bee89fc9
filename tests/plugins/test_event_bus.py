"""Tests for EventBus — WAL-backed history dispatch."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pluggy
import pytest
from sqlalchemy import select
from sqlalchemy.engine import Engine

from assetgraph.infrastructure.database.engine import init_database
from assetgraph.infrastructure.database.schema import event_wal
from assetgraph.plugins.event_bus import EventBus
from assetgraph.plugins.manager import PluginManager

hookimpl = pluggy.HookimplMarker("assetgraph")

_PAYLOAD: dict[str, Any] = {
    "asset_id": "db",
    "action": "relationship_added",
    "actor_id": "alice",
    "payload": {"peer_asset_id": "app", "relationship_type": "dependency"},
}


class RecordingPlugin:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    @hookimpl
    def record_history(
        self, asset_id: str, action: str, actor_id: str | None, payload: dict[str, Any]
    ) -> None:
        self.calls.append(
            {"asset_id": asset_id, "action": action, "actor_id": actor_id, "payload": payload}
        )


class FailingPlugin:
    @hookimpl
    def record_history(
        self, asset_id: str, action: str, actor_id: str | None, payload: dict[str, Any]
    ) -> None:
        msg = "history store offline"
        raise RuntimeError(msg)


@pytest.fixture
def engine(tmp_path: Path) -> Iterator[Engine]:
    eng = init_database(tmp_path)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture
def recorder_pm() -> tuple[PluginManager, RecordingPlugin]:
    pm = PluginManager()
    recorder = RecordingPlugin()
    pm.register_plugin(recorder, name="recorder")
    return pm, recorder


@pytest.fixture
def failer_pm() -> PluginManager:
    pm = PluginManager()
    pm.register_plugin(FailingPlugin(), name="failer")
    return pm


def _wal_row(engine: Engine, event_id: int) -> Any:
    with engine.connect() as conn:
        return conn.execute(select(event_wal).where(event_wal.c.id == event_id)).fetchone()


class TestEventBusWAL:
    def test_dispatch_writes_completed_row(self, engine: Engine, recorder_pm) -> None:
        pm, recorder = recorder_pm
        event_id = EventBus(engine, pm, sync=True).dispatch("record_history", _PAYLOAD)

        row = _wal_row(engine, event_id)
        assert row.hook_name == "record_history"
        assert row.status == "completed"
        assert row.retries == 0
        assert row.completed is not None
        assert json.loads(row.payload) == _PAYLOAD
        assert recorder.calls == [_PAYLOAD]

    def test_status(self, engine: Engine, recorder_pm) -> None:
        pm, _ = recorder_pm
        bus = EventBus(engine, pm, sync=True)
        event_id = bus.dispatch("record_history", _PAYLOAD)
        assert bus.status(event_id) == "completed"
        assert bus.status(9999) is None

    def test_unknown_hook_completes(self, engine: Engine) -> None:
        bus = EventBus(engine, PluginManager(), sync=True)
        event_id = bus.dispatch("no_such_hook", {"x": 1})
        assert bus.status(event_id) == "completed"


class TestEventBusFailures:
    def test_failure_is_recorded_not_raised(self, engine: Engine, failer_pm) -> None:
        bus = EventBus(engine, failer_pm, sync=True, max_retries=3)
        event_id = bus.dispatch("record_history", _PAYLOAD)

        row = _wal_row(engine, event_id)
        assert row.status == "failed"
        assert "history store offline" in row.error
        assert row.retries == 1

    def test_dead_letter_after_max_retries(self, engine: Engine, failer_pm) -> None:
        bus = EventBus(engine, failer_pm, sync=True, max_retries=1)
        event_id = bus.dispatch("record_history", _PAYLOAD)
        assert bus.status(event_id) == "dead_letter"

    def test_drain_replays_failed_events(self, engine: Engine, failer_pm, recorder_pm) -> None:
        EventBus(engine, failer_pm, sync=True, max_retries=3).dispatch("record_history", _PAYLOAD)

        pm, recorder = recorder_pm
        results = EventBus(engine, pm, sync=True).drain()
        assert [r["status"] for r in results] == ["completed"]
        assert recorder.calls == [_PAYLOAD]

    def test_drain_with_nothing_pending(self, engine: Engine, recorder_pm) -> None:
        pm, _ = recorder_pm
        assert EventBus(engine, pm, sync=True).drain() == []


class TestEventBusAsync:
    def test_shutdown_waits_for_workers(self, engine: Engine, recorder_pm) -> None:
        pm, recorder = recorder_pm
        bus = EventBus(engine, pm, sync=False, max_workers=2)
        ids = [bus.dispatch("record_history", {**_PAYLOAD, "asset_id": f"a{i}"}) for i in range(5)]
        bus.shutdown()

        assert len(recorder.calls) == 5
        assert {bus.status(i) for i in ids} == {"completed"}

    def test_shutdown_is_idempotent(self, engine: Engine, recorder_pm) -> None:
        pm, _ = recorder_pm
        bus = EventBus(engine, pm, sync=False)
        bus.shutdown()
        bus.shutdown()
