"""Inventory — repository object for relationship reads and writes.

The Inventory is the single dependency injected into every service. It
owns the database engine, the graph projection engine, and the history
event bus.

- :meth:`Inventory.read` yields a session on a plain connection.
- :meth:`Inventory.transaction` yields a session inside ``BEGIN IMMEDIATE``:
  the SQLite write lock is taken before the first statement, so concurrent
  check-then-insert sequences run one after another and cannot jointly
  create a dependency cycle.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from assetgraph.infrastructure.database.engine import init_database
from assetgraph.infrastructure.graph.engine import GraphEngine
from assetgraph.infrastructure.repositories import AssetRepository, RelationshipRepository

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from assetgraph.config.settings import AssetGraphSettings
    from assetgraph.plugins.event_bus import EventBus
    from assetgraph.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


@dataclass
class InventorySession:
    """Repositories bound to one connection."""

    conn: Connection
    relationships: RelationshipRepository
    assets: AssetRepository

    @classmethod
    def bind(cls, conn: Connection) -> InventorySession:
        return cls(
            conn=conn,
            relationships=RelationshipRepository(conn),
            assets=AssetRepository(conn),
        )


class Inventory:
    """Repository encapsulating database, graph projection, and history bus.

    Constructed once per process from :class:`AssetGraphSettings`.
    Services receive it via their :class:`BaseService` constructor.
    """

    def __init__(self, settings: AssetGraphSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(
            settings.root,
            db_path=settings.db_path,
            busy_timeout_ms=settings.database.busy_timeout_ms,
        )
        self._graph = GraphEngine()
        self._plugin_manager: PluginManager | None = None
        self._event_bus: EventBus | None = None

    @property
    def root(self) -> Path:
        return self._settings.root

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def graph(self) -> GraphEngine:
        return self._graph

    @property
    def settings(self) -> AssetGraphSettings:
        return self._settings

    @property
    def event_bus(self) -> EventBus | None:
        """The history event bus (None if not initialized)."""
        return self._event_bus

    @property
    def plugin_manager(self) -> PluginManager | None:
        return self._plugin_manager

    def init_event_bus(self, *, sync: bool = False, discover: bool = True) -> EventBus:
        """Wire up plugins and the history event bus.

        Loads entry-point plugins (unless *discover* is False) and registers
        the built-in :class:`HistoryPlugin` when history is enabled.
        """
        from assetgraph.plugins.builtins.history import HistoryPlugin
        from assetgraph.plugins.event_bus import EventBus
        from assetgraph.plugins.manager import PluginManager

        pm = PluginManager()
        if discover:
            pm.discover_and_load()

        history = self._settings.history
        if history.enabled:
            pm.register_plugin(HistoryPlugin(self._engine), name="history-builtin")

        self._plugin_manager = pm
        self._event_bus = EventBus(
            self._engine,
            pm,
            sync=sync,
            max_retries=history.max_retries,
            max_workers=history.max_workers,
        )
        return self._event_bus

    @contextmanager
    def read(self) -> Iterator[InventorySession]:
        """Read session; the connection is released on exit."""
        with self._engine.connect() as conn:
            yield InventorySession.bind(conn)

    @contextmanager
    def transaction(self) -> Iterator[InventorySession]:
        """Serialized write session.

        Commits when the block exits normally, rolls back on exception.
        Do not dispatch history from inside the block: the event bus writes
        through its own connection and would wait on this one's lock.
        """
        with self._engine.connect() as conn:
            conn.execution_options(sqlite_begin="IMMEDIATE")
            with conn.begin():
                yield InventorySession.bind(conn)

    def close(self) -> None:
        """Flush history and release database connections.

        Waits for in-flight notifications, then gives every pending or
        failed event one more attempt. An event that keeps failing moves to
        ``dead_letter`` once it has used up ``history.max_retries``.
        """
        if self._event_bus is not None:
            from assetgraph.plugins.event_bus import COMPLETED

            replayed = self._event_bus.drain()
            unresolved = [r["id"] for r in replayed if r["status"] != COMPLETED]
            if unresolved:
                logger.warning("History events still unrecorded: %s", unresolved)
            self._event_bus.shutdown()
        self._engine.dispose()
