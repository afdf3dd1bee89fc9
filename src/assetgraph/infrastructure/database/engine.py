"""Database engine setup for SQLite with WAL mode.

The DB is stored at ``{root}/.assetgraph/assetgraph.db`` unless configured
otherwise.

pysqlite's implicit transaction handling is switched off so SQLAlchemy
emits ``BEGIN`` itself. Write paths that must serialize (check-then-insert)
ask for ``BEGIN IMMEDIATE`` through the ``sqlite_begin`` execution option,
which takes the database write lock before the first read.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine

from assetgraph.infrastructure.database.schema import metadata

DATA_DIRNAME = ".assetgraph"
DB_FILENAME = "assetgraph.db"

_BEGIN_MODES = frozenset({"DEFERRED", "IMMEDIATE", "EXCLUSIVE"})


def create_db_engine(db_path: Path, *, busy_timeout_ms: int = 5000) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _do_begin(conn: Connection) -> None:
        mode = str(conn.get_execution_options().get("sqlite_begin", "DEFERRED")).upper()
        if mode not in _BEGIN_MODES:
            msg = f"Unsupported SQLite BEGIN mode: {mode}"
            raise ValueError(msg)
        conn.exec_driver_sql(f"BEGIN {mode}")

    return engine


def default_db_path(root: Path) -> Path:
    """Return ``{root}/.assetgraph/assetgraph.db``."""
    return root / DATA_DIRNAME / DB_FILENAME


def init_database(
    root: Path,
    *,
    db_path: Path | None = None,
    busy_timeout_ms: int = 5000,
) -> Engine:
    """Initialize the assetgraph database and create all tables.

    Creates the ``.assetgraph/`` directory (or the parent of an explicit
    *db_path*). Idempotent — safe to call on an existing database.

    Returns the engine ready for use.
    """
    path = db_path or default_db_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(path, busy_timeout_ms=busy_timeout_ms)
    metadata.create_all(engine)
    return engine
