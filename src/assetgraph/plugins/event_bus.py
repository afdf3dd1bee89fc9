"""WAL-backed history notifications via pluggy + ThreadPoolExecutor.

Every notification is written to ``event_wal`` before dispatch, so a
history record is never silently lost if the process exits mid-flight;
``drain()`` replays whatever is still pending or failed.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from assetgraph.infrastructure.database.schema import event_wal
from assetgraph.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from assetgraph.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

PENDING = "pending"
COMPLETED = "completed"
FAILED = "failed"
DEAD_LETTER = "dead_letter"


class EventBus:
    """Durable, asynchronous hook dispatch.

    Parameters:
        engine: SQLAlchemy engine with the ``event_wal`` table.
        plugin_manager: PluginManager whose hook relay receives events.
        sync: Dispatch inline instead of on the worker pool.
        max_retries: Failed attempts before an event becomes ``dead_letter``.
        max_workers: Worker pool size.
    """

    def __init__(
        self,
        engine: Engine,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_retries: int = 3,
        max_workers: int = 2,
    ) -> None:
        self._engine = engine
        self._pm = plugin_manager
        self._sync = sync
        self._max_retries = max_retries
        self._executor: ThreadPoolExecutor | None = (
            None if sync else ThreadPoolExecutor(max_workers=max_workers)
        )
        self._futures: list[Future[None]] = []

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> int:
        """Log the event to the WAL, then run the hook. Returns the WAL id."""
        event_id = self._write_wal(hook_name, payload)

        if self._executor is None:
            self._execute_hook(event_id, hook_name, payload)
        else:
            self._futures.append(
                self._executor.submit(self._execute_hook, event_id, hook_name, payload)
            )
        return event_id

    def drain(self) -> list[dict[str, Any]]:
        """Wait for in-flight work, then retry pending/failed events inline.

        Returns ``{id, hook_name, status}`` for each retried event.
        """
        self._wait_futures()

        with self._engine.connect() as conn:
            rows = conn.execute(
                select(event_wal.c.id, event_wal.c.hook_name, event_wal.c.payload)
                .where(event_wal.c.status.in_([PENDING, FAILED]))
                .order_by(event_wal.c.id)
            ).fetchall()

        results: list[dict[str, Any]] = []
        for row in rows:
            self._execute_hook(row.id, row.hook_name, json.loads(row.payload))
            results.append(
                {"id": row.id, "hook_name": row.hook_name, "status": self.status(row.id)}
            )
        return results

    def status(self, event_id: int) -> str | None:
        """Current WAL status of one event."""
        with self._engine.connect() as conn:
            return conn.execute(
                select(event_wal.c.status).where(event_wal.c.id == event_id)
            ).scalar_one_or_none()

    def shutdown(self) -> None:
        """Wait for pending work and stop the worker pool."""
        self._wait_futures()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _write_wal(self, hook_name: str, payload: dict[str, Any]) -> int:
        with self._engine.begin() as conn:
            result = conn.execute(
                insert(event_wal).values(
                    hook_name=hook_name,
                    payload=json.dumps(payload),
                    status=PENDING,
                    retries=0,
                    created=now_iso(),
                )
            )
            assert result.lastrowid is not None
            return result.lastrowid

    def _execute_hook(self, event_id: int, hook_name: str, payload: dict[str, Any]) -> None:
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            self._mark_completed(event_id)
            return

        try:
            hook_fn(**payload)
        except Exception as exc:
            logger.warning("Hook %s failed for event %s: %s", hook_name, event_id, exc)
            self._mark_failed(event_id, str(exc))
        else:
            self._mark_completed(event_id)

    def _mark_completed(self, event_id: int) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                update(event_wal)
                .where(event_wal.c.id == event_id)
                .values(status=COMPLETED, error=None, completed=now_iso())
            )

    def _mark_failed(self, event_id: int, error: str) -> None:
        """Bump the retry count; park the event once retries are exhausted."""
        with self._engine.begin() as conn:
            retries = conn.execute(
                select(event_wal.c.retries).where(event_wal.c.id == event_id)
            ).scalar_one()
            retries += 1
            status = DEAD_LETTER if retries >= self._max_retries else FAILED
            conn.execute(
                update(event_wal)
                .where(event_wal.c.id == event_id)
                .values(
                    status=status,
                    error=error,
                    retries=retries,
                    completed=now_iso() if status == DEAD_LETTER else None,
                )
            )

    def _wait_futures(self) -> None:
        for future in self._futures:
            try:
                future.result(timeout=30)
            except Exception:
                logger.debug("History dispatch future raised", exc_info=True)
        self._futures.clear()
