"""Shared service-layer helper functions."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime


def now_iso() -> str:
    """Current UTC time as ISO 8601 (edge timestamps, history rows, WAL)."""
    return datetime.now(UTC).isoformat()


def new_relationship_id() -> str:
    """Opaque identifier for a new edge."""
    return str(uuid.uuid4())


def clamp_depth(requested: int | None, *, default: int, cap: int) -> int:
    """Resolve a caller-supplied tree depth.

    ``None`` or anything outside ``0..cap`` falls back to *default*.

    Examples:
        >>> clamp_depth(None, default=3, cap=10)
        3
        >>> clamp_depth(5, default=3, cap=10)
        5
        >>> clamp_depth(42, default=3, cap=10)
        3
    """
    if requested is None or requested < 0 or requested > cap:
        return default
    return requested
