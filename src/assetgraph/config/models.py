"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``assetgraph.toml`` only
contains overrides. An empty file is a valid configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from assetgraph.domain.types import RelationshipType


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    path: Path | None = None
    busy_timeout_ms: int = 5000


class GraphConfig(BaseModel):
    """[graph] section — traversal bounds for tree and impact queries."""

    model_config = {"frozen": True}

    default_max_depth: int = Field(default=3, ge=0)
    max_depth_cap: int = Field(default=10, ge=1)
    critical_path_max_depth: int = Field(default=10, ge=1)
    critical_path_types: tuple[RelationshipType, ...] = (RelationshipType.DEPENDENCY,)

    @field_validator("critical_path_types")
    @classmethod
    def _non_empty(cls, value: tuple[RelationshipType, ...]) -> tuple[RelationshipType, ...]:
        if not value:
            msg = "critical_path_types must name at least one relationship type"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _default_within_cap(self) -> GraphConfig:
        if self.default_max_depth > self.max_depth_cap:
            msg = (
                f"default_max_depth ({self.default_max_depth}) exceeds "
                f"max_depth_cap ({self.max_depth_cap})"
            )
            raise ValueError(msg)
        return self


class HistoryConfig(BaseModel):
    """[history] section — relationship history notifications."""

    model_config = {"frozen": True}

    enabled: bool = True
    max_retries: int = Field(default=3, ge=1)
    max_workers: int = Field(default=2, ge=1)

