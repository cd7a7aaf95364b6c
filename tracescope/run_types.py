"""Run configuration types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RunConfig:
    """Groups run-level configuration."""

    record_snapshots: bool = True
    timeout_seconds: float | None = None
