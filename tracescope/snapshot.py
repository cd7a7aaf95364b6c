"""Snapshot recorder: audit trail of plugin state after every hook call."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .serialize import safe_clone
from .types import Snapshot

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


class SnapshotRecorder:
    """Append-only list of :class:`Snapshot` records for one run."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.snapshots: list[Snapshot] = []

    def record(self, ctx: Context) -> Snapshot | None:
        """Clone *ctx*'s step, private store and shared bus as they are right now."""
        if not self.enabled:
            return None
        snapshot = Snapshot(
            plugin_id=ctx.plugin_id,
            phase=ctx.phase,
            step_index=ctx.step_index,
            step=safe_clone(ctx.step),
            store=safe_clone(ctx.store),
            shared=safe_clone(ctx.shared),
        )
        self.snapshots.append(snapshot)
        logger.debug(
            "Snapshot #%d: %s %s step=%d",
            len(self.snapshots),
            ctx.plugin_id,
            ctx.phase.value,
            ctx.step_index,
        )
        return snapshot
