"""Per-pc hit counter over the trace."""

from __future__ import annotations

from collections import Counter
from typing import Any

from .. import constants
from ..context import Context
from ..types import ExecutionStep, Plugin, View, ViewType

_HITS_KEY = "pc_hits"


class HeatmapPlugin(Plugin):
    plugin_id = constants.HEATMAP_PLUGIN_ID

    def on_start(self, ctx: Context) -> None:
        ctx.store[_HITS_KEY] = Counter()

    def on_step(self, ctx: Context, step: ExecutionStep) -> None:
        hits = ctx.store.setdefault(_HITS_KEY, Counter())
        hits[ctx.pc] += 1

    def on_finish(self, ctx: Context) -> dict[str, Any]:
        hits = ctx.store.get(_HITS_KEY, Counter())
        payload = {"totalSteps": len(ctx.trace), "pcHits": dict(hits)}
        ctx.register_view(
            View(
                id=constants.HEATMAP_PLUGIN_ID,
                type=ViewType.HEATMAP,
                title="PC Heatmap",
                data=payload,
            )
        )
        return payload
