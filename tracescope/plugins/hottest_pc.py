"""Flags the most frequently executed pc, using the heatmap's result."""

from __future__ import annotations

from typing import Any

from .. import constants
from ..context import Context
from ..types import MarkKind, Plugin


class HottestPcPlugin(Plugin):
    plugin_id = constants.HOTTEST_PC_PLUGIN_ID
    depends_on = (constants.HEATMAP_PLUGIN_ID,)

    def on_deploy(self, ctx: Context) -> None:
        ctx.log(f"armed for contract {ctx.contract_address or '<undeployed>'}")

    def on_finish(self, ctx: Context) -> dict[str, Any]:
        heatmap = ctx.get_result(constants.HEATMAP_PLUGIN_ID)
        if not heatmap or "pcHits" not in heatmap:
            ctx.warn("no heatmap data")
            return {"error": "no heatmap data"}

        ctx.log(f"heatmap totalSteps = {heatmap.get('totalSteps')}")
        pc_hits: dict[int, int] = heatmap["pcHits"]
        if not pc_hits:
            return {"error": "empty heatmap"}

        # max() keeps the first of equal counts, i.e. the earliest-visited pc
        hottest_pc, hottest_count = max(pc_hits.items(), key=lambda item: item[1])
        ctx.mark_pc(hottest_pc, MarkKind.DANGER, "Hottest PC")
        return {"hottestPc": hottest_pc, "hottestCount": hottest_count}
