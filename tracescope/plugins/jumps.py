"""Jump table: every JUMP/JUMPI taken during the trace, plus abnormal exits."""

from __future__ import annotations

from typing import Any

from .. import constants
from ..context import Context
from ..types import ExecutionStep, MarkKind, Plugin, View, ViewType

_ABNORMAL_EXITS: frozenset[str] = frozenset({"REVERT", "INVALID"})


class JumpTablePlugin(Plugin):
    plugin_id = constants.JUMPS_PLUGIN_ID

    def on_tx_start(self, ctx: Context) -> None:
        ctx.store["jumps"] = []

    def on_step(self, ctx: Context, step: ExecutionStep) -> None:
        if ctx.is_jump:
            ctx.store.setdefault("jumps", []).append(_jump_record(ctx.pc, step))
        elif ctx.is_terminator and ctx.opcode_name.upper() in _ABNORMAL_EXITS:
            ctx.mark_pc(ctx.pc, MarkKind.WARN, ctx.opcode_name.upper())

    def on_finish(self, ctx: Context) -> dict[str, Any]:
        jumps = ctx.store.get("jumps", [])
        targets = sorted({j["target"] for j in jumps if j["target"] is not None})
        ctx.register_view(
            View(
                id=constants.JUMPS_PLUGIN_ID,
                type=ViewType.TABLE,
                title="Jump table",
                data=list(jumps),
            )
        )
        return {"jumps": list(jumps), "distinctTargets": targets}


def _jump_record(pc: int, step: ExecutionStep) -> dict[str, Any]:
    """Stack is bottom-first: the destination is the last word, JUMPI's condition the one before."""
    stack = step.stack
    record: dict[str, Any] = {
        "pc": pc,
        "opcode": step.opcode.upper(),
        "target": stack[-1] if stack else None,
    }
    if record["opcode"] == "JUMPI":
        record["taken"] = len(stack) >= 2 and stack[-2] != 0
    return record
