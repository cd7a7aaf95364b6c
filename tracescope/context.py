"""Execution context handed to a plugin for exactly one hook invocation."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from . import constants
from .opcodes import NO_FLAGS, OpcodeFlags, classify_opcode
from .state import RunState
from .types import (
    ExecutionStep,
    Mark,
    MarkKind,
    Phase,
    RunEnvironment,
    TxMeta,
    View,
    ViewType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Context:
    """Per-invocation view of the run.

    Environment fields are read through to the caller's
    :class:`RunEnvironment`; ``store`` and ``shared`` are the live run state.
    The only durable effects of a hook are its writes to ``store``,
    ``shared``, marks, views and results.
    """

    plugin_id: str
    phase: Phase
    env: RunEnvironment
    step_index: int
    step: ExecutionStep | None
    pc: int
    opcode_name: str
    opcode_byte: int
    stack: Sequence[int]
    flags: OpcodeFlags
    store: dict[str, Any]
    shared: dict[str, Any]
    _state: RunState = field(repr=False, compare=False)

    # ── Static environment ───────────────────────────────────────

    @property
    def contract_address(self) -> str:
        return self.env.contract_address

    @property
    def runtime_bytecode(self) -> str:
        return self.env.runtime_bytecode

    @property
    def creation_bytecode(self) -> str | None:
        return self.env.creation_bytecode

    @property
    def runtime_disasm(self) -> Mapping[int, int]:
        return self.env.runtime_disasm

    @property
    def creation_disasm(self) -> Mapping[int, int]:
        return self.env.creation_disasm

    @property
    def trace(self) -> Sequence[ExecutionStep]:
        return self.env.trace

    @property
    def tx(self) -> TxMeta:
        return self.env.tx

    @property
    def is_creation_phase(self) -> bool:
        return self.env.is_creation_phase

    # ── Current step aliases ─────────────────────────────────────

    @property
    def memory(self) -> Sequence[str] | None:
        return self.step.memory if self.step is not None else None

    @property
    def storage(self) -> Mapping[str, str] | None:
        return self.step.storage if self.step is not None else None

    @property
    def is_jump(self) -> bool:
        return self.flags.is_jump

    @property
    def is_call(self) -> bool:
        return self.flags.is_call

    @property
    def is_terminator(self) -> bool:
        return self.flags.is_terminator

    @property
    def is_push(self) -> bool:
        return self.flags.is_push

    @property
    def is_dup(self) -> bool:
        return self.flags.is_dup

    @property
    def is_swap(self) -> bool:
        return self.flags.is_swap

    # ── Logging ──────────────────────────────────────────────────

    def log(self, msg: str) -> None:
        logger.info("[%s] %s", self.plugin_id, msg)

    def warn(self, msg: str) -> None:
        logger.warning("[%s] %s", self.plugin_id, msg)

    def error(self, msg: str) -> None:
        logger.error("[%s] %s", self.plugin_id, msg)

    # ── Side channels ────────────────────────────────────────────

    def mark_pc(self, pc: int, kind: MarkKind | str, label: str | None = None) -> None:
        """Annotate *pc*. ``kind`` must be one of danger / info / warn."""
        self._state.add_mark(
            Mark(pc=pc, kind=MarkKind(kind), owner_plugin_id=self.plugin_id, label=label)
        )

    def register_view(self, view: View) -> None:
        """Contribute *view*; its owner is always the invoking plugin."""
        self._state.add_view(
            replace(view, type=ViewType(view.type), owner_plugin_id=self.plugin_id)
        )

    def get_result(self, plugin_id: str) -> Any | None:
        return self._state.get_result(plugin_id)

    def set_result(self, plugin_id: str, value: Any) -> None:
        self._state.set_result(plugin_id, value)


class ContextBuilder:
    """Builds a fresh :class:`Context` per (plugin, phase, step) invocation."""

    def __init__(self, env: RunEnvironment, state: RunState):
        self._env = env
        self._state = state

    def build(self, plugin_id: str, phase: Phase, step_index: int) -> Context:
        if step_index == constants.NO_STEP_INDEX:
            return self._context(
                plugin_id,
                phase,
                step_index,
                step=None,
                pc=0,
                opcode_name="",
                opcode_byte=0,
                flags=NO_FLAGS,
            )

        step = self._step_at(step_index)
        pc = step.pc if step is not None else 0
        opcode_name = step.opcode if step is not None else constants.SENTINEL_OPCODE
        return self._context(
            plugin_id,
            phase,
            step_index,
            step=step,
            pc=pc,
            opcode_name=opcode_name,
            opcode_byte=self._env.runtime_disasm.get(pc, constants.MISSING_OPCODE_BYTE),
            flags=classify_opcode(opcode_name),
        )

    def _step_at(self, step_index: int) -> ExecutionStep | None:
        trace = self._env.trace
        if 0 <= step_index < len(trace):
            return trace[step_index]
        return None

    def _context(
        self,
        plugin_id: str,
        phase: Phase,
        step_index: int,
        step: ExecutionStep | None,
        pc: int,
        opcode_name: str,
        opcode_byte: int,
        flags: OpcodeFlags,
    ) -> Context:
        return Context(
            plugin_id=plugin_id,
            phase=phase,
            env=self._env,
            step_index=step_index,
            step=step,
            pc=pc,
            opcode_name=opcode_name,
            opcode_byte=opcode_byte,
            stack=step.stack if step is not None else (),
            flags=flags,
            store=self._state.store_for(plugin_id),
            shared=self._state.shared,
            _state=self._state,
        )
