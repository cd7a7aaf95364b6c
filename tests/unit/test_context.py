"""Tests for ContextBuilder: step binding, defaults, flags, state wiring, side channels."""

import logging

import pytest

from tracescope.context import ContextBuilder
from tracescope.state import RunState
from tracescope.types import (
    ExecutionStep,
    Mark,
    MarkKind,
    Phase,
    RunEnvironment,
    View,
    ViewType,
)


def _make_env(*steps, disasm=None):
    return RunEnvironment(
        contract_address="0xc0ffee",
        runtime_bytecode="0x6004565b00",
        runtime_disasm=disasm if disasm is not None else {0: 0x60, 1: 0x04, 2: 0x56, 3: 0x5B, 4: 0x00},
        trace=tuple(steps),
    )


def _make_builder(env, plugin_ids=("p", "q")):
    state = RunState.for_plugins(plugin_ids)
    return ContextBuilder(env, state), state


_TRACE = (
    ExecutionStep(pc=0, opcode="PUSH1", stack=()),
    ExecutionStep(pc=2, opcode="JUMP", stack=(4,)),
    ExecutionStep(pc=4, opcode="STOP"),
)


class TestStepBinding:
    def test_binds_step_at_index(self):
        builder, _ = _make_builder(_make_env(*_TRACE))
        ctx = builder.build("p", Phase.STEP, 1)

        assert ctx.step is _TRACE[1]
        assert ctx.step_index == 1
        assert ctx.pc == 2
        assert ctx.opcode_name == "JUMP"
        assert ctx.stack == (4,)
        assert ctx.opcode_byte == 0x56

    def test_flags_follow_opcode(self):
        builder, _ = _make_builder(_make_env(*_TRACE))

        assert builder.build("p", Phase.STEP, 0).is_push
        assert builder.build("p", Phase.STEP, 1).is_jump
        assert builder.build("p", Phase.STEP, 2).is_terminator
        assert not builder.build("p", Phase.STEP, 1).is_call

    def test_missing_pc_in_table_reports_ff(self):
        env = _make_env(ExecutionStep(pc=99, opcode="ADD"))
        builder, _ = _make_builder(env)
        assert builder.build("p", Phase.STEP, 0).opcode_byte == 0xFF

    def test_environment_fields_are_references(self):
        env = _make_env(*_TRACE)
        builder, _ = _make_builder(env)
        ctx = builder.build("p", Phase.START, 0)

        assert ctx.trace is env.trace
        assert ctx.runtime_disasm is env.runtime_disasm
        assert ctx.tx is env.tx
        assert ctx.contract_address == "0xc0ffee"
        assert ctx.is_creation_phase is False


class TestDefaults:
    def test_empty_trace_uses_sentinel_step_fields(self):
        builder, _ = _make_builder(_make_env())
        ctx = builder.build("p", Phase.TX_START, 0)

        assert ctx.step is None
        assert ctx.pc == 0
        assert ctx.opcode_name == "INVALID"
        assert ctx.stack == ()
        assert ctx.is_terminator
        assert ctx.opcode_byte == 0x60

    def test_deploy_context_has_no_step_and_no_flags(self):
        builder, _ = _make_builder(_make_env(*_TRACE))
        ctx = builder.build("p", Phase.DEPLOY, -1)

        assert ctx.step is None
        assert ctx.step_index == -1
        assert ctx.opcode_name == ""
        assert ctx.opcode_byte == 0
        assert not any(
            [ctx.is_jump, ctx.is_call, ctx.is_terminator, ctx.is_push, ctx.is_dup, ctx.is_swap]
        )
        assert ctx.memory is None and ctx.storage is None


class TestStateWiring:
    def test_store_is_reused_for_the_same_plugin(self):
        builder, state = _make_builder(_make_env(*_TRACE))
        first = builder.build("p", Phase.START, 0)
        first.store["k"] = 1
        later = builder.build("p", Phase.STEP, 2)

        assert later.store is first.store
        assert later.store == {"k": 1}
        assert state.store_for("p") is first.store

    def test_stores_are_private_per_plugin(self):
        builder, _ = _make_builder(_make_env(*_TRACE))
        builder.build("p", Phase.START, 0).store["k"] = 1
        assert builder.build("q", Phase.START, 0).store == {}

    def test_shared_bus_is_common(self):
        builder, state = _make_builder(_make_env(*_TRACE))
        builder.build("p", Phase.START, 0).shared["note"] = "hi"
        assert builder.build("q", Phase.START, 0).shared is state.shared
        assert state.shared == {"note": "hi"}

    def test_result_accessors_go_through_shared_bus(self):
        builder, state = _make_builder(_make_env(*_TRACE))
        builder.build("p", Phase.FINISH, 0).set_result("p", {"x": 5})

        assert builder.build("q", Phase.FINISH, 0).get_result("p") == {"x": 5}
        assert builder.build("q", Phase.FINISH, 0).get_result("nobody") is None
        assert state.shared["p"] == {"x": 5}


class TestSideChannels:
    def test_mark_pc_records_owner(self):
        builder, state = _make_builder(_make_env(*_TRACE))
        builder.build("p", Phase.STEP, 1).mark_pc(2, "danger", "hot")

        assert state.marks == [
            Mark(pc=2, kind=MarkKind.DANGER, owner_plugin_id="p", label="hot")
        ]

    def test_marks_are_never_deduplicated(self):
        builder, state = _make_builder(_make_env(*_TRACE))
        ctx = builder.build("p", Phase.STEP, 1)
        ctx.mark_pc(2, MarkKind.INFO)
        ctx.mark_pc(2, MarkKind.INFO)
        assert len(state.marks) == 2

    def test_unknown_mark_kind_is_rejected(self):
        builder, state = _make_builder(_make_env(*_TRACE))
        with pytest.raises(ValueError):
            builder.build("p", Phase.STEP, 1).mark_pc(2, "fatal")
        assert state.marks == []

    def test_register_view_forces_owner(self):
        builder, state = _make_builder(_make_env(*_TRACE))
        builder.build("p", Phase.FINISH, 0).register_view(
            View(id="v", type="table", data=[1, 2], owner_plugin_id="q")
        )

        (view,) = state.views
        assert view.owner_plugin_id == "p"
        assert view.type is ViewType.TABLE
        assert view.data == [1, 2]


class TestLogging:
    def test_log_lines_are_tagged_with_plugin_id(self, caplog):
        builder, _ = _make_builder(_make_env(*_TRACE))
        ctx = builder.build("p", Phase.START, 0)
        with caplog.at_level(logging.INFO, logger="tracescope.context"):
            ctx.log("hello")
            ctx.warn("careful")
            ctx.error("broken")

        levels = [(r.levelno, r.getMessage()) for r in caplog.records]
        assert levels == [
            (logging.INFO, "[p] hello"),
            (logging.WARNING, "[p] careful"),
            (logging.ERROR, "[p] broken"),
        ]
