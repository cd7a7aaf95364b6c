"""Opcode classifier: pure mapping from mnemonic to semantic flags."""

from __future__ import annotations

from dataclasses import dataclass

_JUMP_OPCODES: frozenset[str] = frozenset({"JUMP", "JUMPI"})

_CALL_OPCODES: frozenset[str] = frozenset(
    {"CALL", "DELEGATECALL", "STATICCALL", "CALLCODE"}
)

_TERMINATOR_OPCODES: frozenset[str] = frozenset(
    {"STOP", "RETURN", "REVERT", "SELFDESTRUCT", "INVALID"}
)


@dataclass(frozen=True)
class OpcodeFlags:
    is_jump: bool = False
    is_call: bool = False
    is_terminator: bool = False
    is_push: bool = False
    is_dup: bool = False
    is_swap: bool = False


NO_FLAGS = OpcodeFlags()


def classify_opcode(mnemonic: str) -> OpcodeFlags:
    """Return the flags for *mnemonic*, matched case-insensitively.

    PUSH/DUP/SWAP are prefix matches, so ``PUSH0`` through ``PUSH32``
    all count as pushes.
    """
    op = mnemonic.upper()
    return OpcodeFlags(
        is_jump=op in _JUMP_OPCODES,
        is_call=op in _CALL_OPCODES,
        is_terminator=op in _TERMINATOR_OPCODES,
        is_push=op.startswith("PUSH"),
        is_dup=op.startswith("DUP"),
        is_swap=op.startswith("SWAP"),
    )
