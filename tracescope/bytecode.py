"""Bytecode → program-counter byte table."""

from __future__ import annotations

from . import constants


def strip_hex_prefix(hex_text: str) -> str:
    text = hex_text.strip()
    if text[:2].lower() == constants.HEX_PREFIX:
        return text[2:]
    return text


def disassemble(bytecode: str) -> dict[int, int]:
    """Map every byte offset of *bytecode* to its byte value.

    This is a raw byte table, not an instruction decode: PUSH immediates
    get their own entries like any other byte.

    Raises ``ValueError`` for odd-length or non-hex input.
    """
    hex_text = strip_hex_prefix(bytecode)
    if len(hex_text) % 2 != 0:
        raise ValueError("Invalid bytecode: odd hex length")
    return dict(enumerate(bytes.fromhex(hex_text)))
