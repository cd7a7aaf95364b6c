"""Trace file decoding: geth-style ``structLogs`` JSON into a RunEnvironment."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .bytecode import disassemble
from .errors import TraceFormatError
from .types import ExecutionStep, RunEnvironment, TxMeta, parse_quantity

logger = logging.getLogger(__name__)


class RawStructLog(BaseModel):
    """One entry of ``debug_traceTransaction``'s ``structLogs`` array."""

    model_config = ConfigDict(populate_by_name=True)

    pc: int
    op: str
    gas: int = 0
    gas_cost: int = Field(default=0, alias="gasCost")
    depth: int = 1
    stack: list[int] | None = None
    memory: list[str] | None = None
    storage: dict[str, str] | None = None

    @field_validator("pc", "gas", "gas_cost", "depth", mode="before")
    @classmethod
    def _quantity(cls, v: Any) -> Any:
        return parse_quantity(v)

    @field_validator("stack", mode="before")
    @classmethod
    def _stack_words(cls, v: Any) -> Any:
        if v is None:
            return None
        return [parse_quantity(word) for word in v]

    def to_step(self) -> ExecutionStep:
        return ExecutionStep(
            pc=self.pc,
            opcode=self.op,
            gas=self.gas,
            gas_cost=self.gas_cost,
            depth=self.depth,
            stack=tuple(self.stack or ()),
            memory=tuple(self.memory) if self.memory is not None else None,
            storage=dict(self.storage) if self.storage is not None else None,
        )


class TraceFile(BaseModel):
    """On-disk layout of a recorded transaction.

    ``structLogs`` may sit at the top level (also spelled ``struct_logs``)
    or inside a nested ``trace`` object, as returned by the node.
    """

    model_config = ConfigDict(populate_by_name=True)

    contract_address: str = Field(default="", alias="contractAddress")
    runtime_bytecode: str = Field(alias="runtimeBytecode")
    creation_bytecode: str | None = Field(default=None, alias="creationBytecode")
    is_creation_phase: bool = Field(default=False, alias="isCreationPhase")
    tx: TxMeta = Field(default_factory=TxMeta)
    struct_logs: list[RawStructLog] = Field(default_factory=list, alias="structLogs")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TraceFile:
        payload = dict(data)
        nested = payload.pop("trace", None)
        if "struct_logs" in payload and "structLogs" not in payload:
            payload["structLogs"] = payload.pop("struct_logs")
        if isinstance(nested, Mapping) and "structLogs" not in payload:
            payload["structLogs"] = nested.get("structLogs", nested.get("struct_logs", []))
        return cls.model_validate(payload)

    def to_environment(self) -> RunEnvironment:
        return RunEnvironment(
            contract_address=self.contract_address,
            runtime_bytecode=self.runtime_bytecode,
            runtime_disasm=disassemble(self.runtime_bytecode),
            creation_bytecode=self.creation_bytecode,
            creation_disasm=(
                disassemble(self.creation_bytecode) if self.creation_bytecode else {}
            ),
            trace=tuple(log.to_step() for log in self.struct_logs),
            tx=self.tx,
            is_creation_phase=self.is_creation_phase,
        )


def parse_environment(data: Mapping[str, Any]) -> RunEnvironment:
    """Build a RunEnvironment from an already-decoded trace document."""
    try:
        return TraceFile.from_mapping(data).to_environment()
    except (ValidationError, ValueError) as exc:
        raise TraceFormatError(f"Invalid trace document: {exc}") from exc


def load_environment(path: str | Path) -> RunEnvironment:
    """Read a trace JSON file and build its RunEnvironment."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise TraceFormatError(f"{path}: not valid JSON: {exc}") from exc
    if not isinstance(data, Mapping):
        raise TraceFormatError(f"{path}: expected a JSON object at top level")

    env = parse_environment(data)
    logger.info(
        "Loaded trace %s: %d steps, %d runtime bytes",
        path,
        len(env.trace),
        len(env.runtime_disasm),
    )
    return env
