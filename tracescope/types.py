"""Engine data types (pure data, no business logic)."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import PluginConfigError
from .serialize import safe_clone


class Phase(str, Enum):
    """Lifecycle phases; each value is also the name of the hook method."""

    DEPLOY = "on_deploy"
    REDEPLOY = "on_redeploy"
    TX_START = "on_tx_start"
    START = "on_start"
    STEP = "on_step"
    FINISH = "on_finish"
    TX_END = "on_tx_end"


class MarkKind(str, Enum):
    DANGER = "danger"
    INFO = "info"
    WARN = "warn"


class ViewType(str, Enum):
    HEATMAP = "heatmap"
    TABLE = "table"
    LIST = "list"
    GRAPH = "graph"
    TIMELINE = "timeline"
    STORAGE_DIFF = "storage-diff"
    CUSTOM = "custom"


# ── Trace input ──────────────────────────────────────────────────


@dataclass(frozen=True)
class ExecutionStep:
    """One sample of the recorded trace."""

    pc: int
    opcode: str
    gas: int = 0
    gas_cost: int = 0
    depth: int = 1
    stack: tuple[int, ...] = ()
    memory: tuple[str, ...] | None = None
    storage: Mapping[str, str] | None = None

    def to_dict(self) -> dict:
        return {
            "pc": self.pc,
            "opcode": self.opcode,
            "gas": self.gas,
            "gas_cost": self.gas_cost,
            "depth": self.depth,
            "stack": [str(v) for v in self.stack],
            "memory": list(self.memory) if self.memory is not None else None,
            "storage": dict(self.storage) if self.storage is not None else None,
        }


def parse_quantity(v: Any) -> Any:
    """Accept ints, decimal strings and 0x-prefixed hex strings."""
    if isinstance(v, str):
        text = v.strip()
        if text.lower().startswith("0x"):
            return int(text, 16) if len(text) > 2 else 0
        return int(text)
    return v


class TxMeta(BaseModel):
    """Transaction metadata as reported by the node."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    hash: str = ""
    sender: str = Field(default="", alias="from")
    to: str | None = None
    value: int = 0
    gas_used: int = Field(default=0, alias="gasUsed")
    status: int | None = None
    input: str = "0x"
    nonce: int = 0
    block_number: int | None = Field(default=None, alias="blockNumber")
    contract_address: str | None = Field(default=None, alias="contractAddress")
    balance_before: int | None = Field(default=None, alias="balanceBefore")
    balance_after: int | None = Field(default=None, alias="balanceAfter")

    @field_validator(
        "value",
        "gas_used",
        "status",
        "nonce",
        "block_number",
        "balance_before",
        "balance_after",
        mode="before",
    )
    @classmethod
    def _quantity(cls, v: Any) -> Any:
        return parse_quantity(v)


@dataclass(frozen=True)
class RunEnvironment:
    """Static input to one run. Owned by the caller; never mutated by the engine."""

    contract_address: str
    runtime_bytecode: str
    runtime_disasm: Mapping[int, int] = field(default_factory=dict)
    creation_bytecode: str | None = None
    creation_disasm: Mapping[int, int] = field(default_factory=dict)
    trace: Sequence[ExecutionStep] = ()
    tx: TxMeta = field(default_factory=TxMeta)
    is_creation_phase: bool = False


# ── Plugins ──────────────────────────────────────────────────────


class Plugin:
    """Convenience base for analysis plugins.

    Subclasses set ``plugin_id`` (and optionally ``depends_on``) and define
    any subset of the hook methods named in :class:`Phase`. Hooks may be
    plain methods or coroutines. ``on_step`` receives ``(ctx, step)``; every
    other hook receives ``ctx`` only. A non-``None`` return from
    ``on_finish`` becomes the plugin's result.
    """

    plugin_id: str = ""
    depends_on: tuple[str, ...] = ()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.plugin_id}>"


@dataclass(frozen=True)
class PluginDescriptor:
    plugin_id: str
    plugin: Any
    depends_on: tuple[str, ...] = ()

    @classmethod
    def of(
        cls, plugin: Any, depends_on: Sequence[str] | None = None
    ) -> PluginDescriptor:
        """Describe *plugin*, optionally overriding its declared dependencies."""
        if isinstance(plugin, PluginDescriptor):
            if depends_on is None:
                return plugin
            return replace(plugin, depends_on=tuple(dict.fromkeys(depends_on)))

        plugin_id = getattr(plugin, "plugin_id", "")
        if not plugin_id:
            raise PluginConfigError(f"Plugin {plugin!r} has no plugin_id")
        deps = depends_on if depends_on is not None else getattr(plugin, "depends_on", ())
        return cls(
            plugin_id=plugin_id,
            plugin=plugin,
            depends_on=tuple(dict.fromkeys(deps or ())),
        )

    def hook(self, phase: Phase) -> Callable[..., Any] | None:
        hook = getattr(self.plugin, phase.value, None)
        return hook if callable(hook) else None


# ── Run output ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Mark:
    pc: int
    kind: MarkKind
    owner_plugin_id: str
    label: str | None = None


@dataclass(frozen=True)
class View:
    """Opaque presentation payload; ``data`` is never interpreted by the engine."""

    id: str
    type: ViewType
    data: Any
    title: str | None = None
    owner_plugin_id: str = ""


@dataclass(frozen=True)
class Snapshot:
    """Audit record taken right after one hook invocation.

    ``step``, ``store`` and ``shared`` are deep clones; mutating live state
    afterwards never reaches them.
    """

    plugin_id: str
    phase: Phase
    step_index: int
    step: dict | None
    store: dict
    shared: dict


@dataclass(frozen=True)
class PluginResult:
    plugin_id: str
    data: Any


@dataclass
class RunOutput:
    results: list[PluginResult] = field(default_factory=list)
    marks: list[Mark] = field(default_factory=list)
    views: list[View] = field(default_factory=list)
    snapshots: list[Snapshot] = field(default_factory=list)

    def result_for(self, plugin_id: str) -> Any | None:
        return next(
            (r.data for r in self.results if r.plugin_id == plugin_id), None
        )

    def to_dict(self, include_snapshots: bool = True) -> dict:
        payload: dict[str, Any] = {
            "results": self.results,
            "marks": self.marks,
            "views": self.views,
        }
        if include_snapshots:
            payload["snapshots"] = self.snapshots
        return safe_clone(payload)
