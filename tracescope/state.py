"""Run-scoped state: private per-plugin stores, the shared bus, and output accumulators."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .types import Mark, PluginResult, View


@dataclass
class RunState:
    """Everything a run accumulates between hook invocations.

    ``stores`` holds one private dict per plugin, created empty at run start
    and never reset between phases. ``shared`` is the single bus every
    plugin sees; results are published on it under the owning plugin's id.
    """

    stores: dict[str, dict[str, Any]] = field(default_factory=dict)
    shared: dict[str, Any] = field(default_factory=dict)
    marks: list[Mark] = field(default_factory=list)
    views: list[View] = field(default_factory=list)
    results: list[PluginResult] = field(default_factory=list)

    @classmethod
    def for_plugins(cls, plugin_ids: Iterable[str]) -> RunState:
        return cls(stores={plugin_id: {} for plugin_id in plugin_ids})

    def store_for(self, plugin_id: str) -> dict[str, Any]:
        return self.stores[plugin_id]

    def get_result(self, plugin_id: str) -> Any | None:
        return self.shared.get(plugin_id)

    def set_result(self, plugin_id: str, value: Any) -> None:
        self.shared[plugin_id] = value

    def publish_result(self, plugin_id: str, data: Any) -> None:
        """Record a finishing result and expose it to later plugins."""
        self.results.append(PluginResult(plugin_id=plugin_id, data=data))
        self.set_result(plugin_id, data)

    def add_mark(self, mark: Mark) -> None:
        self.marks.append(mark)

    def add_view(self, view: View) -> None:
        self.views.append(view)
