"""Static plugin registry and the JSON manifest that selects from it.

Plugins are never loaded from files: the manifest names registered
factories, and the registry instantiates them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from . import constants
from .errors import DuplicatePluginError, ManifestError
from .plugins import HeatmapPlugin, HottestPcPlugin, JumpTablePlugin
from .types import PluginDescriptor

logger = logging.getLogger(__name__)

PluginFactory = Callable[[], Any]


class PluginRegistry:
    """Name → factory table, populated once at process start."""

    def __init__(self) -> None:
        self._factories: dict[str, PluginFactory] = {}

    def register(self, name: str, factory: PluginFactory) -> None:
        if name in self._factories:
            raise DuplicatePluginError(name)
        self._factories[name] = factory

    def create(self, name: str) -> Any:
        factory = self._factories.get(name)
        if factory is None:
            raise ManifestError(
                f"Unknown plugin '{name}'. Registered: {sorted(self._factories)}"
            )
        return factory()

    def create_all(self, names: Iterable[str]) -> list[Any]:
        return [self.create(name) for name in names]

    def names(self) -> tuple[str, ...]:
        return tuple(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories


def builtin_registry() -> PluginRegistry:
    registry = PluginRegistry()
    registry.register(constants.HEATMAP_PLUGIN_ID, HeatmapPlugin)
    registry.register(constants.JUMPS_PLUGIN_ID, JumpTablePlugin)
    registry.register(constants.HOTTEST_PC_PLUGIN_ID, HottestPcPlugin)
    return registry


# ── Manifest ─────────────────────────────────────────────────────


class ManifestEntry(BaseModel):
    """One plugin line of a manifest group.

    ``plugin`` (alias ``file``) names the registry entry; it defaults to ``id``.
    ``dependsOn`` replaces the plugin's own declared dependencies.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str
    plugin: str | None = Field(default=None, validation_alias=AliasChoices("plugin", "file"))
    enabled: bool = True
    depends_on: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("dependsOn", "depends_on")
    )


_MANIFEST_ADAPTER = TypeAdapter(dict[str, list[ManifestEntry]])


def parse_manifest(data: Any) -> dict[str, list[ManifestEntry]]:
    """Validate a decoded manifest: ``{group: [entry, ...], ...}``."""
    try:
        return _MANIFEST_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise ManifestError(f"Invalid plugin manifest: {exc}") from exc


def load_manifest(
    source: str | Path | Mapping[str, Any],
    registry: PluginRegistry | None = None,
) -> list[PluginDescriptor]:
    """Resolve a manifest into plugin descriptors, groups in file order.

    Disabled entries are skipped. Ids must be unique across all groups and
    must match the ``plugin_id`` of the instantiated plugin.
    """
    registry = registry or builtin_registry()
    if isinstance(source, Mapping):
        data: Any = source
    else:
        try:
            data = json.loads(Path(source).read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ManifestError(f"{source}: not valid JSON: {exc}") from exc

    groups = parse_manifest(data)
    descriptors: list[PluginDescriptor] = []
    seen: set[str] = set()
    for group, entries in groups.items():
        loaded = 0
        for entry in entries:
            if not entry.enabled:
                logger.debug("Skipping disabled plugin %s (%s)", entry.id, group)
                continue
            if entry.id in seen:
                raise DuplicatePluginError(entry.id)
            seen.add(entry.id)

            plugin = registry.create(entry.plugin or entry.id)
            actual_id = getattr(plugin, "plugin_id", "")
            if actual_id != entry.id:
                raise ManifestError(
                    f"Plugin id mismatch in group '{group}': manifest has "
                    f"'{entry.id}', plugin has '{actual_id}'"
                )
            descriptors.append(PluginDescriptor.of(plugin, depends_on=entry.depends_on))
            loaded += 1
        logger.info("Loaded %d %s plugins", loaded, group)
    return descriptors
