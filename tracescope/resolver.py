"""Dependency resolver: deterministic plugin execution order."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence

from .errors import CyclicDependencyError, DuplicatePluginError, MissingDependencyError
from .types import PluginDescriptor

logger = logging.getLogger(__name__)


def resolve_order(descriptors: Sequence[PluginDescriptor]) -> list[PluginDescriptor]:
    """Order *descriptors* so every plugin follows all of its dependencies.

    Kahn's algorithm: plugins with no dependencies are seeded in input
    order, and a dependent is enqueued the moment its last dependency has
    been emitted. The same input order always yields the same output.

    Raises:
        DuplicatePluginError: two descriptors share an id.
        MissingDependencyError: a dependency id names no descriptor.
        CyclicDependencyError: some plugins can never be scheduled;
            the error lists them (a self-dependency lands here too).
    """
    by_id: dict[str, PluginDescriptor] = {}
    for descriptor in descriptors:
        if descriptor.plugin_id in by_id:
            raise DuplicatePluginError(descriptor.plugin_id)
        by_id[descriptor.plugin_id] = descriptor

    in_degree: dict[str, int] = {plugin_id: 0 for plugin_id in by_id}
    dependents: dict[str, list[str]] = {plugin_id: [] for plugin_id in by_id}
    for descriptor in descriptors:
        for dep in descriptor.depends_on:
            if dep not in by_id:
                raise MissingDependencyError(descriptor.plugin_id, dep)
            in_degree[descriptor.plugin_id] += 1
            dependents[dep].append(descriptor.plugin_id)

    queue = deque(plugin_id for plugin_id, n in in_degree.items() if n == 0)
    order: list[PluginDescriptor] = []
    while queue:
        plugin_id = queue.popleft()
        order.append(by_id[plugin_id])
        for nxt in dependents[plugin_id]:
            in_degree[nxt] -= 1
            if in_degree[nxt] == 0:
                queue.append(nxt)

    if len(order) != len(by_id):
        emitted = {d.plugin_id for d in order}
        raise CyclicDependencyError([pid for pid in by_id if pid not in emitted])

    logger.debug("Resolved plugin order: %s", [d.plugin_id for d in order])
    return order
