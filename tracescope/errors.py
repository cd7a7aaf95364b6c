"""Exception hierarchy for plugin configuration and run failures."""

from __future__ import annotations


class TracescopeError(Exception):
    """Root of every error raised by this package."""


# ── Configuration errors (raised before any hook runs) ───────────


class PluginConfigError(TracescopeError, ValueError):
    """The plugin set cannot be turned into an execution order."""


class DuplicatePluginError(PluginConfigError):
    def __init__(self, plugin_id: str):
        self.plugin_id = plugin_id
        super().__init__(f"Duplicate plugin id: {plugin_id}")


class MissingDependencyError(PluginConfigError):
    def __init__(self, plugin_id: str, dependency_id: str):
        self.plugin_id = plugin_id
        self.dependency_id = dependency_id
        super().__init__(
            f"Plugin '{plugin_id}' depends on missing plugin '{dependency_id}'"
        )


class CyclicDependencyError(PluginConfigError):
    def __init__(self, plugin_ids: list[str]):
        self.plugin_ids = list(plugin_ids)
        super().__init__(
            f"Cyclic plugin dependencies detected among: {', '.join(self.plugin_ids)}"
        )


class ManifestError(PluginConfigError):
    """A plugin manifest entry cannot be matched to a registered plugin."""


# ── Run errors ───────────────────────────────────────────────────


class HookError(TracescopeError, RuntimeError):
    """A plugin hook raised; the whole run is aborted.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, plugin_id: str, phase: str, step_index: int, cause: BaseException):
        self.plugin_id = plugin_id
        self.phase = phase
        self.step_index = step_index
        super().__init__(
            f"Plugin '{plugin_id}' failed in {phase} at step {step_index}: "
            f"{type(cause).__name__}: {cause}"
        )


class RunTimeoutError(TracescopeError, TimeoutError):
    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Run did not complete within {timeout_seconds}s")


class TraceFormatError(TracescopeError, ValueError):
    """A trace file does not match the expected structLogs layout."""
