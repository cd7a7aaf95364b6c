"""Lifecycle orchestrator: drives plugins through the deploy and transaction phases."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence
from typing import Any

from . import constants
from .context import ContextBuilder
from .errors import HookError
from .resolver import resolve_order
from .run_types import RunConfig
from .snapshot import SnapshotRecorder
from .state import RunState
from .types import ExecutionStep, Phase, PluginDescriptor, RunEnvironment, RunOutput

logger = logging.getLogger(__name__)


class _Session:
    """Mutable bookkeeping for a single run."""

    def __init__(
        self,
        env: RunEnvironment,
        order: list[PluginDescriptor],
        config: RunConfig,
    ):
        self.order = order
        self.state = RunState.for_plugins(d.plugin_id for d in order)
        self.builder = ContextBuilder(env, self.state)
        self.recorder = SnapshotRecorder(enabled=config.record_snapshots)

    async def invoke(
        self,
        descriptor: PluginDescriptor,
        phase: Phase,
        step_index: int,
        step: ExecutionStep | None = None,
    ) -> Any:
        """Run one hook to completion and snapshot afterwards.

        Missing hooks are skipped and return ``None``.
        """
        hook = descriptor.hook(phase)
        if hook is None:
            return None

        ctx = self.builder.build(descriptor.plugin_id, phase, step_index)
        args = (ctx, step) if phase == Phase.STEP else (ctx,)
        logger.debug("%s.%s step=%d", descriptor.plugin_id, phase.value, step_index)
        try:
            result = hook(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            raise HookError(descriptor.plugin_id, phase.value, step_index, exc) from exc

        self.recorder.record(ctx)
        return result

    async def run_phase(self, phase: Phase, step_index: int) -> None:
        for descriptor in self.order:
            await self.invoke(descriptor, phase, step_index)

    def output(self) -> RunOutput:
        return RunOutput(
            results=self.state.results,
            marks=self.state.marks,
            views=self.state.views,
            snapshots=self.recorder.snapshots,
        )


class Runner:
    """Replays a trace through a set of plugins.

    Hooks run strictly one at a time: each is awaited to completion before
    the next starts, so the shared bus and snapshots follow the resolved
    order exactly. Any hook failure aborts the run with :class:`HookError`.
    """

    def __init__(self, config: RunConfig = RunConfig()):
        self.config = config

    async def run_for_tx(
        self, env: RunEnvironment, plugins: Sequence[Any]
    ) -> RunOutput:
        """Run every transaction phase over ``env.trace``.

        Phases: ``on_tx_start`` → ``on_start`` → ``on_step`` (steps outer,
        plugins inner) → ``on_finish`` → ``on_tx_end``. A non-``None``
        ``on_finish`` value is recorded as the plugin's result and published
        on the shared bus under the plugin's id.
        """
        if not plugins:
            return RunOutput()

        session = _Session(env, self._resolve(plugins), self.config)
        trace = env.trace
        last_index = max(0, len(trace) - 1)
        logger.info(
            "Transaction run: %d plugins, %d steps", len(session.order), len(trace)
        )

        await session.run_phase(Phase.TX_START, 0)
        await session.run_phase(Phase.START, 0)

        for i, step in enumerate(trace):
            for descriptor in session.order:
                await session.invoke(descriptor, Phase.STEP, i, step)

        for descriptor in session.order:
            data = await session.invoke(descriptor, Phase.FINISH, last_index)
            if data is not None:
                session.state.publish_result(descriptor.plugin_id, data)

        await session.run_phase(Phase.TX_END, last_index)

        output = session.output()
        logger.info(
            "Transaction run finished: %d results, %d marks, %d views, %d snapshots",
            len(output.results),
            len(output.marks),
            len(output.views),
            len(output.snapshots),
        )
        return output

    async def run_on_deploy(
        self, env: RunEnvironment, plugins: Sequence[Any]
    ) -> RunOutput:
        """Invoke ``on_deploy`` once per plugin with a step-less context."""
        return await self._run_one_shot(env, plugins, Phase.DEPLOY)

    async def run_on_redeploy(
        self, env: RunEnvironment, plugins: Sequence[Any]
    ) -> RunOutput:
        """Invoke ``on_redeploy`` once per plugin with a step-less context."""
        return await self._run_one_shot(env, plugins, Phase.REDEPLOY)

    async def _run_one_shot(
        self, env: RunEnvironment, plugins: Sequence[Any], phase: Phase
    ) -> RunOutput:
        if not plugins:
            return RunOutput()

        session = _Session(env, self._resolve(plugins), self.config)
        logger.info("One-shot %s run: %d plugins", phase.value, len(session.order))
        await session.run_phase(phase, constants.NO_STEP_INDEX)
        return session.output()

    @staticmethod
    def _resolve(plugins: Sequence[Any]) -> list[PluginDescriptor]:
        return resolve_order([PluginDescriptor.of(p) for p in plugins])
