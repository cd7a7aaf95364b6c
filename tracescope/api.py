"""Synchronous entry points around the async :class:`Runner`.

Each function drives one whole run on a fresh event loop. When
``config.timeout_seconds`` is set the entire run is bounded by it; hitting
the limit cancels the in-flight hook and raises :class:`RunTimeoutError`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Sequence
from pathlib import Path
from typing import Any, TypeVar

from .errors import RunTimeoutError
from .run_types import RunConfig
from .runner import Runner
from .trace import load_environment
from .types import RunEnvironment, RunOutput

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_for_tx(
    env: RunEnvironment, plugins: Sequence[Any], config: RunConfig = RunConfig()
) -> RunOutput:
    """Replay ``env.trace`` through *plugins* (all transaction phases)."""
    return _drive(Runner(config).run_for_tx(env, plugins), config)


def run_on_deploy(
    env: RunEnvironment, plugins: Sequence[Any], config: RunConfig = RunConfig()
) -> RunOutput:
    """Run each plugin's ``on_deploy`` hook once."""
    return _drive(Runner(config).run_on_deploy(env, plugins), config)


def run_on_redeploy(
    env: RunEnvironment, plugins: Sequence[Any], config: RunConfig = RunConfig()
) -> RunOutput:
    """Run each plugin's ``on_redeploy`` hook once."""
    return _drive(Runner(config).run_on_redeploy(env, plugins), config)


def analyze_trace_file(
    path: str | Path, plugins: Sequence[Any], config: RunConfig = RunConfig()
) -> RunOutput:
    """Load a trace JSON file and run the transaction phases over it."""
    return run_for_tx(load_environment(path), plugins, config)


def _drive(run: Coroutine[Any, Any, T], config: RunConfig) -> T:
    if config.timeout_seconds is None:
        return asyncio.run(run)
    return asyncio.run(_with_timeout(run, config.timeout_seconds))


async def _with_timeout(run: Coroutine[Any, Any, T], timeout_seconds: float) -> T:
    try:
        return await asyncio.wait_for(run, timeout_seconds)
    except asyncio.TimeoutError as exc:
        logger.error("Run exceeded %.1fs timeout", timeout_seconds)
        raise RunTimeoutError(timeout_seconds) from exc
