"""EVM trace replay through dependency-ordered analysis plugins."""

from .api import (  # noqa: F401
    analyze_trace_file,
    run_for_tx,
    run_on_deploy,
    run_on_redeploy,
)
from .runner import Runner  # noqa: F401
from .run_types import RunConfig  # noqa: F401
from .types import (  # noqa: F401
    ExecutionStep,
    MarkKind,
    Phase,
    Plugin,
    PluginDescriptor,
    RunEnvironment,
    RunOutput,
    TxMeta,
    View,
    ViewType,
)
