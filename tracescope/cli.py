"""Command-line front end: replay a trace file through plugins and print the output."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .api import run_for_tx, run_on_deploy
from .errors import TracescopeError
from .registry import builtin_registry, load_manifest
from .run_types import RunConfig
from .trace import load_environment

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tracescope",
        description="Replay an EVM transaction trace through analysis plugins",
    )
    parser.add_argument("trace_file", help="Trace JSON file (structLogs + bytecode + tx)")
    parser.add_argument("--manifest", "-m", default=None,
                        help="Plugin manifest JSON (default: all built-in plugins)")
    parser.add_argument("--plugins", "-p", default=None,
                        help="Comma-separated registered plugin ids to run")
    parser.add_argument("--deploy", action="store_true",
                        help="Run the one-shot on_deploy phase instead of the transaction phases")
    parser.add_argument("--no-snapshots", action="store_true",
                        help="Skip snapshot capture and omit snapshots from the output")
    parser.add_argument("--timeout", "-t", type=float, default=None,
                        help="Abort the whole run after this many seconds")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log every hook invocation")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = RunConfig(
        record_snapshots=not args.no_snapshots,
        timeout_seconds=args.timeout,
    )

    try:
        registry = builtin_registry()
        if args.manifest:
            plugins = load_manifest(args.manifest, registry)
        elif args.plugins:
            plugins = registry.create_all(
                name.strip() for name in args.plugins.split(",") if name.strip()
            )
        else:
            plugins = registry.create_all(registry.names())

        env = load_environment(args.trace_file)
        run = run_on_deploy if args.deploy else run_for_tx
        output = run(env, plugins, config)
    except (TracescopeError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    print(json.dumps(output.to_dict(include_snapshots=not args.no_snapshots), indent=2))
    return 0
