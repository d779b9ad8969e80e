from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import Sequence

from obsload.config import SCENARIOS, RunConfig, TargetConfig, resolve_scenario
from obsload.errors import StartupPreconditionError
from obsload.loadgen import LoadTest
from obsload.report import format_summary

logger = logging.getLogger("obsload")

DEFAULT_TARGET = "http://localhost:3010"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Weighted HTTP load generator")
    parser.add_argument(
        "scenario",
        nargs="?",
        default="normal",
        help=f"Load preset: {', '.join(SCENARIOS)} (unknown names use normal)",
    )
    parser.add_argument("--target", default=os.environ.get("TARGET_URL", DEFAULT_TARGET))
    parser.add_argument(
        "--duration",
        type=float,
        default=60.0,
        help="Run length in seconds, 0 runs until interrupted",
    )
    parser.add_argument("--rps", type=float, help="Override the scenario's requests per second")
    parser.add_argument("--workers", type=int, help="Override the scenario's worker count")
    parser.add_argument("--delay-ms", type=float, help="Fixed delay between a worker's requests")
    parser.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout in seconds")
    parser.add_argument("--seed", type=int)
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
    return parser


def _build_config(args: argparse.Namespace) -> RunConfig:
    scenario = resolve_scenario(args.scenario)
    return RunConfig(
        target=TargetConfig(base_url=args.target, timeout_sec=args.timeout),
        requests_per_second=args.rps if args.rps is not None else scenario.requests_per_second,
        workers=args.workers if args.workers is not None else scenario.workers,
        duration_sec=None if args.duration == 0 else args.duration,
        worker_delay_ms=args.delay_ms,
        seed=args.seed,
        scenario=scenario.name,
    )


async def _run(load_test: LoadTest) -> None:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, load_test.stop)
    except (NotImplementedError, RuntimeError):
        logger.debug("SIGINT handler unavailable, Ctrl+C will abort the run")
    try:
        await load_test.run()
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid LOG_LEVEL {args.log_level!r}, choose from {', '.join(LOG_LEVELS)}")
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = _build_config(args)
    logger.info("Running scenario %s", config.scenario)
    logger.debug("Run configuration: %s", config.to_metadata())
    load_test = LoadTest(config)
    try:
        asyncio.run(_run(load_test))
    except StartupPreconditionError as exc:
        print(f"Load test not started: {exc}", file=sys.stderr)
        return 1

    print(format_summary(load_test.stats, load_test.aggregator.results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
