r"""
Worker process entry point.

Hosts one platform integration for one benchmark run. Started by the
parent with two positional parameters:

    python -m graph_harness.runner.worker PLATFORM_ID BENCHMARK_ID

The run is read from, and the result written to, the hand-off store in
GRAPH_HARNESS_WORK_DIR. Exit codes: 0 when a result was written,
1 when the platform could not be set up or the run could not be loaded,
2 on a usage error.
"""

from __future__ import annotations

import logging
import sys
from typing import Annotated

import typer

from graph_harness.config import RunnerConfig, load_config
from graph_harness.errors import HandoffError, PhaseError, PlatformSetupError
from graph_harness.runner.executor import BenchmarkExecutor
from graph_harness.runner.handoff import RunStore
from graph_harness.runner.lifecycle import verify
from graph_harness.types import BenchmarkRunResult, Status
from graph_harness.utils.logs import WORKER_LOG_FORMAT, configure_logging

__all__ = ["main", "run_worker", "worker_command"]

logger = logging.getLogger(__name__)


def run_worker(platform_id: str, benchmark_id: str, *, config: RunnerConfig | None = None) -> int:
    """Execute one benchmark run inside this process.

    Args:
        platform_id: Registered platform name or `module:ClassName` path.
        benchmark_id: Id of the run stored in the hand-off store.
        config: Runner configuration (default: from the environment).

    Returns:
        Process exit code.
    """
    from graph_harness.platforms import PlatformRegistry

    config = config or load_config()
    store = RunStore(config.work_dir)

    try:
        run = store.load_run(benchmark_id)
    except HandoffError as e:
        logger.error("Cannot load benchmark %s: %s", benchmark_id, e)
        return 1

    try:
        platform = PlatformRegistry.create(platform_id)
        verified = verify(platform)
    except (ValueError, PlatformSetupError) as e:
        logger.error("Platform %s is not usable: %s", platform_id, e)
        return 1

    try:
        loaded = verified.load_graph(run.graph)
    except PhaseError as e:
        logger.error("Failed to load graph %s: %s", run.graph.name, e.cause)
        store.save_result(BenchmarkRunResult.failed(run, status=Status.FAILED, error=str(e)))
        return 1

    result = BenchmarkExecutor().run_benchmark(loaded, run)
    store.save_result(result)
    return 0


def worker_command(
    platform_id: Annotated[str, typer.Argument(help="Platform to host")],
    benchmark_id: Annotated[str, typer.Argument(help="Benchmark run to execute")],
) -> None:
    """Run one benchmark on one platform."""
    config = load_config()
    configure_logging(config.log_level, fmt=WORKER_LOG_FORMAT, stream=sys.stdout)
    code = run_worker(platform_id, benchmark_id, config=config)
    if code:
        raise typer.Exit(code)


def main() -> None:
    """Main entry point."""
    typer.run(worker_command)


if __name__ == "__main__":
    main()
