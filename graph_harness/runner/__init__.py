r"""
Benchmark runner and orchestration.

Runs each benchmark in an isolated worker process, drives the platform
lifecycle inside the worker, and collects results in the parent.

    from graph_harness.runner import BenchmarkOrchestrator

    orchestrator = BenchmarkOrchestrator()
    result = orchestrator.run_benchmark("reference", run)
"""

from graph_harness.runner.executor import BenchmarkExecutor
from graph_harness.runner.handoff import RunStore
from graph_harness.runner.lifecycle import (
    FinalizedRun,
    LoadedGraph,
    PreparedRun,
    RanRun,
    StartedRun,
    VerifiedPlatform,
    verify,
)
from graph_harness.runner.orchestrator import BenchmarkOrchestrator, OrchestratorResult
from graph_harness.runner.process import WorkerEntryPoint, WorkerLauncher, WorkerProcess
from graph_harness.runner.timing import Timer, timed_section

__all__ = [
    "BenchmarkExecutor",
    "BenchmarkOrchestrator",
    "FinalizedRun",
    "LoadedGraph",
    "OrchestratorResult",
    "PreparedRun",
    "RanRun",
    "RunStore",
    "StartedRun",
    "Timer",
    "VerifiedPlatform",
    "WorkerEntryPoint",
    "WorkerLauncher",
    "WorkerProcess",
    "timed_section",
    "verify",
]
