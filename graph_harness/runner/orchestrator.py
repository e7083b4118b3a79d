r"""
Parent-side benchmark orchestration.

Runs each benchmark in a fresh worker process under a hard deadline and
reads back the result the worker persisted.

    from graph_harness.runner import BenchmarkOrchestrator

    orchestrator = BenchmarkOrchestrator()
    result = orchestrator.run_benchmark("reference", run)
    print(result.status.name, result.successful)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from graph_harness.config import RunnerConfig, load_config
from graph_harness.errors import HandoffError, WorkerLaunchError
from graph_harness.runner.handoff import RunStore
from graph_harness.runner.process import WorkerLauncher
from graph_harness.types import BenchmarkRun, BenchmarkRunResult, FormattedGraph, Status

__all__ = ["BenchmarkOrchestrator", "OrchestratorResult", "ProgressCallback"]

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str, str], None]


@dataclass
class OrchestratorResult:
    """Results of a sequence of runs on one platform.

    Attributes:
        platform: Platform id the runs executed on.
        results: One result per run, in execution order.
        started_at: Timestamp when the first run started.
        completed_at: Timestamp when the last run completed.
    """

    platform: str
    results: list[BenchmarkRunResult] = field(default_factory=list)
    started_at: float = 0.0
    completed_at: float = 0.0

    @property
    def duration_seconds(self) -> float:
        """Total duration in seconds."""
        return self.completed_at - self.started_at

    @property
    def success_count(self) -> int:
        """Number of successful runs."""
        return sum(1 for r in self.results if r.successful)

    @property
    def failure_count(self) -> int:
        """Number of unsuccessful runs."""
        return sum(1 for r in self.results if not r.successful)


class BenchmarkOrchestrator:
    """Launches one worker per benchmark run and collects its result."""

    def __init__(
        self,
        *,
        config: RunnerConfig | None = None,
        launcher: WorkerLauncher | None = None,
        store: RunStore | None = None,
    ) -> None:
        self._config = config or load_config()
        self._launcher = launcher or WorkerLauncher(config=self._config)
        self._store = store or RunStore(self._config.work_dir)
        self._progress_callback: ProgressCallback | None = None

    @property
    def config(self) -> RunnerConfig:
        return self._config

    @property
    def store(self) -> RunStore:
        return self._store

    def set_progress_callback(self, callback: ProgressCallback) -> None:
        """Set callback(platform_id, run_id, status) for progress updates."""
        self._progress_callback = callback

    def _progress(self, platform_id: str, run_id: str, status: str) -> None:
        if self._progress_callback:
            self._progress_callback(platform_id, run_id, status)

    def run_benchmark(self, platform_id: str, run: BenchmarkRun) -> BenchmarkRunResult:
        """Execute one run in a worker process.

        Never raises for failures inside the run: they are reported on
        the returned result.

        Args:
            platform_id: Platform the worker hosts.
            run: The benchmark run.

        Returns:
            The worker's result, or a failed result with status
            NOT_STARTED (no result produced) or TIMEOUT (worker killed).
        """
        self._progress(platform_id, run.id, "running")
        deadline = run.timeout_seconds + self._config.startup_allowance_seconds

        try:
            self._store.discard(run.id)
            self._store.save_run(run)
            worker = self._launcher.launch(platform_id, run.id)
        except (OSError, ValueError, WorkerLaunchError) as e:
            logger.error("Failed to start benchmark %s: %s", run.id, e)
            self._discard(run.id)
            return self._finish(platform_id, BenchmarkRunResult.failed(run, status=Status.NOT_STARTED, error=str(e)))

        timed_out = False
        try:
            code = worker.wait(timeout=deadline)
            logger.info("Worker for benchmark %s exited with code %d", run.id, code)
        except TimeoutError:
            timed_out = True
            logger.error(
                "Benchmark %s exceeded its %.0fs deadline; killing worker %d (rss=%d bytes)",
                run.id,
                deadline,
                worker.pid,
                worker.memory_bytes,
            )
            self._launcher.terminate(worker)

        try:
            result = self._store.load_result(run.id)
        except HandoffError as e:
            logger.error("Discarding result of benchmark %s: %s", run.id, e)
            result = None
        self._discard(run.id)

        if result is None:
            if timed_out:
                error = f"Worker killed after {deadline:.0f}s"
                result = BenchmarkRunResult.failed(run, status=Status.TIMEOUT, error=error)
            else:
                tail = "\n".join(worker.tail[-5:])
                error = f"Worker exited with code {worker.returncode} without a result"
                if tail:
                    error = f"{error}:\n{tail}"
                result = BenchmarkRunResult.failed(run, status=Status.NOT_STARTED, error=error)

        return self._finish(platform_id, result)

    def _finish(self, platform_id: str, result: BenchmarkRunResult) -> BenchmarkRunResult:
        self._progress(platform_id, result.run_id, result.status.name.lower())
        return result

    def _discard(self, run_id: str) -> None:
        try:
            self._store.discard(run_id)
        except OSError as e:
            logger.warning("Could not remove hand-off files of benchmark %s: %s", run_id, e)

    def run_all(self, platform_id: str, runs: list[BenchmarkRun]) -> OrchestratorResult:
        """Execute runs one after another, each in its own worker."""
        outcome = OrchestratorResult(platform=platform_id)
        outcome.started_at = time.time()
        for run in runs:
            outcome.results.append(self.run_benchmark(platform_id, run))
        outcome.completed_at = time.time()
        return outcome

    def unload_graph(self, platform_id: str, graph: FormattedGraph) -> None:
        """Remove a graph from platform storage once no run needs it.

        Raises:
            ValueError: If the platform is unknown.
        """
        from graph_harness.platforms import PlatformRegistry

        platform = PlatformRegistry.create(platform_id)
        platform.delete_graph(graph)
        logger.info("Graph %s unloaded from %s", graph.name, platform_id)
