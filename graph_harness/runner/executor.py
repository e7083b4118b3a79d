r"""
In-worker benchmark execution.

Drives one run through its lifecycle phases on a loaded graph, times
each phase, validates output when required and builds the result.
Platform failures never escape: they end up as flags on the result.

    from graph_harness.runner.executor import BenchmarkExecutor
    from graph_harness.runner.lifecycle import verify

    loaded = verify(platform).load_graph(run.graph)
    result = BenchmarkExecutor().run_benchmark(loaded, run)
"""

from __future__ import annotations

import logging

from graph_harness.errors import LifecycleError, PhaseError, ValidatorError
from graph_harness.runner.lifecycle import FinalizedRun, LoadedGraph, PreparedRun, RanRun, StartedRun
from graph_harness.runner.timing import timed_section
from graph_harness.types import (
    BenchmarkMetrics,
    BenchmarkRun,
    BenchmarkRunResult,
    BenchmarkRunResultBuilder,
    is_successful,
)
from graph_harness.validation import ValidationAdapter

__all__ = ["BenchmarkExecutor"]

logger = logging.getLogger(__name__)


class BenchmarkExecutor:
    """Runs the per-run lifecycle phases and summarizes the outcome."""

    def __init__(self, *, validation: ValidationAdapter | None = None) -> None:
        self._validation = validation or ValidationAdapter()
        self._builder: BenchmarkRunResultBuilder | None = None
        self._error_set = False

    def start(self, run: BenchmarkRun) -> BenchmarkRunResultBuilder:
        """Begin collecting the result of a run."""
        self._builder = BenchmarkRunResultBuilder(run)
        self._error_set = False
        return self._builder

    def _current(self, run: BenchmarkRun) -> BenchmarkRunResultBuilder:
        if self._builder is None or self._builder.run.id != run.id:
            raise LifecycleError(f"Run {run.id} was not started on this executor")
        return self._builder

    def _record_error(self, run: BenchmarkRun, message: str) -> None:
        # first failure wins; later ones are only logged
        if not self._error_set:
            self._current(run).set_error(message)
            self._error_set = True

    def preprocess(self, prepared: PreparedRun) -> StartedRun:
        """Configure the run on the platform (startup)."""
        builder = self._current(prepared.run)
        with timed_section("startup", callback=builder.record_phase):
            return prepared.startup()

    def execute(self, started: StartedRun) -> RanRun:
        """Run the algorithm and record completion."""
        run = started.run
        builder = self._current(run)
        logger.info("Runner executing benchmark %s.", run.id)

        builder.mark_start()
        with timed_section("run", callback=builder.record_phase):
            ran = started.run_algorithm()
        builder.mark_end()

        if not ran.completed:
            logger.error(
                'Algorithm "%s" on graph "%s" failed to complete:',
                run.algorithm.name,
                run.graph.name,
                exc_info=ran.error,
            )
            self._record_error(run, f"{type(ran.error).__name__}: {ran.error}")
        builder.set_completed(ran.completed)
        return ran

    def validate(self, ran: RanRun) -> None:
        """Validate output if the run completed and requires it.

        Validator failures are logged and count as not validated.
        """
        run = ran.run
        if not (ran.completed and run.validation_required):
            return

        builder = self._current(run)
        with timed_section("validate", callback=builder.record_phase):
            try:
                validated = self._validation.validate(run)
            except ValidatorError as e:
                logger.error("Failed to validate output: %s", e)
                validated = False
            except Exception:
                logger.exception("Validator raised while checking run %s", run.id)
                validated = False

        if not validated:
            logger.warning("Output of run %s is not valid", run.id)
        builder.set_validated(validated)

    def postprocess(self, ran: RanRun) -> FinalizedRun:
        """Collect platform metrics (finalize)."""
        builder = self._current(ran.run)
        with timed_section("finalize", callback=builder.record_phase):
            return ran.finalize()

    def summarize(self, run: BenchmarkRun, metrics: BenchmarkMetrics) -> BenchmarkRunResult:
        """Compute success and build the immutable result."""
        builder = self._current(run)
        successful = is_successful(run, completed=builder.completed, validated=builder.validated)
        builder.set_successful(successful)
        builder.set_metrics(metrics)
        result = builder.build()
        self._builder = None

        logger.info(
            "Benchmark %s finished: completed=%s, validated=%s, successful=%s",
            run.id,
            result.completed,
            result.validated,
            result.successful,
        )
        return result

    def run_benchmark(self, loaded: LoadedGraph, run: BenchmarkRun) -> BenchmarkRunResult:
        """Drive prepare, startup, run, validate, finalize and terminate.

        terminate is called once whenever prepare was entered, including
        when prepare itself failed.

        Args:
            loaded: Graph stage the run executes on.
            run: The benchmark run.

        Returns:
            The result of the run.
        """
        builder = self.start(run)
        metrics = BenchmarkMetrics()

        try:
            with timed_section("prepare", callback=builder.record_phase):
                prepared = loaded.prepare(run)
        except PhaseError as e:
            logger.error("Failed to prepare run %s: %s", run.id, e.cause)
            self._record_error(run, str(e))
            return self.summarize(run, metrics)

        try:
            started = self.preprocess(prepared)
            ran = self.execute(started)
            self.validate(ran)
            metrics = self.postprocess(ran).metrics
        except PhaseError as e:
            logger.error("Run %s aborted: %s", run.id, e)
            self._record_error(run, str(e))
        finally:
            with timed_section("terminate", callback=builder.record_phase):
                prepared.terminate()

        return self.summarize(run, metrics)
