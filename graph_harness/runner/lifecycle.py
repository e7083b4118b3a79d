r"""
Platform lifecycle as a chain of stage objects.

Each lifecycle stage is its own type, and the only way to obtain a stage
is from the previous one, so phases cannot be called out of order:

    verify(platform)                  -> VerifiedPlatform
      .load_graph(graph)              -> LoadedGraph      (reusable per graph)
        .prepare(run)                 -> PreparedRun
          .startup()                  -> StartedRun
            .run_algorithm()          -> RanRun           (completed flag)
              .finalize()             -> FinalizedRun     (metrics)

Every per-run stage exposes terminate(), which releases the run's
resources exactly once no matter which stage the run reached.
A failed prepare terminates the run itself before raising.

    from graph_harness.runner.lifecycle import verify

    loaded = verify(platform).load_graph(graph)
    prepared = loaded.prepare(run)
    try:
        ran = prepared.startup().run_algorithm()
        metrics = ran.finalize().metrics
    finally:
        prepared.terminate()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from graph_harness.errors import LifecycleError, PhaseError, PlatformSetupError
from graph_harness.protocols import Platform
from graph_harness.types import BenchmarkMetrics, BenchmarkRun, FormattedGraph, Phase

__all__ = [
    "FinalizedRun",
    "LoadedGraph",
    "PreparedRun",
    "RanRun",
    "StartedRun",
    "VerifiedPlatform",
    "verify",
]

logger = logging.getLogger(__name__)

_TOKEN = object()


def verify(platform: Platform) -> VerifiedPlatform:
    """Run verify_setup and return the verified platform.

    Raises:
        PlatformSetupError: If the platform prerequisites are not met.
    """
    try:
        platform.verify_setup()
    except PlatformSetupError:
        raise
    except Exception as e:
        msg = f"Platform {platform.name} failed setup verification: {e}"
        raise PlatformSetupError(msg) from e
    logger.info("Platform %s verified", platform.name)
    return VerifiedPlatform(_TOKEN, platform)


class _Stage:
    phase: Phase = Phase.UNINITIALIZED

    def __init__(self, token: object) -> None:
        if token is not _TOKEN:
            msg = f"{type(self).__name__} cannot be created directly; start from verify(platform)"
            raise LifecycleError(msg)


class VerifiedPlatform(_Stage):
    """A platform whose setup has been verified."""

    phase = Phase.VERIFIED

    def __init__(self, token: object, platform: Platform) -> None:
        super().__init__(token)
        self._platform = platform

    @property
    def platform(self) -> Platform:
        return self._platform

    def load_graph(self, graph: FormattedGraph) -> LoadedGraph:
        """Load a graph into platform storage."""
        try:
            self._platform.load_graph(graph)
        except Exception as e:
            raise PhaseError(Phase.GRAPH_LOADED, e) from e
        logger.info("Graph %s loaded on %s", graph.name, self._platform.name)
        return LoadedGraph(_TOKEN, self._platform, graph)


class LoadedGraph(_Stage):
    """A graph resident in platform storage. Shared by every run on it."""

    phase = Phase.GRAPH_LOADED

    def __init__(self, token: object, platform: Platform, graph: FormattedGraph) -> None:
        super().__init__(token)
        self._platform = platform
        self._graph = graph
        self._deleted = False

    @property
    def graph(self) -> FormattedGraph:
        return self._graph

    def prepare(self, run: BenchmarkRun) -> PreparedRun:
        """Acquire resources for a run on this graph.

        On failure the run is terminated before PhaseError is raised.
        """
        if self._deleted:
            raise LifecycleError(f"Graph {self._graph.name} was deleted")
        if run.graph.name != self._graph.name:
            msg = f"Run {run.id} targets graph {run.graph.name}, not {self._graph.name}"
            raise LifecycleError(msg)

        state = _RunState(self._platform, run)
        try:
            self._platform.prepare(run)
        except Exception as e:
            state.phase = Phase.FAILED
            state.terminate()
            raise PhaseError(Phase.PREPARED, e) from e
        state.phase = Phase.PREPARED
        return PreparedRun(_TOKEN, state)

    def delete(self) -> None:
        """Unload the graph. No further runs can be prepared on it."""
        if self._deleted:
            raise LifecycleError(f"Graph {self._graph.name} was already deleted")
        self._deleted = True
        try:
            self._platform.delete_graph(self._graph)
        except Exception as e:
            raise PhaseError(Phase.GRAPH_LOADED, e) from e
        logger.info("Graph %s deleted from %s", self._graph.name, self._platform.name)


class _RunState:
    """Bookkeeping shared by all stages of one run."""

    def __init__(self, platform: Platform, run: BenchmarkRun) -> None:
        self.platform = platform
        self.run = run
        self.phase = Phase.GRAPH_LOADED
        self.terminated = False

    def terminate(self) -> bool:
        if self.terminated:
            raise LifecycleError(f"Run {self.run.id} was already terminated")
        self.terminated = True
        try:
            self.platform.terminate(self.run)
        except Exception:
            logger.exception("Platform %s failed to terminate run %s", self.platform.name, self.run.id)
            return False
        finally:
            if self.phase != Phase.FAILED:
                self.phase = Phase.TERMINATED
        return True


class _RunStage(_Stage):
    def __init__(self, token: object, state: _RunState) -> None:
        super().__init__(token)
        self._state = state
        self._spent = False

    @property
    def run(self) -> BenchmarkRun:
        return self._state.run

    @property
    def current_phase(self) -> Phase:
        """Phase the run is in now, which may be past this stage."""
        return self._state.phase

    @property
    def terminated(self) -> bool:
        return self._state.terminated

    def _advance(self) -> None:
        if self._spent:
            raise LifecycleError(f"{self.phase.name} stage of run {self.run.id} was already advanced")
        if self._state.terminated:
            raise LifecycleError(f"Run {self.run.id} was already terminated")
        self._spent = True

    def _fail(self, phase: Phase, cause: Exception) -> PhaseError:
        self._state.phase = Phase.FAILED
        return PhaseError(phase, cause)

    def terminate(self) -> bool:
        """Release the run's resources.

        Returns:
            False if the platform raised while terminating (logged).

        Raises:
            LifecycleError: If the run was already terminated.
        """
        return self._state.terminate()


class PreparedRun(_RunStage):
    """Resources for the run are acquired."""

    phase = Phase.PREPARED

    def startup(self) -> StartedRun:
        """Configure run paths."""
        self._advance()
        try:
            self._state.platform.startup(self.run)
        except Exception as e:
            raise self._fail(Phase.STARTED, e) from e
        self._state.phase = Phase.STARTED
        return StartedRun(_TOKEN, self._state)


class StartedRun(_RunStage):
    """The run is configured and ready to execute."""

    phase = Phase.STARTED

    def run_algorithm(self) -> RanRun:
        """Execute the algorithm.

        Blocks until the platform returns. A run that never returns is
        bounded by the parent's deadline, which kills the worker. Failures
        do not raise: they are captured on the returned RanRun so the run
        can still be finalized.
        """
        self._advance()
        error: Exception | None = None
        try:
            self._state.platform.run(self.run)
        except Exception as e:
            error = e
        self._state.phase = Phase.RAN
        return RanRun(_TOKEN, self._state, error)


class RanRun(_RunStage):
    """The algorithm has run, successfully or not."""

    phase = Phase.RAN

    def __init__(self, token: object, state: _RunState, error: Exception | None) -> None:
        super().__init__(token, state)
        self._error = error

    @property
    def completed(self) -> bool:
        return self._error is None

    @property
    def error(self) -> Exception | None:
        return self._error

    def finalize(self) -> FinalizedRun:
        """Collect metrics and restore the platform to a ready state."""
        self._advance()
        try:
            metrics = self._state.platform.finalize(self.run)
        except Exception as e:
            raise self._fail(Phase.FINALIZED, e) from e
        if not isinstance(metrics, BenchmarkMetrics):
            metrics = BenchmarkMetrics(metrics if isinstance(metrics, Mapping) else {})
        self._state.phase = Phase.FINALIZED
        return FinalizedRun(_TOKEN, self._state, metrics)


class FinalizedRun(_RunStage):
    """Metrics are collected; only terminate remains."""

    phase = Phase.FINALIZED

    def __init__(self, token: object, state: _RunState, metrics: BenchmarkMetrics) -> None:
        super().__init__(token, state)
        self._metrics = metrics

    @property
    def metrics(self) -> BenchmarkMetrics:
        return self._metrics
