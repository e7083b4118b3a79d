r"""
Shared pytest fixtures for graph-harness tests.
"""

from pathlib import Path
from typing import Any

import pytest

from graph_harness.algorithms import get_algorithm
from graph_harness.config import RunnerConfig, load_config
from graph_harness.platforms.base import BasePlatform
from graph_harness.types import BenchmarkMetrics, BenchmarkRun, FormattedGraph

# 1 -> 2 -> 3 -> 1 is a cycle, 4 -> 5 a separate component, 6 isolated
TINY_VERTICES = ["1", "2", "3", "4", "5", "6"]
TINY_EDGES = [("1", "2", 1.0), ("2", "3", 2.0), ("3", "1", 0.5), ("1", "3", 4.0), ("4", "5", 1.5)]


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep reference platform storage inside the test's tmp dir."""
    storage = tmp_path / "storage"
    monkeypatch.setenv("GRAPH_HARNESS_REFERENCE_STORAGE", str(storage))
    return storage


@pytest.fixture
def tiny_graph(tmp_path: Path) -> FormattedGraph:
    """Small weighted directed graph in vertex/edge file format."""
    data = tmp_path / "data"
    data.mkdir()
    vertex_path = data / "tiny.v"
    edge_path = data / "tiny.e"
    vertex_path.write_text("\n".join(TINY_VERTICES) + "\n")
    edge_path.write_text("\n".join(f"{s} {t} {w}" for s, t, w in TINY_EDGES) + "\n")
    return FormattedGraph(
        "tiny",
        vertex_path,
        edge_path,
        directed=True,
        weighted=True,
        num_vertices=len(TINY_VERTICES),
        num_edges=len(TINY_EDGES),
    )


@pytest.fixture
def make_run(tmp_path: Path, tiny_graph: FormattedGraph):
    """Factory for benchmark runs on the tiny graph."""

    def factory(acronym: str = "BFS", **kwargs: Any) -> BenchmarkRun:
        kwargs.setdefault("output_dir", tmp_path / "output")
        kwargs.setdefault("validation_dir", tmp_path / "expected")
        kwargs.setdefault("timeout_seconds", 30)
        kwargs.setdefault("graph", tiny_graph)
        return BenchmarkRun.create(get_algorithm(acronym), **kwargs)

    return factory


@pytest.fixture
def runner_config(tmp_path: Path) -> RunnerConfig:
    """Configuration with short grace periods for fast tests."""
    return load_config(
        work_dir=tmp_path / "work",
        startup_allowance_seconds=20.0,
        termination_grace_seconds=0.1,
        drain_timeout_seconds=5.0,
    )


class RecordingPlatform(BasePlatform):
    """Platform that records lifecycle calls and fails on request.

    Args:
        fail: Map of phase name to the exception that phase raises.
        output: Vertex values written to the output file by run.
        metrics: Metrics returned by finalize.
        run_seconds: Seconds run sleeps before returning.
    """

    def __init__(
        self,
        *,
        fail: dict[str, Exception] | None = None,
        output: dict[str, Any] | None = None,
        metrics: dict[str, Any] | None = None,
        run_seconds: float = 0.0,
    ) -> None:
        self.fail = fail or {}
        self.output = output
        self.metrics = metrics or {"processing_time_ns": 42}
        self.run_seconds = run_seconds
        self.calls: list[str] = []
        self.overlapping: list[str] = []
        self._running = False

    @property
    def name(self) -> str:
        return "recording"

    def _record(self, phase: str) -> None:
        self.calls.append(phase)
        if self._running:
            self.overlapping.append(phase)
        if phase in self.fail:
            raise self.fail[phase]

    def verify_setup(self) -> None:
        self._record("verify_setup")

    def load_graph(self, graph: FormattedGraph) -> None:
        self._record("load_graph")

    def prepare(self, run: BenchmarkRun) -> None:
        self._record("prepare")

    def startup(self, run: BenchmarkRun) -> None:
        self._record("startup")

    def run(self, run: BenchmarkRun) -> None:
        import time

        self._record("run")
        self._running = True
        try:
            if self.run_seconds:
                time.sleep(self.run_seconds)
        finally:
            self._running = False
        if self.output is not None:
            run.output_path.parent.mkdir(parents=True, exist_ok=True)
            run.output_path.write_text("".join(f"{v} {value}\n" for v, value in self.output.items()))

    def finalize(self, run: BenchmarkRun) -> BenchmarkMetrics:
        self._record("finalize")
        return BenchmarkMetrics(self.metrics)

    def terminate(self, run: BenchmarkRun) -> None:
        self._record("terminate")

    def delete_graph(self, graph: FormattedGraph) -> None:
        self._record("delete_graph")


@pytest.fixture
def recording_platform() -> RecordingPlatform:
    return RecordingPlatform()


def write_vertex_file(path: Path, values: dict[str, Any]) -> Path:
    """Write a `vertex value` file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{v} {value}\n" for v, value in values.items()))
    return path
