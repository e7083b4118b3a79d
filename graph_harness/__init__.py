r"""
graph-harness: execution core of a graph-processing benchmark harness.

Runs one (algorithm, graph) benchmark at a time on a platform
integration, each in an isolated worker process, drives the platform
through its lifecycle, validates output and reports the outcome.

    from pathlib import Path

    from graph_harness import BenchmarkRun, FormattedGraph, get_algorithm
    from graph_harness.runner import BenchmarkOrchestrator

    graph = FormattedGraph("example", Path("data/example.v"), Path("data/example.e"))
    run = BenchmarkRun.create(get_algorithm("BFS"), graph, output_dir=out, validation_dir=ref)
    result = BenchmarkOrchestrator().run_benchmark("reference", run)
"""

from graph_harness.algorithms import ALGORITHMS, get_algorithm
from graph_harness.config import RunnerConfig, load_config
from graph_harness.types import (
    Algorithm,
    BenchmarkMetrics,
    BenchmarkRun,
    BenchmarkRunResult,
    FormattedGraph,
    Phase,
    Status,
    ValidationRule,
)

__all__ = [
    "ALGORITHMS",
    "Algorithm",
    "BenchmarkMetrics",
    "BenchmarkRun",
    "BenchmarkRunResult",
    "FormattedGraph",
    "Phase",
    "RunnerConfig",
    "Status",
    "ValidationRule",
    "get_algorithm",
    "load_config",
]

__version__ = "0.1.0"
