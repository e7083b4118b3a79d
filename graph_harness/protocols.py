r"""
Protocol definitions for platform integrations and validators.

Every platform integration must implement the Platform protocol.
Output checkers plugged into the validation adapter implement Validator.

    from graph_harness.protocols import Platform

    class MyPlatform(Platform):
        ...
"""

from pathlib import Path
from typing import Protocol, runtime_checkable

from graph_harness.types import BenchmarkMetrics, BenchmarkRun, FormattedGraph, ValidationRule

__all__ = [
    "Platform",
    "Validator",
    "ValidatorFactory",
]


@runtime_checkable
class Platform(Protocol):
    """Lifecycle contract of a graph-processing platform integration.

    The harness calls the operations in this order, never skipping one:
    verify_setup, load_graph, prepare, startup, run, finalize, terminate.
    delete_graph is called by the suite once no run needs the graph.
    """

    @property
    def name(self) -> str:
        """Unique platform name, used to label results."""
        ...

    def verify_setup(self) -> None:
        """Check platform and environment prerequisites."""
        ...

    def load_graph(self, graph: FormattedGraph) -> None:
        """Convert and upload a graph into platform storage.

        The graph must stay available across runs until delete_graph.
        """
        ...

    def prepare(self, run: BenchmarkRun) -> None:
        """Acquire compute resources and start background services."""
        ...

    def startup(self, run: BenchmarkRun) -> None:
        """Configure input, output and log locations for the run."""
        ...

    def run(self, run: BenchmarkRun) -> None:
        """Execute the algorithm. Raise on failure."""
        ...

    def finalize(self, run: BenchmarkRun) -> BenchmarkMetrics:
        """Report metrics and make the platform ready for the next run."""
        ...

    def terminate(self, run: BenchmarkRun) -> None:
        """Release resources acquired in prepare."""
        ...

    def delete_graph(self, graph: FormattedGraph) -> None:
        """Unload a graph from platform storage."""
        ...


@runtime_checkable
class Validator(Protocol):
    """Output correctness checker for one run."""

    def execute(self) -> bool:
        """Return True if output matches, False on mismatch.

        Raises:
            ValidatorError: If the check cannot be carried out.
        """
        ...


@runtime_checkable
class ValidatorFactory(Protocol):
    """Builds a Validator for an output file, expected file and rule."""

    def __call__(self, output_path: Path, validation_path: Path, rule: ValidationRule) -> Validator: ...
