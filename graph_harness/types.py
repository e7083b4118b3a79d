r"""
Core types for graph benchmark runs.

    from graph_harness.types import BenchmarkRun, BenchmarkRunResultBuilder

    builder = BenchmarkRunResultBuilder(run)
    builder.mark_start()
    ...
    result = builder.build()
    if result.ok:
        print(f"Took {result.duration_seconds:.2f}s")
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import IntEnum, auto
from pathlib import Path
from typing import Any

from graph_harness.errors import ResultBuilderError

__all__ = [
    "Algorithm",
    "BenchmarkMetrics",
    "BenchmarkRun",
    "BenchmarkRunResult",
    "BenchmarkRunResultBuilder",
    "FormattedGraph",
    "Phase",
    "Status",
    "ValidationRule",
    "is_successful",
]


class Status(IntEnum):
    """Benchmark run outcome status."""

    SUCCESS = auto()
    FAILED = auto()
    TIMEOUT = auto()
    NOT_STARTED = auto()


class Phase(IntEnum):
    """Lifecycle phase of a platform for one run."""

    UNINITIALIZED = auto()
    VERIFIED = auto()
    GRAPH_LOADED = auto()
    PREPARED = auto()
    STARTED = auto()
    RAN = auto()
    FINALIZED = auto()
    TERMINATED = auto()
    FAILED = auto()


class ValidationRule(IntEnum):
    """How algorithm output is compared against the expected output."""

    EXACT = auto()
    EQUIVALENCE = auto()
    EPSILON = auto()


@dataclass(frozen=True, slots=True)
class Algorithm:
    """A graph algorithm a platform can be benchmarked on.

    Attributes:
        acronym: Short identifier (BFS, PR, ...).
        name: Human-readable name.
        validation_rule: Rule used to validate output.
    """

    acronym: str
    name: str
    validation_rule: ValidationRule


@dataclass(frozen=True, slots=True)
class FormattedGraph:
    """Reference to a graph in vertex/edge file format.

    Attributes:
        name: Graph name, used in output file names.
        vertex_path: File with one vertex id per line.
        edge_path: File with `src dst [weight]` per line.
        directed: Whether edges are directed.
        weighted: Whether edges carry a weight column.
        num_vertices: Vertex count, if known.
        num_edges: Edge count, if known.
    """

    name: str
    vertex_path: Path
    edge_path: Path
    directed: bool = True
    weighted: bool = False
    num_vertices: int | None = None
    num_edges: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "vertex_path": str(self.vertex_path),
            "edge_path": str(self.edge_path),
            "directed": self.directed,
            "weighted": self.weighted,
            "num_vertices": self.num_vertices,
            "num_edges": self.num_edges,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FormattedGraph:
        return cls(
            name=data["name"],
            vertex_path=Path(data["vertex_path"]),
            edge_path=Path(data["edge_path"]),
            directed=data.get("directed", True),
            weighted=data.get("weighted", False),
            num_vertices=data.get("num_vertices"),
            num_edges=data.get("num_edges"),
        )


@dataclass(frozen=True, slots=True)
class BenchmarkRun:
    """One (algorithm, graph) job. Immutable for the duration of a run.

    Attributes:
        id: Unique run identifier.
        algorithm: Algorithm to execute.
        graph: Graph to execute it on.
        output_dir: Directory the platform writes output to.
        validation_dir: Directory holding expected output.
        validation_required: Whether output must be validated.
        timeout_seconds: Maximum time for the run phase.
        parameters: Algorithm parameters (source_vertex, damping_factor, ...).
    """

    id: str
    algorithm: Algorithm
    graph: FormattedGraph
    output_dir: Path
    validation_dir: Path
    validation_required: bool = True
    timeout_seconds: int = 3600
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, algorithm: Algorithm, graph: FormattedGraph, **kwargs: Any) -> BenchmarkRun:
        """Create a run with a freshly generated id."""
        return cls(id=uuid.uuid4().hex[:7], algorithm=algorithm, graph=graph, **kwargs)

    @property
    def output_name(self) -> str:
        return f"{self.graph.name}-{self.algorithm.acronym}"

    @property
    def output_path(self) -> Path:
        """File the platform writes algorithm output to."""
        return self.output_dir / self.output_name

    @property
    def validation_path(self) -> Path:
        """File holding the expected algorithm output."""
        return self.validation_dir / self.output_name

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "algorithm": self.algorithm.acronym,
            "graph": self.graph.to_dict(),
            "output_dir": str(self.output_dir),
            "validation_dir": str(self.validation_dir),
            "validation_required": self.validation_required,
            "timeout_seconds": self.timeout_seconds,
            "parameters": dict(self.parameters),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BenchmarkRun:
        from graph_harness.algorithms import get_algorithm

        return cls(
            id=data["id"],
            algorithm=get_algorithm(data["algorithm"]),
            graph=FormattedGraph.from_dict(data["graph"]),
            output_dir=Path(data["output_dir"]),
            validation_dir=Path(data["validation_dir"]),
            validation_required=data.get("validation_required", True),
            timeout_seconds=data.get("timeout_seconds", 3600),
            parameters=dict(data.get("parameters", {})),
        )


class BenchmarkMetrics(Mapping[str, Any]):
    """Read-only mapping of metric names to values reported by a platform."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._values = dict(values or {}, **kwargs)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"BenchmarkMetrics({self._values!r})"

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)


def is_successful(run: BenchmarkRun, *, completed: bool, validated: bool) -> bool:
    """Success rule: validation only counts when the run requires it."""
    return completed and validated if run.validation_required else completed


@dataclass(frozen=True, slots=True)
class BenchmarkRunResult:
    """Terminal record of one benchmark run.

    Attributes:
        run_id: Id of the originating BenchmarkRun.
        started_at: Start of the run phase (UTC), None if never started.
        ended_at: End of the run phase (UTC), None if never started.
        completed: The run phase returned without raising.
        validated: Validation ran and passed.
        successful: Overall outcome.
        metrics: Metrics reported by the platform.
        status: Outcome status.
        error: Error message if the run failed.
        phase_durations_ns: Elapsed nanoseconds per lifecycle phase.
    """

    run_id: str
    started_at: datetime | None
    ended_at: datetime | None
    completed: bool
    validated: bool
    successful: bool
    metrics: BenchmarkMetrics = field(default_factory=BenchmarkMetrics)
    status: Status = Status.SUCCESS
    error: str | None = None
    phase_durations_ns: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True if the run was successful."""
        return self.successful

    @property
    def duration_seconds(self) -> float | None:
        """Wall-clock duration of the run phase."""
        if self.started_at is None or self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()

    @classmethod
    def failed(cls, run: BenchmarkRun, *, status: Status, error: str) -> BenchmarkRunResult:
        """Result for a run that never produced its own record."""
        return cls(
            run_id=run.id,
            started_at=None,
            ended_at=None,
            completed=False,
            validated=False,
            successful=False,
            status=status,
            error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "completed": self.completed,
            "validated": self.validated,
            "successful": self.successful,
            "metrics": self.metrics.to_dict(),
            "status": self.status.name,
            "error": self.error,
            "phase_durations_ns": dict(self.phase_durations_ns),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BenchmarkRunResult:
        started = data.get("started_at")
        ended = data.get("ended_at")
        return cls(
            run_id=data["run_id"],
            started_at=datetime.fromisoformat(started) if started else None,
            ended_at=datetime.fromisoformat(ended) if ended else None,
            completed=data["completed"],
            validated=data["validated"],
            successful=data["successful"],
            metrics=BenchmarkMetrics(data.get("metrics", {})),
            status=Status[data.get("status", "FAILED")],
            error=data.get("error"),
            phase_durations_ns=dict(data.get("phase_durations_ns", {})),
        )


class BenchmarkRunResultBuilder:
    """Staged, write-once builder for BenchmarkRunResult.

    Each field may be set at most once. Unset flags default to False.

        builder = BenchmarkRunResultBuilder(run)
        builder.mark_start()
        builder.set_completed(True)
        builder.mark_end()
        result = builder.build()
    """

    def __init__(self, run: BenchmarkRun) -> None:
        self._run = run
        self._fields: dict[str, Any] = {}
        self._phases: dict[str, int] = {}
        self._built = False

    @property
    def run(self) -> BenchmarkRun:
        return self._run

    def _set(self, name: str, value: Any) -> None:
        if self._built:
            raise ResultBuilderError(f"Result for run {self._run.id} is already built")
        if name in self._fields:
            raise ResultBuilderError(f"Field '{name}' of run {self._run.id} is already set")
        self._fields[name] = value

    def mark_start(self) -> None:
        """Record the start of the run phase."""
        self._set("started_at", datetime.now(UTC))

    def mark_end(self) -> None:
        """Record the end of the run phase."""
        self._set("ended_at", datetime.now(UTC))

    def set_completed(self, completed: bool) -> None:
        self._set("completed", completed)

    def set_validated(self, validated: bool) -> None:
        self._set("validated", validated)

    def set_successful(self, successful: bool) -> None:
        self._set("successful", successful)

    def set_metrics(self, metrics: BenchmarkMetrics) -> None:
        self._set("metrics", metrics)

    def set_error(self, error: str) -> None:
        self._set("error", error)

    def record_phase(self, phase: str, elapsed_ns: int) -> None:
        """Record the elapsed time of one lifecycle phase."""
        if phase in self._phases:
            raise ResultBuilderError(f"Phase '{phase}' of run {self._run.id} is already recorded")
        self._phases[phase] = elapsed_ns

    @property
    def completed(self) -> bool:
        return self._fields.get("completed", False)

    @property
    def validated(self) -> bool:
        return self._fields.get("validated", False)

    def build(self) -> BenchmarkRunResult:
        """Freeze the collected fields into a BenchmarkRunResult."""
        completed = self.completed
        validated = self.validated
        expected = is_successful(self._run, completed=completed, validated=validated)
        successful = self._fields.get("successful", expected)
        if successful != expected:
            msg = (
                f"Run {self._run.id}: successful={successful} contradicts "
                f"completed={completed}, validated={validated}, "
                f"validation_required={self._run.validation_required}"
            )
            raise ResultBuilderError(msg)

        self._built = True
        return BenchmarkRunResult(
            run_id=self._run.id,
            started_at=self._fields.get("started_at"),
            ended_at=self._fields.get("ended_at"),
            completed=completed,
            validated=validated,
            successful=successful,
            metrics=self._fields.get("metrics", BenchmarkMetrics()),
            status=Status.SUCCESS if successful else Status.FAILED,
            error=self._fields.get("error"),
            phase_durations_ns=dict(self._phases),
        )
