r"""
Reference platform backed by NetworkX.

Runs the LDBC Graphalytics core algorithms (BFS, PR, WCC, CDLP, LCC, SSSP)
in-process. Useful for producing expected output and as a smoke test of
the harness itself.

Requires: pip install networkx

Environment variables:
    GRAPH_HARNESS_REFERENCE_STORAGE: Directory for loaded graphs
        (default: <tmp>/graph-harness-reference)

    from graph_harness.platforms.reference import ReferencePlatform

    platform = ReferencePlatform(storage_dir="/tmp/graphs")
    platform.load_graph(graph)
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any

from graph_harness.config import get_env
from graph_harness.errors import PlatformExecutionError, PlatformSetupError
from graph_harness.platforms.base import BasePlatform, PlatformRegistry
from graph_harness.runner.timing import Timer
from graph_harness.types import BenchmarkMetrics, BenchmarkRun, FormattedGraph

__all__ = ["LDBC_INFINITY", "ReferencePlatform", "format_value", "vertex_key"]

LDBC_INFINITY = 9223372036854775807  # Sentinel for unreachable vertices
LDBC_DAMPING_FACTOR = 0.85


def vertex_key(vertex: str) -> tuple[int, int | str]:
    """Order vertex ids numerically when they are integers."""
    try:
        return (0, int(vertex))
    except ValueError:
        return (1, vertex)


def format_value(value: Any) -> str:
    """Format one output value the way validation files expect."""
    if isinstance(value, float):
        if value == float("inf"):
            return "infinity"
        return repr(value)
    return str(value)


@PlatformRegistry.register("reference")
class ReferencePlatform(BasePlatform):
    """In-process NetworkX platform."""

    def __init__(self, *, storage_dir: str | Path | None = None) -> None:
        default = Path(tempfile.gettempdir()) / "graph-harness-reference"
        self._storage_dir = Path(storage_dir or get_env("REFERENCE_STORAGE", default=str(default)))
        self._graph: Any = None
        self._vertices: list[str] = []
        self._processing_ns = 0

    @property
    def name(self) -> str:
        return "reference"

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    def _stored_path(self, graph: FormattedGraph) -> Path:
        return self._storage_dir / f"{graph.name}.json"

    def verify_setup(self) -> None:
        try:
            import networkx  # noqa: F401
        except ImportError as e:
            msg = "networkx package not installed. Install with: pip install networkx"
            raise PlatformSetupError(msg) from e

        try:
            self._storage_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Storage directory {self._storage_dir} is not writable: {e}"
            raise PlatformSetupError(msg) from e

    def load_graph(self, graph: FormattedGraph) -> None:
        stored = self._stored_path(graph)
        if stored.exists():
            return

        vertices = [line.strip() for line in graph.vertex_path.read_text().splitlines() if line.strip()]
        edges: list[tuple[str, str, float]] = []
        for line in graph.edge_path.read_text().splitlines():
            parts = line.split()
            if not parts:
                continue
            weight = float(parts[2]) if graph.weighted and len(parts) > 2 else 1.0
            edges.append((parts[0], parts[1], weight))

        self._storage_dir.mkdir(parents=True, exist_ok=True)
        tmp = stored.with_suffix(".tmp")
        tmp.write_text(json.dumps({"directed": graph.directed, "vertices": vertices, "edges": edges}))
        tmp.replace(stored)

    def prepare(self, run: BenchmarkRun) -> None:
        import networkx as nx

        data = json.loads(self._stored_path(run.graph).read_text())
        G = nx.DiGraph() if data["directed"] else nx.Graph()
        G.add_nodes_from(data["vertices"])
        for src, tgt, weight in data["edges"]:
            G.add_edge(src, tgt, weight=weight)

        self._graph = G
        self._vertices = data["vertices"]

    def run(self, run: BenchmarkRun) -> None:
        if self._graph is None:
            msg = f"Graph {run.graph.name} is not prepared"
            raise PlatformExecutionError(msg)

        handlers = {
            "BFS": self._bfs,
            "PR": self._pagerank,
            "WCC": self._wcc,
            "CDLP": self._cdlp,
            "LCC": self._lcc,
            "SSSP": self._sssp,
        }
        handler = handlers.get(run.algorithm.acronym)
        if handler is None:
            msg = f"Algorithm {run.algorithm.acronym} is not supported by {self.name}"
            raise PlatformExecutionError(msg)

        with Timer() as t:
            values = handler(run.parameters)
        self._processing_ns = t.elapsed_ns

        run.output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(run.output_path, "w") as f:
            for vertex in self._vertices:
                f.write(f"{vertex} {format_value(values[vertex])}\n")

    def finalize(self, run: BenchmarkRun) -> BenchmarkMetrics:
        return BenchmarkMetrics(
            processing_time_ns=self._processing_ns,
            vertices=self._graph.number_of_nodes() if self._graph is not None else 0,
            edges=self._graph.number_of_edges() if self._graph is not None else 0,
        )

    def terminate(self, run: BenchmarkRun) -> None:
        self._graph = None
        self._vertices = []

    def delete_graph(self, graph: FormattedGraph) -> None:
        self._stored_path(graph).unlink(missing_ok=True)

    def _source(self, params: dict[str, Any]) -> str:
        source = params.get("source_vertex")
        if source is None or str(source) not in self._graph:
            msg = f"Source vertex {source!r} is missing from the graph"
            raise PlatformExecutionError(msg)
        return str(source)

    def _bfs(self, params: dict[str, Any]) -> dict[str, int]:
        import networkx as nx

        distances = dict(nx.single_source_shortest_path_length(self._graph, self._source(params)))
        return {v: distances.get(v, LDBC_INFINITY) for v in self._vertices}

    def _pagerank(self, params: dict[str, Any]) -> dict[str, float]:
        """Fixed-iteration PageRank; dangling vertices spread rank evenly."""
        G = self._graph
        n = G.number_of_nodes()
        damping = float(params.get("damping_factor", LDBC_DAMPING_FACTOR))
        iterations = int(params.get("max_iterations", 20))
        if n == 0:
            return {}

        out_degree = {v: G.out_degree(v) if G.is_directed() else G.degree(v) for v in G}
        dangling = [v for v, degree in out_degree.items() if degree == 0]
        rank = {v: 1.0 / n for v in G}

        for _ in range(iterations):
            dangling_sum = sum(rank[v] for v in dangling)
            base = (1.0 - damping) / n + damping * dangling_sum / n
            incoming = G.predecessors if G.is_directed() else G.neighbors
            rank = {v: base + damping * sum(rank[u] / out_degree[u] for u in incoming(v)) for v in G}

        return rank

    def _wcc(self, params: dict[str, Any]) -> dict[str, str]:
        import networkx as nx

        if self._graph.is_directed():
            components = nx.weakly_connected_components(self._graph)
        else:
            components = nx.connected_components(self._graph)

        labels: dict[str, str] = {}
        for component in components:
            label = min(component, key=vertex_key)
            for vertex in component:
                labels[vertex] = label
        return labels

    def _cdlp(self, params: dict[str, Any]) -> dict[str, str]:
        """Synchronous label propagation, ties broken by smallest label.

        All vertices update from the previous iteration's labels
        (not NetworkX's asynchronous variant).
        """
        G = self._graph.to_undirected() if self._graph.is_directed() else self._graph
        labels: dict[str, str] = {node: node for node in G.nodes()}

        for _ in range(int(params.get("max_iterations", 10))):
            new_labels: dict[str, str] = {}
            for node in G.nodes():
                neighbor_labels = [labels[n] for n in G.neighbors(node)]
                if not neighbor_labels:
                    new_labels[node] = labels[node]
                    continue
                freq: dict[str, int] = {}
                for lbl in neighbor_labels:
                    freq[lbl] = freq.get(lbl, 0) + 1
                max_freq = max(freq.values())
                new_labels[node] = min((lbl for lbl, cnt in freq.items() if cnt == max_freq), key=vertex_key)
            if new_labels == labels:
                break  # converged
            labels = new_labels

        return labels

    def _lcc(self, params: dict[str, Any]) -> dict[str, float]:
        import networkx as nx

        coefficients = nx.clustering(self._graph)
        return {str(k): float(v) for k, v in coefficients.items()}

    def _sssp(self, params: dict[str, Any]) -> dict[str, float]:
        import networkx as nx

        distances = nx.single_source_dijkstra_path_length(self._graph, self._source(params), weight="weight")
        return {v: float(distances.get(v, float("inf"))) for v in self._vertices}
