r"""
Command-line interface for graph-harness.

    graph-harness run -a bfs -g example --vertices example.v --edges example.e -P source_vertex=1
    graph-harness platforms
    graph-harness worker reference 3f9a2c1
"""

from pathlib import Path
from typing import Annotated, Any

import typer

__all__ = ["app", "main"]

app = typer.Typer(
    name="graph-harness",
    help="Execution core of a graph-processing benchmark harness.",
    no_args_is_help=True,
)


def _parse_parameters(values: list[str]) -> dict[str, Any]:
    """Parse KEY=VALUE pairs, converting numeric values."""
    params: dict[str, Any] = {}
    for item in values:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            msg = f"Invalid parameter '{item}', expected KEY=VALUE"
            raise typer.BadParameter(msg)
        value: Any = raw
        for convert in (int, float):
            try:
                value = convert(raw)
                break
            except ValueError:
                continue
        params[key] = value
    return params


@app.command()
def run(
    algorithm: Annotated[str, typer.Option("-a", "--algorithm", help="Algorithm: bfs, pr, wcc, cdlp, lcc, sssp")],
    graph: Annotated[str, typer.Option("-g", "--graph", help="Graph name")],
    vertices: Annotated[Path, typer.Option("--vertices", help="Vertex file")],
    edges: Annotated[Path, typer.Option("--edges", help="Edge file")],
    platform: Annotated[str, typer.Option("-p", "--platform", help="Platform id")] = "reference",
    output: Annotated[Path, typer.Option("-o", "--output", help="Output directory")] = Path("./output"),
    validation: Annotated[
        Path | None, typer.Option("--validation", help="Directory with expected output")
    ] = None,
    directed: Annotated[bool, typer.Option("--directed/--undirected", help="Edge direction")] = True,
    weighted: Annotated[bool, typer.Option("--weighted", help="Edges carry a weight column")] = False,
    params: Annotated[
        list[str] | None, typer.Option("-P", "--param", help="Algorithm parameter KEY=VALUE (repeatable)")
    ] = None,
    timeout: Annotated[int | None, typer.Option("--timeout", help="Run timeout in seconds")] = None,
    verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Verbose output")] = False,
) -> None:
    """Run one benchmark in a worker process."""
    from graph_harness.algorithms import get_algorithm
    from graph_harness.config import load_config
    from graph_harness.runner import BenchmarkOrchestrator
    from graph_harness.types import BenchmarkRun, FormattedGraph
    from graph_harness.utils import configure_logging

    config = load_config(timeout_seconds=timeout)
    configure_logging("DEBUG" if verbose else config.log_level)

    try:
        algo = get_algorithm(algorithm)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    benchmark = BenchmarkRun.create(
        algo,
        FormattedGraph(graph, vertices, edges, directed=directed, weighted=weighted),
        output_dir=output,
        validation_dir=validation or output,
        validation_required=validation is not None,
        timeout_seconds=config.timeout_seconds,
        parameters=_parse_parameters(params or []),
    )

    orchestrator = BenchmarkOrchestrator(config=config)

    def progress(platform_id: str, run_id: str, status: str) -> None:
        typer.echo(f"  [{platform_id}] {run_id}: {status}")

    if verbose:
        orchestrator.set_progress_callback(progress)

    typer.echo(f"Running {algo.acronym} on '{graph}' with platform '{platform}' (benchmark {benchmark.id})...")
    result = orchestrator.run_benchmark(platform, benchmark)

    typer.echo(f"Status: {result.status.name}")
    typer.echo(f"Completed: {result.completed}, validated: {result.validated}, successful: {result.successful}")
    for key, value in result.metrics.items():
        typer.echo(f"  {key}: {value}")
    if result.error:
        typer.echo(f"Error: {result.error}", err=True)

    if not result.successful:
        raise typer.Exit(1)


@app.command()
def platforms() -> None:
    """List registered platforms."""
    from graph_harness.platforms import PlatformRegistry

    typer.echo("Available platforms:")
    for name in PlatformRegistry.list():
        typer.echo(f"  - {name}")


@app.command()
def unload(
    graph: Annotated[str, typer.Option("-g", "--graph", help="Graph name")],
    vertices: Annotated[Path, typer.Option("--vertices", help="Vertex file")],
    edges: Annotated[Path, typer.Option("--edges", help="Edge file")],
    platform: Annotated[str, typer.Option("-p", "--platform", help="Platform id")] = "reference",
) -> None:
    """Remove a loaded graph from platform storage."""
    from graph_harness.runner import BenchmarkOrchestrator
    from graph_harness.types import FormattedGraph

    try:
        BenchmarkOrchestrator().unload_graph(platform, FormattedGraph(graph, vertices, edges))
    except Exception as e:
        typer.echo(f"Failed to unload {graph} from {platform}: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Unloaded {graph} from {platform}")


@app.command()
def worker(
    platform_id: Annotated[str, typer.Argument(help="Platform to host")],
    benchmark_id: Annotated[str, typer.Argument(help="Benchmark run to execute")],
) -> None:
    """Run one benchmark inside this process (used by the orchestrator)."""
    from graph_harness.runner.worker import worker_command

    worker_command(platform_id, benchmark_id)


def main() -> None:
    """Main entry point."""
    app()
