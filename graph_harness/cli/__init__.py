r"""
Command-line interface for graph-harness.

    graph-harness run -a bfs -g example --vertices example.v --edges example.e -P source_vertex=1
    graph-harness platforms
"""

from graph_harness.cli.main import app, main

__all__ = [
    "app",
    "main",
]
