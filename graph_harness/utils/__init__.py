"""Utility modules for graph-harness."""

from graph_harness.utils.logs import LOG_FORMAT, configure_logging
from graph_harness.utils.process import get_process_memory, kill_process_tree

__all__ = [
    "LOG_FORMAT",
    "configure_logging",
    "get_process_memory",
    "kill_process_tree",
]
