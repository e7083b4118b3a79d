"""Process utilities for worker supervision.

Uses psutil to find and kill every process a worker spawned
(platform background services, helper tools) along with the worker.
"""

from __future__ import annotations

import logging

import psutil

__all__ = ["get_process_memory", "kill_process_tree"]

logger = logging.getLogger(__name__)


def get_process_memory(pid: int) -> int:
    """Get RSS memory of a process in bytes.

    Args:
        pid: Process id.

    Returns:
        Resident Set Size (RSS) in bytes, or 0 if the process is gone.
    """
    try:
        return psutil.Process(pid).memory_info().rss
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return 0


def kill_process_tree(pid: int, *, timeout: float = 5.0) -> list[int]:
    """Kill a process and all of its descendants.

    Children are collected before the parent is killed so that
    reparented grandchildren are not missed.

    Args:
        pid: Root process id.
        timeout: Seconds to wait for the killed processes to exit.

    Returns:
        Pids that were still alive after the timeout.
    """
    try:
        root = psutil.Process(pid)
        procs = root.children(recursive=True)
    except psutil.NoSuchProcess:
        return []
    procs.append(root)

    for proc in procs:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            pass
        except psutil.AccessDenied:
            logger.warning("Not permitted to kill process %d", proc.pid)

    _, alive = psutil.wait_procs(procs, timeout=timeout)
    return [proc.pid for proc in alive]
