r"""
Timing utilities for lifecycle phases.

    from graph_harness.runner.timing import Timer, timed_section
"""

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

__all__ = ["Timer", "timed_section"]


class Timer:
    """Context manager for timing code blocks.

        with Timer() as t:
            do_something()
        print(f"Elapsed: {t.elapsed_ms}ms")
    """

    def __init__(self) -> None:
        self._start: int = 0
        self._end: int = 0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter_ns()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self._end = time.perf_counter_ns()

    @property
    def elapsed_ns(self) -> int:
        """Elapsed time in nanoseconds."""
        return self._end - self._start

    @property
    def elapsed_ms(self) -> float:
        """Elapsed time in milliseconds."""
        return self.elapsed_ns / 1_000_000

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return self.elapsed_ns / 1_000_000_000


@contextmanager
def timed_section(name: str, *, callback: Callable[[str, int], None] | None = None) -> Iterator[Timer]:
    """Context manager for timing named code sections.

    The callback fires even when the section raises.

    Args:
        name: Name of the section being timed.
        callback: Optional callback(name, elapsed_ns) called on exit.

    Yields:
        Timer instance.
    """
    timer = Timer()
    timer.__enter__()
    try:
        yield timer
    finally:
        timer.__exit__(None, None, None)
        if callback:
            callback(name, timer.elapsed_ns)
