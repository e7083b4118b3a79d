r"""
Exception hierarchy for graph-harness.

Everything raised on purpose by the harness derives from GraphHarnessError,
so suite drivers can tell harness faults apart from platform bugs.

    from graph_harness.errors import PhaseError

    try:
        prepared = loaded.prepare(run)
    except PhaseError as e:
        print(e.phase.name, e.cause)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from graph_harness.types import Phase

__all__ = [
    "GraphHarnessError",
    "HandoffError",
    "LifecycleError",
    "PhaseError",
    "PlatformExecutionError",
    "PlatformSetupError",
    "ResultBuilderError",
    "ValidatorError",
    "WorkerLaunchError",
]


class GraphHarnessError(Exception):
    """Base class for all harness errors."""


class PlatformSetupError(GraphHarnessError):
    """Platform prerequisites are not met. Fatal for the run."""


class PlatformExecutionError(GraphHarnessError):
    """A platform failed while executing an algorithm."""


class PhaseError(GraphHarnessError):
    """A lifecycle phase raised.

    Attributes:
        phase: The phase that was being entered.
        cause: The exception raised by the platform.
    """

    def __init__(self, phase: Phase, cause: BaseException) -> None:
        self.phase = phase
        self.cause = cause
        super().__init__(f"Phase {phase.name} failed: {cause}")


class LifecycleError(GraphHarnessError):
    """A lifecycle stage was used out of order or more than once."""


class ValidatorError(GraphHarnessError):
    """The output validator could not run (missing or malformed files)."""


class WorkerLaunchError(GraphHarnessError):
    """The worker process could not be spawned."""


class ResultBuilderError(GraphHarnessError):
    """A result field was written twice or the result is inconsistent."""


class HandoffError(GraphHarnessError):
    """A run or result file is missing or unreadable."""
