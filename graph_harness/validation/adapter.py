r"""
Validation adapter.

Thin pass-through from a benchmark run to an output checker.

    from graph_harness.validation import ValidationAdapter

    if ValidationAdapter().validate(run):
        ...
"""

from graph_harness.protocols import ValidatorFactory
from graph_harness.types import BenchmarkRun
from graph_harness.validation.validator import VertexValidator

__all__ = ["ValidationAdapter"]


class ValidationAdapter:
    """Builds a validator for a run and returns its verdict."""

    def __init__(self, validator_factory: ValidatorFactory | None = None) -> None:
        self._factory = validator_factory or VertexValidator

    def validate(self, run: BenchmarkRun) -> bool:
        """Check the run's output.

        Returns:
            True if output matches, False on a mismatch.

        Raises:
            ValidatorError: If the validator cannot run.
        """
        validator = self._factory(run.output_path, run.validation_path, run.algorithm.validation_rule)
        return bool(validator.execute())
