r"""
Vertex output validator.

Compares a platform's output file against the expected output,
both holding one `vertex value` pair per line.

    from graph_harness.validation.validator import VertexValidator

    validator = VertexValidator(run.output_path, run.validation_path, ValidationRule.EXACT)
    if not validator.execute():
        ...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from graph_harness.errors import ValidatorError
from graph_harness.types import ValidationRule
from graph_harness.validation.rules import VertexRule, rule_for

__all__ = ["VertexValidator"]

logger = logging.getLogger(__name__)


class VertexValidator:
    """Validate per-vertex algorithm output against expected values."""

    def __init__(
        self,
        output_path: Path,
        validation_path: Path,
        rule: ValidationRule,
        *,
        verbose: bool = True,
        max_reported: int = 10,
    ) -> None:
        self._output_path = Path(output_path)
        self._validation_path = Path(validation_path)
        self._rule: VertexRule = rule_for(rule)
        self._verbose = verbose
        self._max_reported = max_reported

    def execute(self) -> bool:
        """Compare output with expected values.

        Returns:
            True if every vertex matches, False otherwise.

        Raises:
            ValidatorError: If either file is missing or malformed.
        """
        expected = self._load(self._validation_path, "validation")
        actual = self._load(self._output_path, "output")

        missing = expected.keys() - actual.keys()
        extra = actual.keys() - expected.keys()
        if missing or extra:
            if self._verbose:
                logger.info(
                    "Vertex sets differ: %d missing from output, %d unexpected",
                    len(missing),
                    len(extra),
                )
            return False

        mismatched = self._rule.compare(expected, actual)
        if mismatched:
            if self._verbose:
                for vertex in mismatched[: self._max_reported]:
                    logger.info("Vertex %s: expected %s, got %s", vertex, expected[vertex], actual[vertex])
                logger.info("%d of %d vertices do not match", len(mismatched), len(expected))
            return False

        logger.info("Validation passed for %d vertices", len(expected))
        return True

    def _load(self, path: Path, kind: str) -> dict[str, Any]:
        if not path.is_file():
            raise ValidatorError(f"Missing {kind} file: {path}")

        values: dict[str, Any] = {}
        with open(path) as f:
            for lineno, line in enumerate(f, start=1):
                parts = line.split()
                if not parts:
                    continue
                if len(parts) != 2:
                    raise ValidatorError(f"{path}:{lineno}: expected 'vertex value', got {line.strip()!r}")
                try:
                    values[parts[0]] = self._rule.parse(parts[1])
                except ValueError as e:
                    raise ValidatorError(f"{path}:{lineno}: invalid value {parts[1]!r}") from e
        return values
