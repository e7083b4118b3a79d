r"""
Match rules for vertex output validation.

- ExactMatchRule: values must be identical (BFS, CDLP)
- EquivalenceMatchRule: labels must map one-to-one (WCC)
- EpsilonMatchRule: |ref - sys| <= 0.0001 * |ref| (PR, LCC, SSSP)

    from graph_harness.validation.rules import rule_for

    rule = rule_for(ValidationRule.EPSILON)
    rule.compare({"1": 0.5}, {"1": 0.50001})
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any

from graph_harness.types import ValidationRule

__all__ = [
    "EpsilonMatchRule",
    "EquivalenceMatchRule",
    "ExactMatchRule",
    "LDBC_EPSILON",
    "VertexRule",
    "epsilon_match",
    "rule_for",
]

LDBC_EPSILON = 0.0001  # 0.01% relative error tolerance


def epsilon_match(reference: float, system: float, epsilon: float = LDBC_EPSILON) -> bool:
    """Check if two float values match within epsilon tolerance.

    LDBC rule: |reference - system| <= epsilon * |reference|
    Special case: equal values (including infinities) always match.
    """
    if reference == system:
        return True
    if math.isinf(reference) or math.isinf(system):
        return False
    if reference == 0:
        return abs(system) <= epsilon
    return abs(reference - system) <= epsilon * abs(reference)


class VertexRule(ABC):
    """Parses vertex values and compares expected against actual output."""

    @abstractmethod
    def parse(self, raw: str) -> Any:
        """Parse one value. Raise ValueError if malformed."""
        ...

    def match(self, expected: Any, actual: Any) -> bool:
        return expected == actual

    def compare(self, expected: dict[str, Any], actual: dict[str, Any]) -> list[str]:
        """Return ids of vertices whose values do not match.

        Both mappings must have the same vertex set.
        """
        return [v for v, value in expected.items() if not self.match(value, actual[v])]


class ExactMatchRule(VertexRule):
    def parse(self, raw: str) -> int | str:
        try:
            return int(raw)
        except ValueError:
            return raw


class EpsilonMatchRule(VertexRule):
    def __init__(self, epsilon: float = LDBC_EPSILON) -> None:
        self._epsilon = epsilon

    def parse(self, raw: str) -> float:
        if raw.lower() in ("infinity", "inf"):
            return float("inf")
        return float(raw)

    def match(self, expected: Any, actual: Any) -> bool:
        return epsilon_match(expected, actual, self._epsilon)


class EquivalenceMatchRule(VertexRule):
    """Labels are arbitrary; only the partition they induce matters."""

    def parse(self, raw: str) -> str:
        return raw

    def compare(self, expected: dict[str, Any], actual: dict[str, Any]) -> list[str]:
        forward: dict[Any, Any] = {}
        backward: dict[Any, Any] = {}
        mismatched: list[str] = []
        for vertex, exp_label in expected.items():
            act_label = actual[vertex]
            if forward.setdefault(exp_label, act_label) != act_label:
                mismatched.append(vertex)
            elif backward.setdefault(act_label, exp_label) != exp_label:
                mismatched.append(vertex)
        return mismatched


def rule_for(rule: ValidationRule) -> VertexRule:
    """Create the match rule for a validation rule kind."""
    rules: dict[ValidationRule, type[VertexRule]] = {
        ValidationRule.EXACT: ExactMatchRule,
        ValidationRule.EQUIVALENCE: EquivalenceMatchRule,
        ValidationRule.EPSILON: EpsilonMatchRule,
    }
    return rules[rule]()
