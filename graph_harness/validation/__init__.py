r"""
Output validation.

    from graph_harness.validation import ValidationAdapter, VertexValidator
"""

from graph_harness.validation.adapter import ValidationAdapter
from graph_harness.validation.rules import (
    EpsilonMatchRule,
    EquivalenceMatchRule,
    ExactMatchRule,
    epsilon_match,
    rule_for,
)
from graph_harness.validation.validator import VertexValidator

__all__ = [
    "EpsilonMatchRule",
    "EquivalenceMatchRule",
    "ExactMatchRule",
    "ValidationAdapter",
    "VertexValidator",
    "epsilon_match",
    "rule_for",
]
