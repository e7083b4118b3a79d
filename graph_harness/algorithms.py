r"""
Algorithm catalog.

The six LDBC Graphalytics core algorithms and the rule used
to validate each one's output:
- Exact Match: BFS, CDLP (output values must be identical)
- Equivalence Match: WCC (label mappings must be logically equivalent)
- Epsilon Match: PR, LCC, SSSP (tolerance: |ref - sys| <= 0.0001 * |ref|)

Reference: https://ldbcouncil.org/ldbc_graphalytics_docs/graphalytics_spec.pdf

    from graph_harness.algorithms import get_algorithm

    algorithm = get_algorithm("pr")
    print(algorithm.name)
"""

from graph_harness.types import Algorithm, ValidationRule

__all__ = ["ALGORITHMS", "get_algorithm"]

ALGORITHMS: dict[str, Algorithm] = {
    "BFS": Algorithm(acronym="BFS", name="Breadth-first search", validation_rule=ValidationRule.EXACT),
    "PR": Algorithm(acronym="PR", name="PageRank", validation_rule=ValidationRule.EPSILON),
    "WCC": Algorithm(acronym="WCC", name="Weakly connected components", validation_rule=ValidationRule.EQUIVALENCE),
    "CDLP": Algorithm(
        acronym="CDLP",
        name="Community detection using label propagation",
        validation_rule=ValidationRule.EXACT,
    ),
    "LCC": Algorithm(acronym="LCC", name="Local clustering coefficient", validation_rule=ValidationRule.EPSILON),
    "SSSP": Algorithm(acronym="SSSP", name="Single-source shortest paths", validation_rule=ValidationRule.EPSILON),
}


def get_algorithm(name: str) -> Algorithm:
    """Get an algorithm by acronym (case-insensitive).

    Args:
        name: Algorithm acronym (bfs, pr, wcc, cdlp, lcc, sssp).

    Returns:
        The matching Algorithm.

    Raises:
        ValueError: If the acronym is not recognized.
    """
    key = name.upper()
    if key not in ALGORITHMS:
        valid = ", ".join(ALGORITHMS.keys())
        msg = f"Unknown algorithm '{name}'. Valid algorithms: {valid}"
        raise ValueError(msg)
    return ALGORITHMS[key]
