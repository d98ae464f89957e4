from __future__ import annotations

import re
from typing import List, Set, Tuple

from ir import DependencyEdge

from .constants import CONTROL_FLOW_KEYWORDS

CONTROL_FLOW_RE = re.compile(r"\b(?:%s)\b" % "|".join(CONTROL_FLOW_KEYWORDS))


def compute_complexity(content: str) -> int:
    """Non-blank lines plus two per control-flow keyword.

    A size-weighted branching estimate, not cyclomatic complexity.
    """
    non_blank = sum(1 for line in content.split("\n") if line.strip())
    control = len(CONTROL_FLOW_RE.findall(content))
    return non_blank + control * 2


def mark_circular(edges: List[DependencyEdge]) -> None:
    pairs: Set[Tuple[str, str]] = {(edge.source, edge.target) for edge in edges}
    for edge in edges:
        if (edge.target, edge.source) in pairs:
            edge.is_circular = True


def circular_pairs(edges: List[DependencyEdge]) -> List[Tuple[str, str]]:
    seen: Set[Tuple[str, str]] = set()
    pairs: List[Tuple[str, str]] = []
    for edge in edges:
        if not edge.is_circular:
            continue
        first, second = sorted((edge.source, edge.target))
        if (first, second) in seen:
            continue
        seen.add((first, second))
        pairs.append((first, second))
    return pairs
