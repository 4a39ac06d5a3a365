"""Heuristic discovery of TVL and APY figures in schemaless JSON payloads.

Embedded page payloads carry many incidental numbers (ids, indices,
unrelated percentages). The scanner collects every value whose key looks like
a metric, and the pickers keep only magnitudes that are plausible for the
metric before taking the largest.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from config import (
    MAX_PLAUSIBLE_APY_PCT,
    MIN_PLAUSIBLE_APY_PCT,
    MIN_PLAUSIBLE_TVL_USD,
    SCAN_MAX_DEPTH,
    SCAN_MAX_NODES,
)
from utils.numbers import parse_number

logger = logging.getLogger(__name__)

METRIC_KEYWORDS = (
    "tvl",
    "apy",
    "apr",
    "yield",
    "rate",
    "boost",
    "deposit",
    "underlying",
    "aum",
    "value",
    "locked",
)

TVL_KEYWORDS = ("tvl", "value", "locked", "deposit")
APY_KEYWORDS = ("apy", "apr", "yield", "rate")

# Translation store embedded in every Next.js page
SKIP_KEYS = ("_nexti18next",)


@dataclass
class MetricCandidate:
    """A value found under a metric-like key."""

    path: str
    value: Union[float, str]
    raw: Any = None

    @property
    def key(self) -> str:
        """Lower-cased name of the last path segment."""
        return self.path.rsplit(".", 1)[-1].lower()

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.value, float)


def _children(node: Any) -> Iterable[Tuple[str, Any]]:
    if isinstance(node, dict):
        return [(str(k), v) for k, v in node.items()]
    if isinstance(node, list):
        return [(str(i), v) for i, v in enumerate(node)]
    return []


def scan_metrics(
    tree: Any,
    keywords: Sequence[str] = METRIC_KEYWORDS,
    skip_keys: Sequence[str] = SKIP_KEYS,
    max_depth: int = SCAN_MAX_DEPTH,
    max_nodes: int = SCAN_MAX_NODES,
) -> List[MetricCandidate]:
    """Collect metric-like values from an arbitrary JSON tree.

    The walk is depth-first in declaration order and uses an explicit stack,
    so it is bounded by max_depth and max_nodes and terminates on cyclic
    input.

    Args:
        tree: Decoded JSON (dicts, lists, scalars).
        keywords: Key substrings that mark a value as a candidate.
        skip_keys: Key substrings whose subtrees are ignored entirely.
        max_depth: Maximum nesting level to descend into.
        max_nodes: Maximum number of entries to visit.

    Returns:
        Candidates in traversal order.
    """
    keywords = tuple(k.lower() for k in keywords)
    skip_keys = tuple(k.lower() for k in skip_keys)

    candidates: List[MetricCandidate] = []
    visited = {id(tree)}
    stack = [((k,), v, 1) for k, v in reversed(list(_children(tree)))]
    nodes = 0

    while stack:
        nodes += 1
        if nodes > max_nodes:
            logger.debug("Metric scan stopped after %d nodes", max_nodes)
            break

        path, value, depth = stack.pop()
        key = path[-1].lower()

        if any(s in key for s in skip_keys):
            continue

        if any(w in key for w in keywords):
            number = parse_number(value)
            if number is not None:
                candidates.append(MetricCandidate(".".join(path), number, value))
            elif isinstance(value, str):
                candidates.append(MetricCandidate(".".join(path), value, value))

        if isinstance(value, (dict, list)) and depth < max_depth:
            if id(value) in visited:
                continue
            visited.add(id(value))
            for child_key, child in reversed(list(_children(value))):
                stack.append((path + (child_key,), child, depth + 1))

    return candidates


def _best(values: List[float]) -> Optional[float]:
    return max(values) if values else None


def pick_tvl(
    candidates: List[MetricCandidate],
    min_tvl: float = MIN_PLAUSIBLE_TVL_USD,
) -> Optional[float]:
    """Pick the most likely TVL figure.

    Returns:
        The largest TVL-like value of at least min_tvl, or None.
    """
    return _best([
        c.value for c in candidates
        if c.is_numeric
        and any(w in c.key for w in TVL_KEYWORDS)
        and c.value >= min_tvl
    ])


def pick_apy(
    candidates: List[MetricCandidate],
    apy_range: Tuple[float, float] = (MIN_PLAUSIBLE_APY_PCT, MAX_PLAUSIBLE_APY_PCT),
) -> Optional[float]:
    """Pick the most likely APY figure, already expressed as a percentage.

    Returns:
        The largest APY-like value inside apy_range (inclusive), or None.
    """
    low, high = apy_range
    return _best([
        c.value for c in candidates
        if c.is_numeric
        and any(w in c.key for w in APY_KEYWORDS)
        and low <= c.value <= high
    ])
