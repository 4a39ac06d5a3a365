"""Utility modules."""

from .numbers import as_pct, finite_number, parse_number
from .next_data import extract_next_data
from .scanner import MetricCandidate, pick_apy, pick_tvl, scan_metrics

__all__ = [
    "as_pct",
    "finite_number",
    "parse_number",
    "extract_next_data",
    "MetricCandidate",
    "pick_apy",
    "pick_tvl",
    "scan_metrics",
]
