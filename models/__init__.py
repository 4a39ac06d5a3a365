"""Data models."""

from .opportunity import AggregateResult, Opportunity, SourceStatus

__all__ = ["AggregateResult", "Opportunity", "SourceStatus"]
