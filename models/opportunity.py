"""Data models for ETH yield opportunities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple


@dataclass
class Opportunity:
    """Represents one normalized yield-bearing instrument."""

    protocol: str
    product: str
    tvl_usd: float = 0.0  # 0 means unknown
    apy_pct: float = 0.0
    url: str = ""

    @property
    def key(self) -> Tuple[str, str]:
        """Return the (protocol, product) identity of this opportunity."""
        return (self.protocol, self.product)

    @property
    def formatted_apy(self) -> str:
        """Return APY as formatted percentage string."""
        if not self.apy_pct:
            return "N/A"
        if self.apy_pct >= 100:
            return f"{self.apy_pct:,.1f}%"
        return f"{self.apy_pct:.2f}%"

    @property
    def formatted_tvl(self) -> str:
        """Return TVL as formatted string with units."""
        if not self.tvl_usd:
            return "N/A"
        if self.tvl_usd >= 1_000_000_000:
            return f"${self.tvl_usd / 1_000_000_000:.2f}B"
        if self.tvl_usd >= 1_000_000:
            return f"${self.tvl_usd / 1_000_000:.2f}M"
        if self.tvl_usd >= 1_000:
            return f"${self.tvl_usd / 1_000:.2f}K"
        return f"${self.tvl_usd:.2f}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "protocol": self.protocol,
            "product": self.product,
            "tvlUsd": self.tvl_usd,
            "apyPct": self.apy_pct,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Opportunity":
        """Create instance from dictionary."""
        return cls(
            protocol=data["protocol"],
            product=data["product"],
            tvl_usd=float(data.get("tvlUsd", 0) or 0),
            apy_pct=float(data.get("apyPct", 0) or 0),
            url=data.get("url", ""),
        )


@dataclass
class SourceStatus:
    """Outcome of a single source during one assembly."""

    name: str
    ok: bool
    count: int = 0
    error: Optional[str] = None
    elapsed_ms: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "ok": self.ok,
            "count": self.count,
            "error": self.error,
            "elapsedMs": round(self.elapsed_ms, 1),
        }


@dataclass
class AggregateResult:
    """The full set of opportunities assembled for one request."""

    updated_at: datetime
    opportunities: List[Opportunity] = field(default_factory=list)
    sources: List[SourceStatus] = field(default_factory=list)
    fallback: bool = False

    @classmethod
    def now(cls, **kwargs) -> "AggregateResult":
        """Create a result stamped with the current UTC time."""
        return cls(updated_at=datetime.now(timezone.utc), **kwargs)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "updatedAt": self.updated_at.isoformat(),
            "opportunities": [o.to_dict() for o in self.opportunities],
            "sources": [s.to_dict() for s in self.sources],
            "fallback": self.fallback,
        }
