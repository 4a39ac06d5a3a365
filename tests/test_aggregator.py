"""Unit tests for the aggregator."""

import time
from datetime import timezone
from typing import List, Optional

from aggregator import Aggregator, fallback_opportunities
from config import load_catalog
from models.opportunity import Opportunity


class StubSource:
    """Source double returning fixed opportunities or raising."""

    def __init__(
        self,
        name: str,
        opportunities: Optional[List[Opportunity]] = None,
        exc: Optional[Exception] = None,
        error: Optional[str] = None,
        delay: float = 0.0,
    ):
        self.name = name
        self._opportunities = opportunities or []
        self._exc = exc
        self._error = error
        self._delay = delay
        self.last_error = None

    def __call__(self) -> "StubSource":
        return self

    def fetch(self) -> List[Opportunity]:
        if self._delay:
            time.sleep(self._delay)
        if self._exc:
            raise self._exc
        self.last_error = self._error
        return list(self._opportunities)


def _keys(opportunities: List[Opportunity]):
    return [o.key for o in opportunities]


class TestAggregatorAssemble:
    """Tests for Aggregator.assemble."""

    def test_concatenates_in_declaration_order(self, stub_opportunities: dict) -> None:
        # alpha finishes last but is still reported first
        aggregator = Aggregator([
            StubSource("alpha", stub_opportunities["alpha"], delay=0.05),
            StubSource("beta", stub_opportunities["beta"]),
            StubSource("gamma", stub_opportunities["gamma"]),
        ])
        result = aggregator.assemble()

        expected = (
            stub_opportunities["alpha"] + stub_opportunities["beta"] + stub_opportunities["gamma"]
        )
        assert _keys(result.opportunities) == _keys(expected)
        assert not result.fallback
        assert [s.name for s in result.sources] == ["alpha", "beta", "gamma"]
        assert all(s.ok for s in result.sources)
        assert result.updated_at.tzinfo == timezone.utc

    def test_same_content_across_calls(self, stub_opportunities: dict) -> None:
        aggregator = Aggregator([
            StubSource("alpha", stub_opportunities["alpha"]),
            StubSource("beta", stub_opportunities["beta"]),
        ])
        first = aggregator.assemble()
        second = aggregator.assemble()
        assert first.opportunities == second.opportunities

    def test_one_source_raises(self, stub_opportunities: dict) -> None:
        aggregator = Aggregator([
            StubSource("alpha", stub_opportunities["alpha"]),
            StubSource("broken", exc=RuntimeError("boom")),
            StubSource("gamma", stub_opportunities["gamma"]),
        ])
        result = aggregator.assemble()

        assert _keys(result.opportunities) == _keys(
            stub_opportunities["alpha"] + stub_opportunities["gamma"]
        )
        assert not result.fallback
        broken = result.sources[1]
        assert not broken.ok
        assert broken.count == 0
        assert "boom" in broken.error

    def test_source_reporting_error(self, stub_opportunities: dict) -> None:
        aggregator = Aggregator([
            StubSource("alpha", stub_opportunities["alpha"]),
            StubSource("quiet", error="NetworkError: down"),
        ])
        result = aggregator.assemble()
        assert len(result.opportunities) == 2
        assert result.sources[1].error == "NetworkError: down"

    def test_all_fail_serves_fallback(self) -> None:
        aggregator = Aggregator([
            StubSource("alpha", exc=RuntimeError("boom")),
            StubSource("beta"),
        ])
        result = aggregator.assemble()

        assert result.fallback
        assert result.opportunities == fallback_opportunities()

    def test_no_sources(self) -> None:
        result = Aggregator([]).assemble()
        assert result.fallback
        assert result.opportunities == fallback_opportunities()

    def test_counters(self, stub_opportunities: dict) -> None:
        aggregator = Aggregator([
            StubSource("alpha", stub_opportunities["alpha"]),
            StubSource("broken", exc=RuntimeError("boom")),
        ])
        aggregator.assemble()
        aggregator.assemble()
        assert aggregator.counters() == {
            "alpha": {"success": 2, "failure": 0},
            "broken": {"success": 0, "failure": 2},
        }

    def test_to_dict_shape(self, stub_opportunities: dict) -> None:
        result = Aggregator([StubSource("beta", stub_opportunities["beta"])]).assemble()
        data = result.to_dict()
        assert set(data) == {"updatedAt", "opportunities", "sources", "fallback"}
        assert data["opportunities"][0] == {
            "protocol": "Pendle",
            "product": "Pendle PT tETH (exp 2026-03-26)",
            "tvlUsd": 12_000_000.0,
            "apyPct": 4.1,
            "url": "https://app.pendle.finance",
        }


class TestFallbackOpportunities:
    """Tests for fallback_opportunities."""

    def test_covers_fixed_catalog(self) -> None:
        fallback = fallback_opportunities(load_catalog())
        assert _keys(fallback) == [
            ("Lido", "stETH"),
            ("Rocket Pool", "rETH"),
            ("StakeDAO", "ETH+ / wETH"),
            ("StakeDAO", "msETH / wETH"),
            ("StakeDAO", "dgnETH / ETH+"),
            ("Origin Protocol", "ARM WETH-stETH"),
        ]
        assert all(o.tvl_usd == 0 and o.apy_pct == 0 for o in fallback)
        assert all(o.url for o in fallback)
