"""Unit tests for the Pendle source."""

from unittest.mock import patch

import pytest

from config import load_catalog
from errors import ExtractionError, NetworkError
from sources import pendle as pendle_module
from sources.pendle import PendleSource


def _market(label: str, tvl: float, implied_apy: float, chain_id: int = 1, **extra) -> dict:
    market = {
        "chainId": chain_id,
        "address": f"0x{label.lower()}",
        "expiry": "2026-03-26T00:00:00.000Z",
        "simpleSymbol": label,
        "liquidity": {"usd": tvl},
        "impliedApy": implied_apy,
    }
    market.update(extra)
    return market


def _filler(n: int) -> list:
    return [_market(f"X{i}", 1.0, 0.01) for i in range(n)]


@pytest.fixture
def source() -> PendleSource:
    return PendleSource(catalog=load_catalog()["pendle"])


class TestPendleParsing:
    """Tests for response and market parsing helpers."""

    def test_parse_page_shapes(self) -> None:
        assert PendleSource.parse_page([{"a": 1}]) == ([{"a": 1}], None)
        assert PendleSource.parse_page({"results": [{"a": 1}], "total": 7}) == ([{"a": 1}], 7)
        assert PendleSource.parse_page({"markets": []}) == ([], None)

    def test_parse_page_unexpected(self) -> None:
        with pytest.raises(ExtractionError):
            PendleSource.parse_page({"message": "rate limited"})

    def test_underlying_label_fallbacks(self) -> None:
        assert PendleSource.underlying_label({"sy": {"proSymbol": "tETH"}}) == "tETH"
        assert PendleSource.underlying_label({"sy": {"simpleSymbol": "dETH"}}) == "dETH"
        assert PendleSource.underlying_label({}) is None

    def test_expiry_date(self) -> None:
        assert PendleSource.expiry_date("2026-03-26T00:00:00.000Z") == "2026-03-26"
        assert PendleSource.expiry_date("not a date") is None
        assert PendleSource.expiry_date(None) is None

    def test_target_filter(self, source: PendleSource) -> None:
        assert source.is_target_market(_market("tETH", 1, 0.1))
        assert not source.is_target_market(_market("tETH", 1, 0.1, chain_id=42161))
        assert not source.is_target_market(_market("sUSDe", 1, 0.1))


class TestPendleSource:
    """Tests for PendleSource.fetch."""

    def test_single_page(self, source: PendleSource) -> None:
        markets = [
            _market("tETH", 5_000_000, 0.042),
            _market("pufETH", 20_000_000, 0.031),
            _market("sUSDe", 90_000_000, 0.12),
            _market("strETH", 1_000_000, 0.055, chain_id=8453),
        ]
        with patch.object(source, "_get_json", return_value={"total": 4, "results": markets}):
            opportunities = source.fetch()

        assert [o.product for o in opportunities] == [
            "Pendle PT pufETH (exp 2026-03-26)",
            "Pendle PT tETH (exp 2026-03-26)",
        ]
        assert opportunities[0].protocol == "Pendle"
        assert opportunities[0].apy_pct == pytest.approx(3.1)
        assert opportunities[0].url == (
            "https://app.pendle.finance/trade/markets/0xpufeth?chain=ethereum&view=pt"
        )

    def test_paginates_until_short_page(self, source: PendleSource) -> None:
        pages = [
            {"results": _filler(3)},
            {"results": _filler(2) + [_market("ysETH", 3_000_000, 0.08)]},
            {"results": [_market("ghETH", 4_000_000, 0.09)]},
        ]
        with patch.object(pendle_module, "PENDLE_PAGE_SIZE", 3), \
                patch.object(source, "_get_json", side_effect=pages) as get_json:
            opportunities = source.fetch()

        assert get_json.call_count == 3
        skips = [c.kwargs["params"]["skip"] for c in get_json.call_args_list]
        assert skips == [0, 3, 6]
        assert [o.product.split(" (")[0] for o in opportunities] == [
            "Pendle PT ghETH",
            "Pendle PT ysETH",
        ]

    def test_stops_at_declared_total(self, source: PendleSource) -> None:
        pages = [{"total": 3, "results": _filler(2) + [_market("dETH", 1_000_000, 0.05)]}]
        with patch.object(pendle_module, "PENDLE_PAGE_SIZE", 3), \
                patch.object(source, "_get_json", side_effect=pages) as get_json:
            opportunities = source.fetch()

        assert get_json.call_count == 1
        assert len(opportunities) == 1

    def test_mid_pagination_failure_keeps_pages(self, source: PendleSource) -> None:
        pages = [
            {"results": _filler(2) + [_market("tETH", 2_000_000, 0.04)]},
            NetworkError("timeout"),
        ]
        with patch.object(pendle_module, "PENDLE_PAGE_SIZE", 3), \
                patch.object(source, "_get_json", side_effect=pages):
            opportunities = source.fetch()

        assert [o.product for o in opportunities] == ["Pendle PT tETH (exp 2026-03-26)"]
        assert source.last_error is None

    def test_first_page_failure_fails_source(self, source: PendleSource) -> None:
        with patch.object(source, "_get_json", side_effect=NetworkError("down")):
            assert source.fetch() == []
        assert "NetworkError" in source.last_error

    def test_page_cap(self, source: PendleSource) -> None:
        with patch.object(pendle_module, "PENDLE_PAGE_SIZE", 2), \
                patch.object(pendle_module, "PENDLE_MAX_PAGES", 4), \
                patch.object(source, "_get_json", return_value={"results": _filler(2)}) as get_json:
            assert source.fetch() == []
        assert get_json.call_count == 4

    def test_missing_liquidity(self, source: PendleSource) -> None:
        market = _market("tETH", 0, 7.5)
        del market["liquidity"]
        with patch.object(source, "_get_json", return_value=[market]):
            opportunities = source.fetch()
        assert opportunities[0].tvl_usd == 0
        assert opportunities[0].apy_pct == 7.5

    def test_oversized_liquidity(self, source: PendleSource) -> None:
        with patch.object(source, "_get_json", return_value=[_market("tETH", 10 ** 400, 7.5)]):
            opportunities = source.fetch()
        assert source.last_error is None
        assert opportunities[0].tvl_usd == 0
