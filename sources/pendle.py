"""Source for Pendle PT fixed yields on Ethereum mainnet."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .base import BaseSource
from config import PENDLE_API_URL, PENDLE_MAX_PAGES, PENDLE_PAGE_SIZE
from errors import ExtractionError, YieldSourceError
from models.opportunity import Opportunity
from utils.numbers import as_pct, finite_number

logger = logging.getLogger(__name__)


class PendleSource(BaseSource):
    """PT markets for a small allowlist of ETH underlyings."""

    name = "Pendle"
    catalog_key = "pendle"

    def _fetch_data(self) -> List[Opportunity]:
        """Fetch all mainnet markets and keep the allowlisted underlyings."""
        markets = self._fetch_all_markets()

        opportunities = [
            self._parse_market(m) for m in markets if self.is_target_market(m)
        ]
        opportunities.sort(key=lambda o: o.tvl_usd, reverse=True)
        return opportunities

    def _fetch_all_markets(self) -> List[Dict[str, Any]]:
        """Page through the market listing.

        Stops on a short page, once the declared total is reached, or after
        PENDLE_MAX_PAGES. A failure after the first page keeps what was
        already fetched.
        """
        chain_id = self.catalog.get("chain_id", 1)
        url = f"{PENDLE_API_URL}/v1/{chain_id}/markets"

        markets: List[Dict[str, Any]] = []
        skip = 0

        for page in range(PENDLE_MAX_PAGES):
            try:
                data = self._get_json(url, params={"limit": PENDLE_PAGE_SIZE, "skip": skip})
                items, total = self.parse_page(data)
            except YieldSourceError as e:
                if not markets:
                    raise
                logger.warning(
                    "Pendle page %d failed, keeping %d markets: %s", page, len(markets), e
                )
                break

            markets.extend(items)

            if len(items) < PENDLE_PAGE_SIZE:
                break
            if total is not None and len(markets) >= total:
                break
            skip += len(items)

        logger.debug("Pendle returned %d markets", len(markets))
        return markets

    @staticmethod
    def parse_page(data: Any) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        """Split a listing response into its markets and declared total.

        Raises:
            ExtractionError: If no market list is present.
        """
        if isinstance(data, list):
            return [m for m in data if isinstance(m, dict)], None

        if isinstance(data, dict):
            for key in ("results", "markets", "data"):
                if isinstance(data.get(key), list):
                    total = data.get("total")
                    if not isinstance(total, int) or isinstance(total, bool):
                        total = None
                    return [m for m in data[key] if isinstance(m, dict)], total

        raise ExtractionError("Unexpected Pendle markets response shape")

    @staticmethod
    def underlying_label(market: Dict[str, Any]) -> Optional[str]:
        sy = market.get("sy") if isinstance(market.get("sy"), dict) else {}
        return market.get("simpleSymbol") or sy.get("proSymbol") or sy.get("simpleSymbol")

    def is_target_market(self, market: Dict[str, Any]) -> bool:
        if market.get("chainId") != self.catalog.get("chain_id", 1):
            return False
        return self.underlying_label(market) in set(self.catalog.get("target_underlyings", []))

    @staticmethod
    def expiry_date(value: Any) -> Optional[str]:
        """Return the YYYY-MM-DD part of an ISO expiry, or None."""
        if not isinstance(value, str) or not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
        except ValueError:
            return None

    def _parse_market(self, market: Dict[str, Any]) -> Opportunity:
        label = self.underlying_label(market) or "Unknown"
        expiry = self.expiry_date(market.get("expiry"))
        product = f"Pendle PT {label}" + (f" (exp {expiry})" if expiry else "")

        liquidity = market.get("liquidity") if isinstance(market.get("liquidity"), dict) else {}
        tvl = finite_number(liquidity.get("usd")) or 0.0

        market_url = self.catalog.get(
            "market_url",
            "https://app.pendle.finance/trade/markets/{address}?chain=ethereum&view=pt",
        )

        return Opportunity(
            protocol="Pendle",
            product=product,
            tvl_usd=tvl,
            apy_pct=as_pct(market.get("impliedApy")),
            url=market_url.format(address=market.get("address", "")),
        )
