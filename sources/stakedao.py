"""Source for StakeDAO Curve strategy yields (Ethereum mainnet)."""

import logging
from typing import Any, Dict, List

from .base import BaseSource
from config import STAKEDAO_API_URL
from errors import ExtractionError
from models.opportunity import Opportunity
from utils.numbers import finite_number

logger = logging.getLogger(__name__)


class StakeDaoSource(BaseSource):
    """StakeDAO Curve strategies from the static API published on GitHub."""

    name = "StakeDAO"
    catalog_key = "stakedao"

    def _fetch_data(self) -> List[Opportunity]:
        """Fetch the strategy list and keep the allowlisted pools."""
        data = self._get_json(STAKEDAO_API_URL)

        # v2 API returns a bare array
        if isinstance(data, dict):
            data = data.get("deployed", data.get("strategies"))
        if not isinstance(data, list):
            raise ExtractionError("StakeDAO response is not a strategy list")

        logger.debug("StakeDAO returned %d strategies", len(data))

        targets = set(self.catalog.get("target_pools", []))
        best: Dict[str, Dict[str, Any]] = {}

        for strategy in data:
            if not isinstance(strategy, dict):
                continue
            name = (strategy.get("name") or "").strip()
            if name not in targets or self.strategy_tvl(strategy) <= 0:
                continue

            # Same pool can be listed more than once; keep the larger one
            existing = best.get(name)
            if existing is None or self.strategy_tvl(strategy) > self.strategy_tvl(existing):
                best[name] = strategy

        opportunities = [
            Opportunity(
                protocol="StakeDAO",
                product=name,
                tvl_usd=self.strategy_tvl(strategy),
                apy_pct=self.strategy_apr(strategy),
                url=self._pool_url(strategy),
            )
            for name, strategy in best.items()
        ]
        opportunities.sort(key=lambda o: o.tvl_usd, reverse=True)
        return opportunities

    @staticmethod
    def strategy_tvl(strategy: Dict[str, Any]) -> float:
        tvl = strategy.get("tvl")
        return finite_number(tvl) or 0.0

    @staticmethod
    def strategy_apr(strategy: Dict[str, Any]) -> float:
        """Current total APR, falling back to minApr."""
        apr = None
        apr_data = strategy.get("apr")
        if isinstance(apr_data, dict) and isinstance(apr_data.get("current"), dict):
            apr = apr_data["current"].get("total")
        if apr is None:
            apr = strategy.get("minApr")
        return finite_number(apr) or 0.0

    def _pool_url(self, strategy: Dict[str, Any]) -> str:
        address = strategy.get("address")
        if not isinstance(address, str):
            address = strategy.get("gauge")
        if isinstance(address, str) and address:
            pool_url = self.catalog.get(
                "pool_url", "https://curve.fi/#/ethereum/pools/{address}/deposit"
            )
            return pool_url.format(address=address)
        return self.catalog.get("default_url", "https://curve.fi")
