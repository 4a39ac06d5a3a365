"""Source for the Origin Protocol ARM (WETH-stETH) vault.

TVL is derived on-chain: the vault's totalAssets() in wei, priced with the
ETH/USD spot price. The APY comes from the vault's DefiLlama listing, which
also supplies TVL when the RPC call fails.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import BaseSource
from .defillama import llama_pools
from config import (
    COINGECKO_PRICE_URL,
    DEFILLAMA_POOLS_URL,
    ETH_RPC_URL,
    FALLBACK_ETH_PRICE_USD,
)
from errors import ExtractionError, ParseError, YieldSourceError
from models.opportunity import Opportunity
from utils.numbers import as_pct, parse_number

logger = logging.getLogger(__name__)

# keccak256("totalAssets()")[:4]
TOTAL_ASSETS_SELECTOR = "0x01e1d114"
WEI_PER_ETH = 10 ** 18


def decode_uint256(result: Any) -> int:
    """Decode a hex eth_call result into an integer.

    Raises:
        ExtractionError: If the result is empty or not hex.
    """
    if not isinstance(result, str) or not result.startswith("0x") or len(result) <= 2:
        raise ExtractionError(f"Empty or malformed eth_call result: {result!r}")
    try:
        return int(result[2:66], 16)
    except ValueError as e:
        raise ExtractionError(f"eth_call result is not hex: {result!r}") from e


class OriginArmSource(BaseSource):
    """Origin ARM WETH-stETH vault on Ethereum mainnet."""

    name = "Origin"
    catalog_key = "origin"

    def _fetch_data(self) -> List[Opportunity]:
        pool = self._find_llama_pool()

        try:
            tvl = self._fetch_onchain_tvl()
        except YieldSourceError as e:
            logger.warning("Origin on-chain TVL failed, using DefiLlama: %s", e)
            tvl = (parse_number(pool.get("tvlUsd")) or 0.0) if pool else 0.0

        if tvl <= 0:
            logger.info("Origin ARM has no TVL from any source")
            return []

        return [Opportunity(
            protocol=self.catalog.get("protocol", "Origin Protocol"),
            product=self.catalog.get("product", "ARM WETH-stETH"),
            tvl_usd=tvl,
            apy_pct=self.pool_apy(pool) if pool else 0.0,
            url=self.catalog.get("url", ""),
        )]

    def _find_llama_pool(self) -> Optional[Dict[str, Any]]:
        """Find the ARM pool on DefiLlama; None when missing or unreachable."""
        try:
            pools = llama_pools(self._get_json(DEFILLAMA_POOLS_URL))
        except YieldSourceError as e:
            logger.warning("Origin DefiLlama lookup failed: %s", e)
            return None

        pool = next((p for p in pools if self.is_arm_pool(p)), None)
        if pool is None:
            logger.info("Origin ARM WETH-stETH pool not found in DefiLlama")
        return pool

    @staticmethod
    def is_arm_pool(pool: Dict[str, Any]) -> bool:
        project = (pool.get("project") or "").lower()
        chain = (pool.get("chain") or "").lower()
        symbol = (pool.get("symbol") or "").lower()
        tvl = parse_number(pool.get("tvlUsd"))
        return (
            "origin" in project
            and "arm" in project
            and chain == "ethereum"
            and ("weth" in symbol or "steth" in symbol)
            and tvl is not None
            and tvl > 0
        )

    @staticmethod
    def pool_apy(pool: Dict[str, Any]) -> float:
        """Total APY of a DefiLlama pool as a percentage.

        DefiLlama's apy already includes rewards; apyBase + apyReward is only
        used when apy is missing.
        """
        apy = parse_number(pool.get("apy"))
        if apy is None:
            apy = (parse_number(pool.get("apyBase")) or 0.0) + (
                parse_number(pool.get("apyReward")) or 0.0
            )
        return as_pct(apy)

    def _fetch_onchain_tvl(self) -> float:
        """Vault totalAssets() converted to USD."""
        assets_wei = self._eth_call(self.catalog["contract"], TOTAL_ASSETS_SELECTOR)
        return assets_wei / WEI_PER_ETH * self._fetch_eth_price()

    def _eth_call(self, to: str, data: str) -> int:
        """Run a read-only contract call and decode the integer result.

        Raises:
            NetworkError: If the RPC endpoint is unreachable.
            ParseError: If the RPC answers with an error or a non-JSON body.
            ExtractionError: If the result is empty.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "eth_call",
            "params": [{"to": to, "data": data}, "latest"],
        }
        response = self._make_request(ETH_RPC_URL, method="POST", json_data=payload)
        try:
            body = response.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON-RPC response: {e}") from e

        if not isinstance(body, dict):
            raise ParseError("JSON-RPC response is not an object")
        if body.get("error"):
            raise ParseError(f"JSON-RPC error: {body['error']}")
        return decode_uint256(body.get("result"))

    def _fetch_eth_price(self) -> float:
        """ETH/USD spot price, or FALLBACK_ETH_PRICE_USD when unavailable."""
        try:
            data = self._get_json(
                COINGECKO_PRICE_URL,
                params={"ids": "ethereum", "vs_currencies": "usd"},
            )
            price = parse_number(data.get("ethereum", {}).get("usd"))
        except (YieldSourceError, AttributeError) as e:
            logger.warning("ETH price lookup failed, using fallback: %s", e)
            return FALLBACK_ETH_PRICE_USD

        if price is None or price <= 0:
            logger.warning("ETH price missing from response, using fallback")
            return FALLBACK_ETH_PRICE_USD
        return price
