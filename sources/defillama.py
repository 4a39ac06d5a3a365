"""Source for liquid staking yields listed on DefiLlama."""

from typing import Any, Dict, List, Optional

from .base import BaseSource
from config import DEFILLAMA_POOLS_URL
from errors import ExtractionError
from models.opportunity import Opportunity
from utils.numbers import finite_number


def llama_pools(data: Any) -> List[Dict[str, Any]]:
    """Return the pool list from a DefiLlama /pools response.

    Raises:
        ExtractionError: If the response carries no pool list.
    """
    pools = data.get("data") if isinstance(data, dict) else None
    if not isinstance(pools, list):
        raise ExtractionError("DefiLlama response has no 'data' list")
    return [p for p in pools if isinstance(p, dict)]


class DefiLlamaSource(BaseSource):
    """Liquid staking tokens (Lido, Rocket Pool) from the DefiLlama yields API."""

    name = "DefiLlama"
    catalog_key = "defillama"

    def _fetch_data(self) -> List[Opportunity]:
        """Fetch all pools and pick one per catalog entry."""
        pools = llama_pools(self._get_json(DEFILLAMA_POOLS_URL))

        opportunities = []
        for pick in self.catalog.get("picks", []):
            pool = self.pick_best_pool(
                pools,
                project=pick["project"],
                chain=pick.get("chain", "Ethereum"),
                symbol_includes=pick.get("symbol_includes", []),
            )
            if not pool:
                continue

            opportunities.append(Opportunity(
                protocol=pick["protocol"],
                product=pick["product"],
                tvl_usd=finite_number(pool["tvlUsd"]),
                apy_pct=finite_number(pool["apy"]),
                url=pick.get("url", ""),
            ))

        return opportunities

    @staticmethod
    def pick_best_pool(
        pools: List[Dict[str, Any]],
        project: str,
        chain: str = "Ethereum",
        symbol_includes: Optional[List[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Pick the largest pool matching project, chain and symbol fragments.

        Args:
            pools: DefiLlama pool records.
            project: DefiLlama project slug (case-insensitive).
            chain: Chain name (case-insensitive).
            symbol_includes: Fragments that must all appear in the symbol.

        Returns:
            The matching pool with the highest TVL, or None.
        """
        project = project.lower()
        chain = chain.lower()
        fragments = [s.lower() for s in symbol_includes or []]

        candidates = [
            p for p in pools
            if (p.get("project") or "").lower() == project
            and (p.get("chain") or "").lower() == chain
            and all(s in (p.get("symbol") or "").lower() for s in fragments)
            and (finite_number(p.get("tvlUsd")) or 0) > 0
            and finite_number(p.get("apy")) is not None
        ]

        if not candidates:
            return None
        return max(candidates, key=lambda p: finite_number(p["tvlUsd"]))
