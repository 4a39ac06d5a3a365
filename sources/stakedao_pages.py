"""Source for StakeDAO vault metrics scraped from strategy pages.

StakeDAO serves its strategy pages server-rendered, with the vault data in
the embedded __NEXT_DATA__ payload. The payload has no stable schema, so
TVL and APY are found with the heuristic metric scanner.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

from .base import BaseSource
from config import STAKEDAO_PAGE_URL
from models.opportunity import Opportunity
from utils.next_data import extract_next_data
from utils.scanner import pick_apy, pick_tvl, scan_metrics

logger = logging.getLogger(__name__)


def query_roots(next_data: Any) -> List[Any]:
    """Return the react-query payloads of a page, or the whole page if absent."""
    try:
        queries = next_data["props"]["pageProps"]["dehydratedState"]["queries"]
    except (KeyError, TypeError):
        return [next_data]
    if not isinstance(queries, list):
        return [next_data]

    roots = []
    for query in queries:
        state = query.get("state") if isinstance(query, dict) else None
        data = state.get("data") if isinstance(state, dict) else None
        if data:
            roots.append(data)
    return roots


def extract_vault_metrics(next_data: Any) -> Tuple[Optional[float], Optional[float]]:
    """Find TVL (USD) and APY (percent) in a strategy page payload.

    Returns:
        (tvl_usd, apy_pct); either is None when no plausible value was found.
    """
    candidates = []
    for root in query_roots(next_data):
        candidates.extend(scan_metrics(root))
    return pick_tvl(candidates), pick_apy(candidates)


class StakeDaoPagesSource(BaseSource):
    """Fixed catalog of StakeDAO Curve vaults read from their strategy pages."""

    name = "StakeDAO Pages"
    catalog_key = "stakedao_pages"

    def _fetch_data(self) -> List[Opportunity]:
        """Fetch every vault in parallel; failed vaults become placeholders.

        When every vault fails the placeholders are still returned, but
        last_error is set so the run is reported as failed.
        """
        vaults = self.catalog.get("vaults", [])
        if not vaults:
            return []

        with ThreadPoolExecutor(max_workers=len(vaults)) as executor:
            results = list(executor.map(self._fetch_vault_or_placeholder, vaults))

        failed = sum(1 for _, ok in results if not ok)
        if failed == len(vaults):
            self.last_error = f"all {failed} vaults failed"
            logger.error("%s: %s", self.name, self.last_error)
        return [opportunity for opportunity, _ in results]

    def _fetch_vault_or_placeholder(self, vault: Dict[str, Any]) -> Tuple[Opportunity, bool]:
        """Return (opportunity, fetched); a failed vault gives a zeroed placeholder."""
        try:
            return self._fetch_vault(vault), True
        except Exception as e:
            logger.warning("StakeDAO vault %s failed: %s", vault["product"], e)
            return Opportunity(
                protocol=vault["protocol"],
                product=vault["product"],
                url=vault.get("url", ""),
            ), False

    def _fetch_vault(self, vault: Dict[str, Any]) -> Opportunity:
        """Fetch one strategy page and extract its metrics."""
        response = self._make_request(
            STAKEDAO_PAGE_URL,
            params={"protocol": vault["protocol_param"], "vault": vault["vault"]},
            headers={"Accept": "text/html"},
        )
        next_data = extract_next_data(response.text)
        tvl, apy = extract_vault_metrics(next_data)

        return Opportunity(
            protocol=vault["protocol"],
            product=vault["product"],
            tvl_usd=tvl or 0.0,
            apy_pct=apy or 0.0,
            url=vault.get("url", ""),
        )
