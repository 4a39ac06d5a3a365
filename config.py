"""Configuration for yield sources, thresholds and upstream endpoints."""

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return float(value)


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return int(value)


# Request timeout in seconds (applies to every outbound call)
REQUEST_TIMEOUT = _env_float("ETH_YIELDS_REQUEST_TIMEOUT", 10.0)

# Maximum number of sources fetched at once
MAX_WORKERS = _env_int("ETH_YIELDS_MAX_WORKERS", 8)

# Plausibility thresholds for heuristic metric selection
MIN_PLAUSIBLE_TVL_USD = _env_float("ETH_YIELDS_MIN_TVL_USD", 100_000)
MIN_PLAUSIBLE_APY_PCT = _env_float("ETH_YIELDS_MIN_APY_PCT", 0.0)
MAX_PLAUSIBLE_APY_PCT = _env_float("ETH_YIELDS_MAX_APY_PCT", 200.0)

# Bounds for walking untyped JSON payloads
SCAN_MAX_DEPTH = _env_int("ETH_YIELDS_SCAN_MAX_DEPTH", 64)
SCAN_MAX_NODES = _env_int("ETH_YIELDS_SCAN_MAX_NODES", 200_000)

# Pendle pagination
PENDLE_PAGE_SIZE = _env_int("ETH_YIELDS_PENDLE_PAGE_SIZE", 100)
PENDLE_MAX_PAGES = _env_int("ETH_YIELDS_PENDLE_MAX_PAGES", 50)

# Used when the spot price API is unreachable
FALLBACK_ETH_PRICE_USD = _env_float("ETH_YIELDS_FALLBACK_ETH_PRICE", 3000.0)

# Upstream endpoints
DEFILLAMA_POOLS_URL = os.environ.get(
    "ETH_YIELDS_DEFILLAMA_URL", "https://yields.llama.fi/pools"
)
PENDLE_API_URL = os.environ.get(
    "ETH_YIELDS_PENDLE_URL", "https://api-v2.pendle.finance/core"
)
STAKEDAO_API_URL = os.environ.get(
    "ETH_YIELDS_STAKEDAO_URL",
    "https://raw.githubusercontent.com/stake-dao/api/refs/heads/main/api/strategies/v2/curve/1.json",
)
STAKEDAO_PAGE_URL = os.environ.get(
    "ETH_YIELDS_STAKEDAO_PAGE_URL", "https://www.stakedao.org/strategy"
)
ETH_RPC_URL = os.environ.get("ETH_YIELDS_RPC_URL", "https://ethereum-rpc.publicnode.com")
COINGECKO_PRICE_URL = os.environ.get(
    "ETH_YIELDS_COINGECKO_URL", "https://api.coingecko.com/api/v3/simple/price"
)

# Catalog of tracked products, allowlists and deep links
CATALOG_PATH = Path(
    os.environ.get(
        "ETH_YIELDS_CATALOG",
        Path(__file__).resolve().parent / "sources" / "catalog.json",
    )
)

# HTTP cache policy for the aggregate endpoint
CACHE_CONTROL = "public, s-maxage=60, stale-while-revalidate=300"

LOG_LEVEL = os.environ.get("ETH_YIELDS_LOG_LEVEL", "INFO")


@lru_cache(maxsize=None)
def load_catalog(path: Path = CATALOG_PATH) -> Dict[str, Any]:
    """Load the source catalog once per process.

    Args:
        path: Location of the catalog JSON file.

    Returns:
        Mapping of source key to its catalog section.
    """
    with open(path, "r") as f:
        return json.load(f)
