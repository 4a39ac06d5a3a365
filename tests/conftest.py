"""Pytest fixtures for eth-yields tests."""

import json
from unittest.mock import MagicMock

import pytest

from models.opportunity import Opportunity


def build_page(payload: dict) -> str:
    """Build a strategy page embedding payload as __NEXT_DATA__."""
    return (
        "<html><head><title>Strategy</title></head><body><div id=\"__next\"></div>"
        '<script id="__NEXT_DATA__" type="application/json">'
        f"{json.dumps(payload)}"
        "</script><script src=\"/_next/static/main.js\"></script></body></html>"
    )


def make_response(json_data=None, text: str = "") -> MagicMock:
    """Mock requests.Response with the given JSON body or text."""
    response = MagicMock()
    response.json.return_value = json_data
    response.text = text
    return response


@pytest.fixture
def stakedao_next_data() -> dict:
    """StakeDAO strategy page payload with incidental numbers and translations."""
    return {
        "props": {
            "pageProps": {
                "_nextI18Next": {"initialI18nStore": {"en": {"tvlLabel": "12345678"}}},
                "dehydratedState": {
                    "queries": [
                        {
                            "queryKey": ["strategy", "1-0x7d3d"],
                            "state": {
                                "data": {
                                    "id": 987654321,
                                    "name": "ETH+/WETH",
                                    "tvl": 4_250_000.5,
                                    "netApy": 7.25,
                                    "historicalApr": 250.0,
                                    "lpValue": 1.02,
                                    "feeRate": "0.04",
                                    "exchangeRate": 1.0021,
                                    "tvlDisplay": "$4.2m",
                                },
                            },
                        },
                        {"queryKey": ["prices"], "state": {"data": None}},
                    ],
                },
            },
        },
        "page": "/strategy",
    }


@pytest.fixture
def llama_pools() -> dict:
    """DefiLlama /pools response with competing and irrelevant pools."""
    return {
        "status": "success",
        "data": [
            {"pool": "a", "chain": "Ethereum", "project": "lido", "symbol": "STETH",
             "tvlUsd": 30_000_000_000, "apy": 2.8},
            {"pool": "b", "chain": "Ethereum", "project": "lido", "symbol": "WSTETH",
             "tvlUsd": 1_000_000, "apy": 2.9},
            {"pool": "c", "chain": "Arbitrum", "project": "lido", "symbol": "STETH",
             "tvlUsd": 90_000_000_000, "apy": 3.0},
            {"pool": "d", "chain": "Ethereum", "project": "rocket-pool", "symbol": "RETH",
             "tvlUsd": 2_500_000_000, "apy": 2.6},
            {"pool": "e", "chain": "Ethereum", "project": "rocket-pool", "symbol": "RETH",
             "tvlUsd": 0, "apy": 9.0},
            {"pool": "f", "chain": "Ethereum", "project": "origin-arm", "symbol": "WETH-STETH",
             "tvlUsd": 80_000_000, "apy": 0.035},
            {"pool": "g", "chain": "Ethereum", "project": "aave-v3", "symbol": "WETH",
             "tvlUsd": 5_000_000_000, "apy": 1.9},
        ],
    }


@pytest.fixture
def stub_opportunities() -> dict:
    """Fixed opportunities per stub source."""
    return {
        "alpha": [
            Opportunity("Lido", "stETH", 30_000_000_000.0, 2.8, "https://lido.fi"),
            Opportunity("Rocket Pool", "rETH", 2_500_000_000.0, 2.6, "https://rocketpool.net"),
        ],
        "beta": [
            Opportunity("Pendle", "Pendle PT tETH (exp 2026-03-26)", 12_000_000.0, 4.1, "https://app.pendle.finance"),
        ],
        "gamma": [
            Opportunity("StakeDAO", "ETH+/WETH", 4_000_000.0, 7.2, "https://curve.fi"),
        ],
    }
