"""Yield sources for ETH-denominated opportunities."""

from .base import BaseSource
from .defillama import DefiLlamaSource
from .stakedao_pages import StakeDaoPagesSource
from .stakedao import StakeDaoSource
from .pendle import PendleSource
from .origin import OriginArmSource

# Declaration order is the order opportunities are reported in
SOURCES = [
    DefiLlamaSource,
    StakeDaoPagesSource,
    StakeDaoSource,
    PendleSource,
    OriginArmSource,
]

__all__ = [
    "BaseSource",
    "DefiLlamaSource",
    "StakeDaoPagesSource",
    "StakeDaoSource",
    "PendleSource",
    "OriginArmSource",
    "SOURCES",
]
