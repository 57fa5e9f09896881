#!/usr/bin/env python3
"""
Market Demand - per-skill demand multipliers for gap prioritisation.

The multiplier source is external; lookups go through an owned LookupCache
so scoring stays synchronous and fast.
"""

from abc import ABC, abstractmethod
from typing import Dict
import logging

from core.cache import LookupCache

logger = logging.getLogger(__name__)


class MarketDemandProvider(ABC):
    """Source of market-demand multipliers (1.0 = neutral demand)."""

    @abstractmethod
    def multiplier(self, skill_id: str) -> float:
        pass


class StaticMarketDemand(MarketDemandProvider):
    """Multipliers from a fixed table, e.g. the ``matching.gaps.market_demand`` config."""

    def __init__(self, table: Dict[str, float], default: float = 1.0):
        self.table = dict(table)
        self.default = default

    def multiplier(self, skill_id: str) -> float:
        return float(self.table.get(skill_id, self.default))


class CachedMarketDemand(MarketDemandProvider):
    """Wraps another provider with a LookupCache."""

    def __init__(self, source: MarketDemandProvider, cache: LookupCache):
        self.source = source
        self.cache = cache

    def multiplier(self, skill_id: str) -> float:
        return float(self.cache.get_or_load(
            f"demand:{skill_id}",
            lambda: self.source.multiplier(skill_id)
        ))
