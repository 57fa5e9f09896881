#!/usr/bin/env python3
"""
Priority Policy - tier assignment for missing skills.

Tiering is policy, not code: the (importance-weight bucket x market-demand
band) -> tier table comes from configuration and can be swapped wholesale.
"""

from enum import Enum
from typing import Dict, List, Tuple

from core.config_loader import PriorityPolicyConfig
from core.exceptions import InvalidPolicyException


class PriorityTier(str, Enum):
    CRITICAL = 'critical'
    HIGH = 'high'
    MEDIUM = 'medium'
    LOW = 'low'

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    PriorityTier.CRITICAL: 3,
    PriorityTier.HIGH: 2,
    PriorityTier.MEDIUM: 1,
    PriorityTier.LOW: 0,
}


def _sorted_thresholds(thresholds: Dict[str, float]) -> List[Tuple[str, float]]:
    return sorted(thresholds.items(), key=lambda kv: kv[1], reverse=True)


class PriorityPolicy:
    """Pure lookup: (importance weight, demand multiplier, required?) -> tier."""

    def __init__(self, config: PriorityPolicyConfig):
        self._buckets = _sorted_thresholds(config.weight_buckets)
        self._bands = _sorted_thresholds(config.demand_bands)
        if not self._buckets or not self._bands:
            raise InvalidPolicyException("Priority policy needs at least one weight bucket and demand band")

        try:
            self._preferred_cap = PriorityTier(config.preferred_cap)
            self._table = {
                bucket: {band: PriorityTier(config.table[bucket][band]) for band, _ in self._bands}
                for bucket, _ in self._buckets
            }
        except (KeyError, ValueError) as e:
            raise InvalidPolicyException(f"Incomplete or invalid priority table: {e}") from e

        if self._preferred_cap == PriorityTier.CRITICAL:
            raise InvalidPolicyException("Preferred-only gaps may not be capped at 'critical'")

    @staticmethod
    def _pick(thresholds: List[Tuple[str, float]], value: float) -> str:
        for name, minimum in thresholds:
            if value >= minimum:
                return name
        return thresholds[-1][0]

    def tier_for(self, importance_weight: float, demand_multiplier: float, is_required: bool) -> PriorityTier:
        bucket = self._pick(self._buckets, importance_weight)
        band = self._pick(self._bands, demand_multiplier)
        tier = self._table[bucket][band]
        if not is_required and tier.severity > self._preferred_cap.severity:
            return self._preferred_cap
        return tier
