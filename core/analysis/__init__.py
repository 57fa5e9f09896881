"""Skill gap analysis."""
from core.analysis.gap_analyzer import GapAnalyzer, MatchedSkill, SkillGap
from core.analysis.priority import PriorityPolicy, PriorityTier
from core.analysis.market_demand import MarketDemandProvider, StaticMarketDemand, CachedMarketDemand

__all__ = [
    'GapAnalyzer',
    'MatchedSkill',
    'SkillGap',
    'PriorityPolicy',
    'PriorityTier',
    'MarketDemandProvider',
    'StaticMarketDemand',
    'CachedMarketDemand',
]
