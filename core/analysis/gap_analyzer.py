#!/usr/bin/env python3
"""
Gap Analyzer - matched and missing skills for a candidate/job pair.

Works on the same vectors as the ScoringEngine, so matched skills are always
a subset of (candidate skills & job skills) under synonym-normalised ids and
never overlap the missing list.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple
import logging

from core.normalizer.models import CandidateVector, JobVector
from core.analysis.market_demand import MarketDemandProvider
from core.analysis.priority import PriorityPolicy, PriorityTier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchedSkill:
    skill_id: str
    weight: float  # job-side importance
    candidate_weight: float
    is_required: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'skill_id': self.skill_id,
            'weight': self.weight,
            'candidate_weight': self.candidate_weight,
            'is_required': self.is_required,
        }


@dataclass(frozen=True)
class SkillGap:
    skill_id: str
    importance_weight: float
    priority: PriorityTier
    is_required: bool
    demand_multiplier: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'skill_id': self.skill_id,
            'importance_weight': self.importance_weight,
            'priority': self.priority.value,
            'is_required': self.is_required,
            'demand_multiplier': self.demand_multiplier,
        }


class GapAnalyzer:
    """Derives (matched_skills, missing_skills) with priority tiers."""

    def __init__(self, policy: PriorityPolicy, demand: MarketDemandProvider):
        self.policy = policy
        self.demand = demand

    def compute_gaps(self, cv: CandidateVector, jv: JobVector) -> Tuple[List[MatchedSkill], List[SkillGap]]:
        candidate = cv.skill_map()
        job_skills = [(s, True) for s in jv.required_skills] + [(s, False) for s in jv.preferred_skills]

        matched: List[MatchedSkill] = []
        missing: List[SkillGap] = []
        for skill, is_required in job_skills:
            if skill.skill_id in candidate:
                matched.append(MatchedSkill(
                    skill_id=skill.skill_id,
                    weight=skill.weight,
                    candidate_weight=candidate[skill.skill_id],
                    is_required=is_required,
                ))
                continue

            multiplier = self.demand.multiplier(skill.skill_id)
            missing.append(SkillGap(
                skill_id=skill.skill_id,
                importance_weight=skill.weight,
                priority=self.policy.tier_for(skill.weight, multiplier, is_required),
                is_required=is_required,
                demand_multiplier=multiplier,
            ))

        matched.sort(key=lambda m: (-m.weight, m.skill_id))
        missing.sort(key=lambda g: (-g.importance_weight, g.skill_id))

        logger.debug(
            f"Gaps for candidate {cv.candidate_id} / job {jv.job_id}: "
            f"{len(matched)} matched, {len(missing)} missing"
        )
        return matched, missing
