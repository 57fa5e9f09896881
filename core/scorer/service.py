#!/usr/bin/env python3
"""
Scoring Engine - weighted multi-factor compatibility score.

Takes a CandidateVector and JobVector and calculates:
- one sub-score per dimension (skills, experience, salary, location,
  industry, SA context, availability), each in [0, 100]
- the composite: round(sum(weight * sub-score)), clamped to [0, 100]

Weights are validated on construction; an engine never exists with a weight
set that does not sum to 1.
"""

from typing import Callable, Dict
import logging
import math

from core.config_loader import ScorerConfig
from core.exceptions import InvalidWeightConfiguration
from core.normalizer.models import (
    CandidateVector, JobVector, DIMENSIONS,
    DIM_SKILLS, DIM_EXPERIENCE, DIM_SALARY, DIM_LOCATION,
    DIM_INDUSTRY, DIM_SA_CONTEXT, DIM_AVAILABILITY,
)
from core.scorer.models import CompositeScore, DimensionScore
from core.scorer import dimensions
from core.scorer.dimensions import DimensionResult

logger = logging.getLogger(__name__)

DIMENSION_FUNCTIONS: Dict[str, Callable[[CandidateVector, JobVector, ScorerConfig], DimensionResult]] = {
    DIM_SKILLS: dimensions.score_skills,
    DIM_EXPERIENCE: dimensions.score_experience,
    DIM_SALARY: dimensions.score_salary,
    DIM_LOCATION: dimensions.score_location,
    DIM_INDUSTRY: dimensions.score_industry,
    DIM_SA_CONTEXT: dimensions.score_sa_context,
    DIM_AVAILABILITY: dimensions.score_availability,
}


def validate_weights(weights: Dict[str, float], tolerance: float = 1e-6) -> None:
    """Raise InvalidWeightConfiguration unless weights cover every dimension and sum to 1."""
    missing = [d for d in DIMENSIONS if d not in weights]
    if missing:
        raise InvalidWeightConfiguration(f"Missing weights for dimensions: {missing}")

    negative = {k: v for k, v in weights.items() if v < 0}
    if negative:
        raise InvalidWeightConfiguration(f"Negative weights: {negative}")

    total = sum(weights[d] for d in DIMENSIONS)
    if abs(total - 1.0) > tolerance:
        raise InvalidWeightConfiguration(
            f"Weights must sum to 1.0 (+/- {tolerance}), got {total:.8f}"
        )


def _validate_sa_context_weights(config: ScorerConfig) -> None:
    sa = config.sa_context
    parts = [sa.bbbee_weight, sa.nqf_weight, sa.language_weight]
    if any(p < 0 for p in parts) or sum(parts) <= 0:
        raise InvalidWeightConfiguration(f"Invalid SA-context component weights: {parts}")


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


class ScoringEngine:
    """Computes CompositeScore for (CandidateVector, JobVector) pairs."""

    def __init__(self, config: ScorerConfig):
        self.config = config
        self.weights = config.weights.as_dict()
        validate_weights(self.weights, config.weight_tolerance)
        _validate_sa_context_weights(config)
        logger.info(f"ScoringEngine initialised with weights {self.weights}")

    def compute_score(self, cv: CandidateVector, jv: JobVector) -> CompositeScore:
        scored: Dict[str, DimensionScore] = {}
        total = 0.0

        for name in DIMENSIONS:
            score, details = DIMENSION_FUNCTIONS[name](cv, jv, self.config)
            unknown = score is None
            dim = DimensionScore(
                name=name,
                score=0.0 if unknown else score,
                weight=self.weights[name],
                unknown=unknown,
                details=details,
            )
            scored[name] = dim
            total += dim.weighted

        composite = max(0, min(100, round_half_up(total)))

        result = CompositeScore(composite=composite, dimensions=scored)
        if result.unknown_dimensions:
            logger.debug(
                f"Scored candidate {cv.candidate_id} / job {jv.job_id} with unknown "
                f"dimensions {result.unknown_dimensions}"
            )
        return result
