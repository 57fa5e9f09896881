#!/usr/bin/env python3
"""
Dimension Scores - one pure function per scoring dimension.

Every function returns ``(score, details)`` with score in [0, 100], or
``(None, details)`` when an input the dimension needs is unknown. The engine
turns ``None`` into 0 with a diagnostic flag.
"""

from typing import Any, Dict, Optional, Tuple

from core.config_loader import ScorerConfig
from core.normalizer.models import CandidateVector, JobVector, DIM_SA_CONTEXT

DimensionResult = Tuple[Optional[float], Dict[str, Any]]


def _clamp_score(x: float) -> float:
    return round(max(0.0, min(100.0, x)), 2)


def score_skills(cv: CandidateVector, jv: JobVector, config: ScorerConfig) -> DimensionResult:
    """
    Weighted skill overlap.

    Formula: sum(matched weight * multiplier) / sum(all weights * multiplier) * 100
    with required skills at required_skill_multiplier (2x) and preferred at 1x.
    """
    required = jv.required_map()
    preferred = jv.preferred_map()
    candidate = cv.skill_map()

    req_mult = config.required_skill_multiplier
    pref_mult = config.preferred_skill_multiplier

    total = sum(w * req_mult for w in required.values()) + sum(w * pref_mult for w in preferred.values())
    matched_required = sorted(s for s in required if s in candidate)
    matched_preferred = sorted(s for s in preferred if s in candidate)

    details = {
        'matched_required': matched_required,
        'matched_preferred': matched_preferred,
        'matched_count': len(matched_required) + len(matched_preferred),
        'total_count': len(required) + len(preferred),
        'missing_required': sorted(s for s in required if s not in candidate),
    }

    if total <= 0 or not candidate:
        return None, details

    matched = (
        sum(required[s] * req_mult for s in matched_required)
        + sum(preferred[s] * pref_mult for s in matched_preferred)
    )
    details['weighted_matched'] = round(matched, 4)
    details['weighted_total'] = round(total, 4)
    return _clamp_score(100.0 * matched / total), details


def score_experience(cv: CandidateVector, jv: JobVector, config: ScorerConfig) -> DimensionResult:
    """
    Experience curve.

    - below minimum: linear from 0 at decay_floor_ratio*min up to 100 at min
    - min .. overqualification_multiple*min: 100
    - beyond: minus overqualification_penalty per extra multiple, floored
    """
    years = cv.experience_years
    required = jv.min_experience_years
    details = {'candidate_years': years, 'required_years': required}

    if years is None or required is None:
        return None, details

    if required <= 0:
        details['band'] = 'no_requirement'
        return 100.0, details

    curve = config.experience
    if years < required:
        details['band'] = 'below'
        floor = curve.decay_floor_ratio * required
        if years <= floor or floor >= required:
            return 0.0, details
        return _clamp_score(100.0 * (years - floor) / (required - floor)), details

    ceiling = curve.overqualification_multiple * required
    if years <= ceiling:
        details['band'] = 'meets'
        return 100.0, details

    details['band'] = 'overqualified'
    extra_multiples = (years - ceiling) / required
    score = max(curve.overqualification_floor, 100.0 - curve.overqualification_penalty * extra_multiples)
    return _clamp_score(score), details


def score_salary(cv: CandidateVector, jv: JobVector, config: ScorerConfig) -> DimensionResult:
    """
    Salary range compatibility.

    - candidate range inside job range: 100
    - overlapping: 100 * fraction of the candidate range inside the job range
    - disjoint by up to tolerance_ratio * job max: near-miss score fading to 0
    - disjoint by more: 0
    """
    if cv.salary is None or jv.salary is None:
        return None, {}

    c_min, c_max = cv.salary.minimum, cv.salary.maximum
    j_min, j_max = jv.salary.minimum, jv.salary.maximum
    details: Dict[str, Any] = {
        'candidate_min': c_min,
        'candidate_max': c_max,
        'job_min': j_min,
        'job_max': j_max,
    }

    if c_min >= j_min and c_max <= j_max:
        details['band'] = 'inside'
        return 100.0, details

    overlap = min(c_max, j_max) - max(c_min, j_min)
    width = c_max - c_min
    if overlap > 0 and width > 0:
        fraction = overlap / width
        details['band'] = 'overlap'
        details['overlap_fraction'] = round(fraction, 4)
        return _clamp_score(100.0 * fraction), details

    gap = max(c_min - j_max, j_min - c_max, 0.0)
    tolerance = config.salary.tolerance_ratio * j_max
    details['gap'] = gap
    if tolerance <= 0 or gap > tolerance:
        details['band'] = 'outside'
        return 0.0, details

    details['band'] = 'near_miss'
    return _clamp_score(config.salary.near_miss_max_score * (1.0 - gap / tolerance)), details


def score_location(cv: CandidateVector, jv: JobVector, config: ScorerConfig) -> DimensionResult:
    scores = config.location
    details: Dict[str, Any] = {
        'candidate_location': cv.location.label if cv.location else None,
        'job_location': jv.location.label if jv.location else None,
    }

    if jv.remote_allowed:
        details['match'] = 'remote'
        return _clamp_score(scores.remote), details

    if cv.location is None or jv.location is None:
        return None, details

    c, j = cv.location, jv.location
    if c.city and c.city == j.city:
        details['match'] = 'city'
        return _clamp_score(scores.same_city), details
    if c.province and c.province == j.province:
        details['match'] = 'province'
        return _clamp_score(scores.same_province), details
    if c.country and c.country == j.country:
        details['match'] = 'country'
        return _clamp_score(scores.same_country), details

    details['match'] = 'none'
    return 0.0, details


def score_industry(cv: CandidateVector, jv: JobVector, config: ScorerConfig) -> DimensionResult:
    if cv.industry is None or jv.industry is None:
        return None, {}

    details: Dict[str, Any] = {
        'candidate_industry': cv.industry.display_name,
        'job_industry': jv.industry.display_name,
    }
    if cv.industry.id == jv.industry.id:
        details['match'] = 'exact'
        return _clamp_score(config.industry.exact), details
    if cv.industry.family == jv.industry.family:
        details['match'] = 'parent'
        return _clamp_score(config.industry.same_parent), details

    details['match'] = 'none'
    return 0.0, details


def score_sa_context(cv: CandidateVector, jv: JobVector, config: ScorerConfig) -> DimensionResult:
    """
    South African context blend: B-BBEE level, NQF level and language coverage.

    Components without a job-side requirement score 100.
    """
    sa = config.sa_context
    has_requirements = (
        jv.bbbee_max_level is not None
        or jv.min_nqf_level is not None
        or bool(jv.required_languages)
    )
    details: Dict[str, Any] = {
        'candidate_bbbee_level': cv.bbbee_level,
        'required_bbbee_level': jv.bbbee_max_level,
        'candidate_nqf_level': cv.nqf_level,
        'required_nqf_level': jv.min_nqf_level,
        'missing_languages': sorted(jv.required_languages - cv.languages),
    }

    if DIM_SA_CONTEXT in cv.unknown and has_requirements:
        return None, details

    # B-BBEE: level 1 is the strongest contributor
    if jv.bbbee_max_level is None:
        bbbee = 100.0
    elif cv.bbbee_level is None:
        bbbee = 0.0
    elif cv.bbbee_level <= jv.bbbee_max_level:
        bbbee = 100.0
    else:
        bbbee = max(0.0, 100.0 - sa.bbbee_level_step_penalty * (cv.bbbee_level - jv.bbbee_max_level))

    if jv.min_nqf_level is None:
        nqf = 100.0
    elif cv.nqf_level is None:
        nqf = 0.0
    elif cv.nqf_level >= jv.min_nqf_level:
        nqf = 100.0
    elif cv.nqf_level == jv.min_nqf_level - 1:
        nqf = sa.nqf_one_below_score
    else:
        nqf = 0.0

    if not jv.required_languages:
        language = 100.0
    else:
        spoken = len(jv.required_languages & cv.languages)
        language = 100.0 * spoken / len(jv.required_languages)

    weight_total = sa.bbbee_weight + sa.nqf_weight + sa.language_weight
    blended = (sa.bbbee_weight * bbbee + sa.nqf_weight * nqf + sa.language_weight * language) / weight_total

    details['components'] = {
        'bbbee': round(bbbee, 2),
        'nqf': round(nqf, 2),
        'language': round(language, 2),
    }
    return _clamp_score(blended), details


def score_availability(cv: CandidateVector, jv: JobVector, config: ScorerConfig) -> DimensionResult:
    weeks = cv.availability_weeks
    deadline = jv.deadline_weeks
    details = {'candidate_weeks': weeks, 'deadline_weeks': deadline}

    if weeks is None or deadline is None:
        return None, details

    if weeks <= deadline:
        return 100.0, details

    limit = config.availability.decay_multiple * deadline
    if weeks >= limit or limit <= deadline:
        return 0.0, details
    return _clamp_score(100.0 * (limit - weeks) / (limit - deadline)), details
