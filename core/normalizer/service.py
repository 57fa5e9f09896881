#!/usr/bin/env python3
"""
Profile Normalizer - raw profiles/jobs to canonical feature vectors.

Missing or malformed fields never raise. The affected dimension is recorded
in the vector's ``unknown`` set and scored 0 downstream, so a match can
always be produced.
"""

from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple, Union
import logging

from core.config_loader import AvailabilityConfig
from core.normalizer.models import (
    CandidateProfile, JobRequirement, CandidateVector, JobVector,
    SkillWeight, SalaryRange,
    DIM_SKILLS, DIM_EXPERIENCE, DIM_SALARY, DIM_LOCATION,
    DIM_INDUSTRY, DIM_SA_CONTEXT, DIM_AVAILABILITY,
)
from core.normalizer.synonyms import SynonymTable, slugify

logger = logging.getLogger(__name__)


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def _as_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class ProfileNormalizer:
    """Maps CandidateProfile / JobRequirement onto CandidateVector / JobVector."""

    def __init__(
        self,
        synonyms: SynonymTable,
        availability_config: Optional[AvailabilityConfig] = None
    ):
        self.synonyms = synonyms
        self.availability_config = availability_config or AvailabilityConfig()

    def normalize(
        self,
        profile: CandidateProfile,
        job: JobRequirement
    ) -> Tuple[CandidateVector, JobVector]:
        return self.normalize_candidate(profile), self.normalize_job(job)

    def normalize_candidate(self, profile: CandidateProfile) -> CandidateVector:
        unknown: Set[str] = set()

        skills = self._normalize_skills(profile.skills, owner=f"candidate {profile.id}")
        if not skills:
            unknown.add(DIM_SKILLS)

        years = _as_float(profile.experience_years)
        if years is None or years < 0:
            years = None
            unknown.add(DIM_EXPERIENCE)

        location = self.synonyms.resolve_location(profile.location)
        if location is None:
            unknown.add(DIM_LOCATION)

        salary = self._normalize_salary(profile.salary_expectation)
        if salary is None:
            unknown.add(DIM_SALARY)

        industry = self.synonyms.resolve_industry(profile.industry)
        if industry is None:
            unknown.add(DIM_INDUSTRY)

        languages = self._normalize_languages(profile.languages)
        if profile.bbbee_level is None and profile.nqf_level is None and not languages:
            unknown.add(DIM_SA_CONTEXT)

        availability = _as_float(profile.availability_weeks)
        if availability is None or availability < 0:
            availability = None
            unknown.add(DIM_AVAILABILITY)

        if unknown:
            logger.debug(f"Candidate {profile.id} has unknown dimensions: {sorted(unknown)}")

        return CandidateVector(
            candidate_id=str(profile.id),
            skills=skills,
            experience_years=years,
            location=location,
            salary=salary,
            industry=industry,
            bbbee_level=profile.bbbee_level,
            nqf_level=profile.nqf_level,
            languages=languages,
            availability_weeks=availability,
            unknown=frozenset(unknown),
        )

    def normalize_job(self, job: JobRequirement) -> JobVector:
        unknown: Set[str] = set()

        required = self._normalize_skills(job.required_skills, owner=f"job {job.id}")
        required_ids = {s.skill_id for s in required}
        # A skill listed as both required and preferred counts as required
        preferred = tuple(
            s for s in self._normalize_skills(job.preferred_skills, owner=f"job {job.id}")
            if s.skill_id not in required_ids
        )
        if not required and not preferred:
            unknown.add(DIM_SKILLS)

        min_years = _as_float(job.min_experience_years)
        if min_years is None or min_years < 0:
            min_years = None
            unknown.add(DIM_EXPERIENCE)

        location = self.synonyms.resolve_location(job.location)
        if location is None and not job.remote_allowed:
            unknown.add(DIM_LOCATION)

        salary = self._normalize_salary(job.salary_range)
        if salary is None:
            unknown.add(DIM_SALARY)

        industry = self.synonyms.resolve_industry(job.industry)
        if industry is None:
            unknown.add(DIM_INDUSTRY)

        deadline = self._resolve_deadline(job.urgency)
        if deadline is None:
            unknown.add(DIM_AVAILABILITY)

        if unknown:
            logger.debug(f"Job {job.id} has unknown dimensions: {sorted(unknown)}")

        return JobVector(
            job_id=str(job.id),
            required_skills=required,
            preferred_skills=preferred,
            min_experience_years=min_years,
            location=location,
            remote_allowed=bool(job.remote_allowed),
            salary=salary,
            industry=industry,
            deadline_weeks=deadline,
            bbbee_max_level=job.bbbee_max_level,
            min_nqf_level=job.min_nqf_level,
            required_languages=self._normalize_languages(job.required_languages),
            unknown=frozenset(unknown),
        )

    def _normalize_skills(self, skills: Iterable[SkillWeight], owner: str) -> Tuple[SkillWeight, ...]:
        resolved: Dict[str, float] = {}
        for skill in skills or []:
            if not skill.skill_id or not str(skill.skill_id).strip():
                continue
            skill_id = self.synonyms.resolve_skill(skill.skill_id)
            weight = _as_float(skill.weight)
            if weight is None:
                weight = 1.0
            clamped = _clamp01(weight)
            if clamped != weight:
                logger.warning("Corrected weight of %s for %s from %r to %r", skill_id, owner, weight, clamped)
            # Duplicates after synonym resolution keep the strongest weight
            resolved[skill_id] = max(resolved.get(skill_id, 0.0), clamped)
        return tuple(SkillWeight(skill_id=k, weight=v) for k, v in sorted(resolved.items()))

    def _normalize_languages(self, languages: Iterable[str]) -> FrozenSet[str]:
        return frozenset(
            self.synonyms.resolve_language(lang)
            for lang in (languages or [])
            if lang and str(lang).strip()
        )

    @staticmethod
    def _normalize_salary(salary: Optional[SalaryRange]) -> Optional[SalaryRange]:
        if salary is None:
            return None
        low = _as_float(salary.minimum)
        high = _as_float(salary.maximum)
        if low is None and high is None:
            return None
        # A single figure is treated as a point range
        if low is None:
            low = high
        if high is None:
            high = low
        if low < 0 or high < 0:
            return None
        if low > high:
            logger.warning("Swapping inverted salary range %r-%r", low, high)
            low, high = high, low
        return SalaryRange(minimum=low, maximum=high)

    def _resolve_deadline(self, urgency: Optional[Union[str, float]]) -> Optional[float]:
        if urgency is None:
            return None
        if isinstance(urgency, (int, float)) and not isinstance(urgency, bool):
            return float(urgency) if urgency > 0 else None
        table = {slugify(k): v for k, v in self.availability_config.urgency_deadline_weeks.items()}
        deadline = table.get(slugify(urgency))
        if deadline is None:
            logger.warning(f"Unknown urgency label: {urgency!r}")
        return deadline
