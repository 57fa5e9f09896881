#!/usr/bin/env python3
"""
Normalizer Models - Raw inputs and canonical feature vectors.

CandidateProfile / JobRequirement are the shapes handed to the core by the
profile and job owners. CandidateVector / JobVector are the immutable,
synonym-resolved forms the scorer and gap analyzer work on.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

# Dimension names, in composite order
DIM_SKILLS = 'skills'
DIM_EXPERIENCE = 'experience'
DIM_SALARY = 'salary'
DIM_LOCATION = 'location'
DIM_INDUSTRY = 'industry'
DIM_SA_CONTEXT = 'sa_context'
DIM_AVAILABILITY = 'availability'

DIMENSIONS = (
    DIM_SKILLS,
    DIM_EXPERIENCE,
    DIM_SALARY,
    DIM_LOCATION,
    DIM_INDUSTRY,
    DIM_SA_CONTEXT,
    DIM_AVAILABILITY,
)


@dataclass(frozen=True)
class SkillWeight:
    skill_id: str
    weight: float = 1.0


@dataclass(frozen=True)
class SalaryRange:
    minimum: Optional[float] = None
    maximum: Optional[float] = None


@dataclass
class CandidateProfile:
    """Structured candidate profile (already extracted from the CV)."""
    id: str
    skills: List[SkillWeight] = field(default_factory=list)
    experience_years: Optional[float] = None
    location: Optional[str] = None
    salary_expectation: Optional[SalaryRange] = None
    industry: Optional[str] = None
    bbbee_level: Optional[int] = None
    nqf_level: Optional[int] = None
    languages: List[str] = field(default_factory=list)
    availability_weeks: Optional[float] = None


@dataclass
class JobRequirement:
    """Structured job posting requirements."""
    id: str
    required_skills: List[SkillWeight] = field(default_factory=list)
    preferred_skills: List[SkillWeight] = field(default_factory=list)
    min_experience_years: Optional[float] = None
    location: Optional[str] = None
    remote_allowed: bool = False
    salary_range: Optional[SalaryRange] = None
    industry: Optional[str] = None
    urgency: Optional[Union[str, float]] = None
    bbbee_max_level: Optional[int] = None
    min_nqf_level: Optional[int] = None
    required_languages: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LocationBucket:
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None

    @property
    def label(self) -> str:
        return self.city or self.province or self.country or 'unknown'


@dataclass(frozen=True)
class IndustryRef:
    id: str
    parent: Optional[str] = None
    label: Optional[str] = None

    @property
    def family(self) -> str:
        return self.parent or self.id

    @property
    def display_name(self) -> str:
        return self.label or self.id.replace('_', ' ').title()


@dataclass(frozen=True)
class CandidateVector:
    candidate_id: str
    skills: Tuple[SkillWeight, ...] = ()
    experience_years: Optional[float] = None
    location: Optional[LocationBucket] = None
    salary: Optional[SalaryRange] = None
    industry: Optional[IndustryRef] = None
    bbbee_level: Optional[int] = None
    nqf_level: Optional[int] = None
    languages: FrozenSet[str] = frozenset()
    availability_weeks: Optional[float] = None
    unknown: FrozenSet[str] = frozenset()

    def skill_map(self) -> Dict[str, float]:
        return {s.skill_id: s.weight for s in self.skills}


@dataclass(frozen=True)
class JobVector:
    job_id: str
    required_skills: Tuple[SkillWeight, ...] = ()
    preferred_skills: Tuple[SkillWeight, ...] = ()
    min_experience_years: Optional[float] = None
    location: Optional[LocationBucket] = None
    remote_allowed: bool = False
    salary: Optional[SalaryRange] = None
    industry: Optional[IndustryRef] = None
    deadline_weeks: Optional[float] = None
    bbbee_max_level: Optional[int] = None
    min_nqf_level: Optional[int] = None
    required_languages: FrozenSet[str] = frozenset()
    unknown: FrozenSet[str] = frozenset()

    def required_map(self) -> Dict[str, float]:
        return {s.skill_id: s.weight for s in self.required_skills}

    def preferred_map(self) -> Dict[str, float]:
        return {s.skill_id: s.weight for s in self.preferred_skills}
