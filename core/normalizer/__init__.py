"""Normalizer Module - canonical feature vectors for profiles and jobs."""
from core.normalizer.models import (
    CandidateProfile,
    JobRequirement,
    CandidateVector,
    JobVector,
    SkillWeight,
    SalaryRange,
    LocationBucket,
    IndustryRef,
    DIMENSIONS,
)
from core.normalizer.synonyms import SynonymTable, slugify
from core.normalizer.service import ProfileNormalizer

__all__ = [
    'CandidateProfile',
    'JobRequirement',
    'CandidateVector',
    'JobVector',
    'SkillWeight',
    'SalaryRange',
    'LocationBucket',
    'IndustryRef',
    'DIMENSIONS',
    'SynonymTable',
    'slugify',
    'ProfileNormalizer',
]
