"""Data Transfer Objects for the match service.

DTOs are used to transfer data outside of the Unit of Work context,
allowing ORM objects to be converted to plain Python objects that
can be safely used after the database session is closed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass
class ComputedMatch:
    """Everything one scoring pass produces for a (candidate, job) pair."""
    composite_score: int
    sub_scores: Dict[str, float]
    score_components: Dict[str, Any] = field(default_factory=dict)
    unknown_dimensions: List[str] = field(default_factory=list)
    matched_skills: List[Dict[str, Any]] = field(default_factory=list)
    missing_skills: List[Dict[str, Any]] = field(default_factory=list)
    match_reasons: List[str] = field(default_factory=list)
    improvement_suggestions: List[str] = field(default_factory=list)


class MatchSort(str, Enum):
    SCORE = 'score'
    RECENT = 'recent'


@dataclass
class MatchFilter:
    candidate_id: Optional[str] = None
    job_id: Optional[str] = None
    contact_gate_state: Optional[str] = None
    is_viewed: Optional[bool] = None
    is_applied: Optional[bool] = None
    min_score: Optional[int] = None


@dataclass
class MatchView:
    """Read model of a MatchRecord with contact fields already gated.

    candidate_name is the real name only when the contact gate is unlocked,
    otherwise an anonymised descriptor; email/phone are None until unlocked.
    """
    id: str
    candidate_id: str
    job_id: str
    composite_score: int
    skills_score: float
    experience_score: float
    salary_score: float
    location_score: float
    industry_score: float
    sa_context_score: float
    availability_score: float
    matched_skills: List[Dict[str, Any]]
    missing_skills: List[Dict[str, Any]]
    match_reasons: List[str]
    improvement_suggestions: List[str]
    is_viewed: bool
    is_applied: bool
    is_paid: bool
    contact_gate_state: str
    input_version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    unknown_dimensions: List[str] = field(default_factory=list)
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    candidate_phone: Optional[str] = None


@dataclass
class PurchaseDTO:
    purchase_id: str
    match_id: str
    status: str
    amount: float
    currency: str
    idempotency_key: Optional[str] = None
    created_at: Optional[datetime] = None
