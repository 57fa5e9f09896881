import uuid

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Boolean, Integer, Float, Uuid, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base, JSONType, utcnow

CONTACT_LOCKED = 'locked'


class MatchRecord(Base):
    """
    Stores the scored match between a candidate and a job.

    Tracks:
    - Composite score and the per-dimension sub-scores
    - Matched/missing skills (missing ones with priority tiers)
    - Reasons and improvement suggestions
    - Viewed/applied/paid flags and the contact gate state
    - The input version that produced the scores (stale writes are rejected)
    """
    __tablename__ = 'match_record'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    candidate_id = Column(Text, ForeignKey('candidate.id', ondelete='CASCADE'), nullable=False)
    job_id = Column(Text, ForeignKey('job.id', ondelete='CASCADE'), nullable=False)

    composite_score = Column(Integer, nullable=False, default=0)
    skills_score = Column(Float, nullable=False, default=0)
    experience_score = Column(Float, nullable=False, default=0)
    salary_score = Column(Float, nullable=False, default=0)
    location_score = Column(Float, nullable=False, default=0)
    industry_score = Column(Float, nullable=False, default=0)
    sa_context_score = Column(Float, nullable=False, default=0)
    availability_score = Column(Float, nullable=False, default=0)

    # Diagnostics
    score_components = Column(JSONType, nullable=False, default=dict)
    unknown_dimensions = Column(JSONType, nullable=False, default=list)

    matched_skills = Column(JSONType, nullable=False, default=list)
    missing_skills = Column(JSONType, nullable=False, default=list)
    match_reasons = Column(JSONType, nullable=False, default=list)
    improvement_suggestions = Column(JSONType, nullable=False, default=list)

    is_viewed = Column(Boolean, nullable=False, default=False)
    is_applied = Column(Boolean, nullable=False, default=False)
    is_paid = Column(Boolean, nullable=False, default=False)
    contact_gate_state = Column(Text, nullable=False, default=CONTACT_LOCKED)

    input_version = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    candidate = relationship("CandidateRecord", back_populates="matches")
    job = relationship("JobRecord", back_populates="matches")
    unlocks = relationship("ContactUnlock", back_populates="match", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint('candidate_id', 'job_id', name='uq_match_candidate_job'),
        Index('idx_match_job', 'job_id'),
        Index('idx_match_score', 'composite_score'),
        Index('idx_match_contact_state', 'contact_gate_state'),
        Index('idx_match_updated', 'updated_at'),
    )
