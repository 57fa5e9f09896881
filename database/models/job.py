from sqlalchemy import Column, Integer, Float, Text, TIMESTAMP, Boolean, Index
from sqlalchemy.orm import relationship

from core.normalizer.models import JobRequirement, SkillWeight, SalaryRange
from .base import Base, JSONType, utcnow


def _skills_from_json(items) -> list:
    return [SkillWeight(s['skill_id'], s.get('weight', 1.0)) for s in (items or [])]


class JobRecord(Base):
    __tablename__ = 'job'

    id = Column(Text, primary_key=True)
    title = Column(Text)

    required_skills = Column(JSONType, nullable=False, default=list)
    preferred_skills = Column(JSONType, nullable=False, default=list)
    min_experience_years = Column(Float)
    location = Column(Text)
    remote_allowed = Column(Boolean, nullable=False, default=False)
    salary_min = Column(Float)
    salary_max = Column(Float)
    industry = Column(Text)
    urgency = Column(JSONType)  # label ("urgent") or number of weeks

    # South African context requirements
    bbbee_max_level = Column(Integer)
    min_nqf_level = Column(Integer)
    required_languages = Column(JSONType, nullable=False, default=list)

    is_active = Column(Boolean, nullable=False, default=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    matches = relationship("MatchRecord", back_populates="job", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index('idx_job_active', 'is_active'),
    )

    def to_requirement(self) -> JobRequirement:
        salary = None
        if self.salary_min is not None or self.salary_max is not None:
            salary = SalaryRange(minimum=self.salary_min, maximum=self.salary_max)
        return JobRequirement(
            id=self.id,
            required_skills=_skills_from_json(self.required_skills),
            preferred_skills=_skills_from_json(self.preferred_skills),
            min_experience_years=self.min_experience_years,
            location=self.location,
            remote_allowed=bool(self.remote_allowed),
            salary_range=salary,
            industry=self.industry,
            urgency=self.urgency,
            bbbee_max_level=self.bbbee_max_level,
            min_nqf_level=self.min_nqf_level,
            required_languages=list(self.required_languages or []),
        )
