from sqlalchemy import Column, Integer, Float, Text, TIMESTAMP
from sqlalchemy.orm import relationship

from core.normalizer.models import CandidateProfile, SkillWeight, SalaryRange
from .base import Base, JSONType, utcnow


class CandidateRecord(Base):
    """
    Persisted candidate profile.

    Contact fields (full_name, email, phone) are only ever exposed through
    the contact gate. ``version`` grows on every edit and feeds the match
    input version.
    """
    __tablename__ = 'candidate'

    id = Column(Text, primary_key=True)

    # Protected contact fields
    full_name = Column(Text)
    email = Column(Text)
    phone = Column(Text)

    # Structured profile
    skills = Column(JSONType, nullable=False, default=list)  # [{"skill_id", "weight"}]
    experience_years = Column(Float)
    location = Column(Text)
    salary_min = Column(Float)
    salary_max = Column(Float)
    industry = Column(Text)
    bbbee_level = Column(Integer)
    nqf_level = Column(Integer)
    languages = Column(JSONType, nullable=False, default=list)
    availability_weeks = Column(Float)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    matches = relationship("MatchRecord", back_populates="candidate", cascade="all, delete-orphan", passive_deletes=True)

    def to_profile(self) -> CandidateProfile:
        salary = None
        if self.salary_min is not None or self.salary_max is not None:
            salary = SalaryRange(minimum=self.salary_min, maximum=self.salary_max)
        return CandidateProfile(
            id=self.id,
            skills=[SkillWeight(s['skill_id'], s.get('weight', 1.0)) for s in (self.skills or [])],
            experience_years=self.experience_years,
            location=self.location,
            salary_expectation=salary,
            industry=self.industry,
            bbbee_level=self.bbbee_level,
            nqf_level=self.nqf_level,
            languages=list(self.languages or []),
            availability_weeks=self.availability_weeks,
        )
