import logging
from typing import Dict, List, Optional

from sqlalchemy import select

from core.normalizer.models import CandidateProfile, JobRequirement, SkillWeight
from database.models import CandidateRecord, JobRecord
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _skills_to_json(skills: List[SkillWeight]) -> List[Dict]:
    return [{'skill_id': s.skill_id, 'weight': s.weight} for s in skills]


class ProfileRepository(BaseRepository):
    """Candidate profiles and job requirements, each with a growing version counter."""

    def get_candidate(self, candidate_id: str) -> Optional[CandidateRecord]:
        return self.db.get(CandidateRecord, candidate_id, populate_existing=True)

    def get_job(self, job_id: str) -> Optional[JobRecord]:
        return self.db.get(JobRecord, job_id, populate_existing=True)

    def save_candidate(
        self,
        profile: CandidateProfile,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> CandidateRecord:
        record = self.get_candidate(profile.id)
        if record is None:
            record = CandidateRecord(id=profile.id, version=1)
            self.db.add(record)
        else:
            record.version = CandidateRecord.version + 1

        salary = profile.salary_expectation
        record.skills = _skills_to_json(profile.skills)
        record.experience_years = profile.experience_years
        record.location = profile.location
        record.salary_min = salary.minimum if salary else None
        record.salary_max = salary.maximum if salary else None
        record.industry = profile.industry
        record.bbbee_level = profile.bbbee_level
        record.nqf_level = profile.nqf_level
        record.languages = list(profile.languages)
        record.availability_weeks = profile.availability_weeks
        if full_name is not None:
            record.full_name = full_name
        if email is not None:
            record.email = email
        if phone is not None:
            record.phone = phone

        self.db.flush()
        logger.debug(f"Saved candidate {record.id} at version {record.version}")
        return record

    def save_job(
        self,
        job: JobRequirement,
        title: Optional[str] = None,
        is_active: bool = True
    ) -> JobRecord:
        record = self.get_job(job.id)
        if record is None:
            record = JobRecord(id=job.id, version=1)
            self.db.add(record)
        else:
            record.version = JobRecord.version + 1

        salary = job.salary_range
        record.title = title if title is not None else record.title
        record.required_skills = _skills_to_json(job.required_skills)
        record.preferred_skills = _skills_to_json(job.preferred_skills)
        record.min_experience_years = job.min_experience_years
        record.location = job.location
        record.remote_allowed = job.remote_allowed
        record.salary_min = salary.minimum if salary else None
        record.salary_max = salary.maximum if salary else None
        record.industry = job.industry
        record.urgency = job.urgency
        record.bbbee_max_level = job.bbbee_max_level
        record.min_nqf_level = job.min_nqf_level
        record.required_languages = list(job.required_languages)
        record.is_active = is_active

        self.db.flush()
        logger.debug(f"Saved job {record.id} at version {record.version}")
        return record

    def delete_candidate(self, candidate_id: str) -> bool:
        record = self.get_candidate(candidate_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.flush()
        logger.info(f"Deleted candidate {candidate_id} and its matches")
        return True

    def delete_job(self, job_id: str) -> bool:
        record = self.get_job(job_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.flush()
        logger.info(f"Deleted job {job_id} and its matches")
        return True

    def list_candidate_ids(self) -> List[str]:
        stmt = select(CandidateRecord.id).order_by(CandidateRecord.id)
        return list(self.db.execute(stmt).scalars().all())

    def list_active_job_ids(self) -> List[str]:
        stmt = select(JobRecord.id).where(JobRecord.is_active.is_(True)).order_by(JobRecord.id)
        return list(self.db.execute(stmt).scalars().all())
