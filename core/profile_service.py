#!/usr/bin/env python3
"""
Profile Service - candidate and job edits.

Every save bumps the row's version and schedules recomputation for the
affected pairs, so stored matches converge on the newest inputs.
"""

from typing import Optional
import logging

from sqlalchemy.orm import sessionmaker

from core.normalizer import CandidateProfile, JobRequirement
from database.uow import match_uow
from pipeline.queue import RecomputeQueue

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, session_factory: sessionmaker, queue: Optional[RecomputeQueue] = None):
        self.session_factory = session_factory
        self.queue = queue

    def save_candidate(
        self,
        profile: CandidateProfile,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        recompute: bool = True
    ) -> int:
        """Persist the profile and return its new version."""
        with match_uow(self.session_factory) as repo:
            record = repo.profiles.save_candidate(profile, full_name=full_name, email=email, phone=phone)
            version = record.version

        logger.info(f"Candidate {profile.id} saved at version {version}")
        if recompute and self.queue is not None:
            self.queue.enqueue_candidate(profile.id)
        return version

    def save_job(
        self,
        job: JobRequirement,
        title: Optional[str] = None,
        is_active: bool = True,
        recompute: bool = True
    ) -> int:
        with match_uow(self.session_factory) as repo:
            record = repo.profiles.save_job(job, title=title, is_active=is_active)
            version = record.version

        logger.info(f"Job {job.id} saved at version {version}")
        if recompute and is_active and self.queue is not None:
            self.queue.enqueue_job(job.id)
        return version

    def delete_candidate(self, candidate_id: str) -> bool:
        with match_uow(self.session_factory) as repo:
            return repo.profiles.delete_candidate(candidate_id)

    def delete_job(self, job_id: str) -> bool:
        with match_uow(self.session_factory) as repo:
            return repo.profiles.delete_job(job_id)
