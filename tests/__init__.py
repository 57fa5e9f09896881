#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Run only pure unit tests (no database)
    python -m pytest tests/ -v -m "not db"

    # Using unittest
    python -m unittest discover tests -v

Database tests run against an in-memory SQLite database built from the same
SQLAlchemy models used in production (PostgreSQL).
"""

from typing import Optional

from sqlalchemy.engine import Engine

from core.config_loader import AppConfig, DatabaseConfig, RecomputeConfig
from core.normalizer.models import CandidateProfile, JobRequirement, SkillWeight, SalaryRange
from database.database import create_db_engine
from database.models import Base

TEST_DB_URL = "sqlite://"


def create_test_engine() -> Engine:
    """Fresh in-memory database with all tables created."""
    engine = create_db_engine(TEST_DB_URL)
    Base.metadata.create_all(engine)
    return engine


def create_test_config(**overrides) -> AppConfig:
    """App config for tests: in-memory DB, inline sync queue, single worker (SQLite shares one connection)."""
    data = {
        'database': DatabaseConfig(url=TEST_DB_URL),
        'recompute': RecomputeConfig(use_async_queue=False, max_workers=1, inline=True),
    }
    data.update(overrides)
    return AppConfig(**data)


def create_test_context(config: Optional[AppConfig] = None):
    from core.app_context import AppContext
    return AppContext.build(config or create_test_config(), engine=create_test_engine())


def make_candidate(candidate_id: str = "cand-1", **overrides) -> CandidateProfile:
    fields = dict(
        id=candidate_id,
        skills=[SkillWeight("Python", 1.0), SkillWeight("Docker", 0.5)],
        experience_years=6,
        location="Johannesburg, Gauteng",
        salary_expectation=SalaryRange(50000, 60000),
        industry="Software",
        bbbee_level=1,
        nqf_level=7,
        languages=["English", "Zulu"],
        availability_weeks=2,
    )
    fields.update(overrides)
    return CandidateProfile(**fields)


def make_job(job_id: str = "job-1", **overrides) -> JobRequirement:
    fields = dict(
        id=job_id,
        required_skills=[SkillWeight("python", 1.0), SkillWeight("AWS", 1.0)],
        preferred_skills=[SkillWeight("docker", 0.5)],
        min_experience_years=5,
        location="Johannesburg",
        remote_allowed=False,
        salary_range=SalaryRange(40000, 70000),
        industry="Information Technology",
        urgency="normal",
        bbbee_max_level=2,
        min_nqf_level=6,
        required_languages=["English"],
    )
    fields.update(overrides)
    return JobRequirement(**fields)


def seed_match(ctx, candidate_id: str = "cand-1", job_id: str = "job-1", **candidate_overrides):
    """Save a candidate and a job through the profile service; returns the resulting MatchView."""
    ctx.profile_service.save_candidate(
        make_candidate(candidate_id, **candidate_overrides),
        full_name="Thandi Nkosi",
        email="thandi@example.co.za",
        phone="+27 82 555 0101",
    )
    ctx.profile_service.save_job(make_job(job_id), title="Backend Engineer")
    return ctx.match_service.recompute(candidate_id, job_id)
