#!/usr/bin/env python3
"""
Match Service - collaborator-facing match operations.

Recompute flow for one pair:
1. Load candidate and job rows in a unit of work
2. Normalize both into feature vectors
3. Score, analyse gaps, render reasons/suggestions
4. Upsert the MatchRecord at input version candidate.version + job.version

Reads go through the contact gate, so callers only ever receive MatchView
objects with contact fields already gated.
"""

from typing import List, Optional
import logging

from sqlalchemy.orm import sessionmaker

from core.analysis import GapAnalyzer
from core.contact import ContactGateService, gated_contact
from core.dto import ComputedMatch, MatchFilter, MatchSort, MatchView, PurchaseDTO
from core.exceptions import CandidateNotFoundException, JobNotFoundException, MatchNotFoundException
from core.explain import ReasonGenerator
from core.normalizer import ProfileNormalizer, CandidateProfile, JobRequirement
from core.scorer import ScoringEngine
from database.models import CandidateRecord, MatchRecord
from database.uow import match_uow
from pipeline.batch import BatchResult, run_batch

logger = logging.getLogger(__name__)


class MatchService:
    def __init__(
        self,
        session_factory: sessionmaker,
        normalizer: ProfileNormalizer,
        engine: ScoringEngine,
        gap_analyzer: GapAnalyzer,
        reason_generator: ReasonGenerator,
        contact_gate: ContactGateService,
        max_workers: int = 4
    ):
        self.session_factory = session_factory
        self.normalizer = normalizer
        self.engine = engine
        self.gap_analyzer = gap_analyzer
        self.reason_generator = reason_generator
        self.contact_gate = contact_gate
        self.max_workers = max_workers

    def compute(self, profile: CandidateProfile, job: JobRequirement) -> ComputedMatch:
        """Score one pair without touching storage."""
        cv, jv = self.normalizer.normalize(profile, job)
        score = self.engine.compute_score(cv, jv)
        matched, missing = self.gap_analyzer.compute_gaps(cv, jv)
        reasons, suggestions = self.reason_generator.generate_explanations(score, missing)

        return ComputedMatch(
            composite_score=score.composite,
            sub_scores=score.sub_scores(),
            score_components=score.components(),
            unknown_dimensions=score.unknown_dimensions,
            matched_skills=[m.to_dict() for m in matched],
            missing_skills=[g.to_dict() for g in missing],
            match_reasons=reasons,
            improvement_suggestions=suggestions,
        )

    def recompute(self, candidate_id: str, job_id: str) -> MatchView:
        with match_uow(self.session_factory) as repo:
            candidate = repo.profiles.get_candidate(candidate_id)
            if candidate is None:
                raise CandidateNotFoundException(f"Candidate {candidate_id} not found")
            job = repo.profiles.get_job(job_id)
            if job is None:
                raise JobNotFoundException(f"Job {job_id} not found")

            computed = self.compute(candidate.to_profile(), job.to_requirement())
            input_version = candidate.version + job.version
            record = repo.matches.upsert(candidate_id, job_id, computed, input_version)
            return self._to_view(record, candidate)

    def recompute_job(self, job_id: str) -> BatchResult:
        """Recompute one job against every candidate."""
        with match_uow(self.session_factory) as repo:
            if repo.profiles.get_job(job_id) is None:
                raise JobNotFoundException(f"Job {job_id} not found")
            candidate_ids = repo.profiles.list_candidate_ids()

        pairs = [(candidate_id, job_id) for candidate_id in candidate_ids]
        return run_batch(pairs, self.recompute, self.max_workers, label=f"job {job_id}")

    def recompute_candidate(self, candidate_id: str) -> BatchResult:
        """Recompute one candidate against every active job."""
        with match_uow(self.session_factory) as repo:
            if repo.profiles.get_candidate(candidate_id) is None:
                raise CandidateNotFoundException(f"Candidate {candidate_id} not found")
            job_ids = repo.profiles.list_active_job_ids()

        pairs = [(candidate_id, job_id) for job_id in job_ids]
        return run_batch(pairs, self.recompute, self.max_workers, label=f"candidate {candidate_id}")

    def list_matches(
        self,
        match_filter: Optional[MatchFilter] = None,
        sort: MatchSort = MatchSort.SCORE,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[MatchView]:
        with match_uow(self.session_factory) as repo:
            records = repo.matches.list_matches(match_filter, sort, limit, offset)
            return [self._to_view(r, r.candidate) for r in records]

    def get_match(self, match_id) -> MatchView:
        with match_uow(self.session_factory) as repo:
            record = repo.matches.get_by_id(match_id)
            if record is None:
                raise MatchNotFoundException(f"Match {match_id} not found")
            return self._to_view(record, record.candidate)

    def mark_viewed(self, match_id) -> MatchView:
        with match_uow(self.session_factory) as repo:
            record = repo.matches.mark_viewed(match_id)
            if record is None:
                raise MatchNotFoundException(f"Match {match_id} not found")
            return self._to_view(record, record.candidate)

    def mark_applied(self, match_id) -> MatchView:
        with match_uow(self.session_factory) as repo:
            record = repo.matches.mark_applied(match_id)
            if record is None:
                raise MatchNotFoundException(f"Match {match_id} not found")
            return self._to_view(record, record.candidate)

    def initiate_purchase(self, match_id) -> PurchaseDTO:
        return self.contact_gate.initiate_purchase(match_id)

    def confirm_payment(self, match_id, idempotency_key: str) -> PurchaseDTO:
        return self.contact_gate.confirm_payment(match_id, idempotency_key)

    def fail_payment(self, match_id, reason: str = 'payment_failed') -> PurchaseDTO:
        return self.contact_gate.fail_payment(match_id, reason)

    def expire_pending_purchases(self) -> int:
        return self.contact_gate.expire_pending_purchases()

    def _industry_label(self, raw: Optional[str]) -> Optional[str]:
        industry = self.normalizer.synonyms.resolve_industry(raw)
        return industry.display_name if industry else None

    def _to_view(self, record: MatchRecord, candidate: CandidateRecord) -> MatchView:
        name, email, phone = gated_contact(
            record.contact_gate_state,
            candidate.full_name,
            candidate.email,
            candidate.phone,
            candidate.experience_years,
            self._industry_label(candidate.industry),
        )
        return MatchView(
            id=str(record.id),
            candidate_id=record.candidate_id,
            job_id=record.job_id,
            composite_score=record.composite_score,
            skills_score=record.skills_score,
            experience_score=record.experience_score,
            salary_score=record.salary_score,
            location_score=record.location_score,
            industry_score=record.industry_score,
            sa_context_score=record.sa_context_score,
            availability_score=record.availability_score,
            matched_skills=list(record.matched_skills or []),
            missing_skills=list(record.missing_skills or []),
            match_reasons=list(record.match_reasons or []),
            improvement_suggestions=list(record.improvement_suggestions or []),
            is_viewed=record.is_viewed,
            is_applied=record.is_applied,
            is_paid=record.is_paid,
            contact_gate_state=record.contact_gate_state,
            input_version=record.input_version,
            created_at=record.created_at,
            updated_at=record.updated_at,
            unknown_dimensions=list(record.unknown_dimensions or []),
            candidate_name=name,
            candidate_email=email,
            candidate_phone=phone,
        )
