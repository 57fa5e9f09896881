import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from core.dto import ComputedMatch, MatchFilter, MatchSort
from core.normalizer.models import DIMENSIONS
from database.models import MatchRecord
from database.models.base import utcnow
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

# A racing insert turns into one more update attempt
_MAX_UPSERT_ATTEMPTS = 2


def as_match_id(match_id: Any) -> Optional[uuid.UUID]:
    if isinstance(match_id, uuid.UUID):
        return match_id
    try:
        return uuid.UUID(str(match_id))
    except (TypeError, ValueError):
        return None


class MatchRepository(BaseRepository):
    def get_by_id(self, match_id: Any) -> Optional[MatchRecord]:
        key = as_match_id(match_id)
        if key is None:
            return None
        stmt = (
            select(MatchRecord)
            .where(MatchRecord.id == key)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_pair(self, candidate_id: str, job_id: str) -> Optional[MatchRecord]:
        stmt = (
            select(MatchRecord)
            .where(MatchRecord.candidate_id == candidate_id, MatchRecord.job_id == job_id)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    @staticmethod
    def _score_values(computed: ComputedMatch) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            'composite_score': computed.composite_score,
            'score_components': computed.score_components,
            'unknown_dimensions': list(computed.unknown_dimensions),
            'matched_skills': list(computed.matched_skills),
            'missing_skills': list(computed.missing_skills),
            'match_reasons': list(computed.match_reasons),
            'improvement_suggestions': list(computed.improvement_suggestions),
        }
        for name in DIMENSIONS:
            values[f'{name}_score'] = computed.sub_scores.get(name, 0.0)
        return values

    def upsert(
        self,
        candidate_id: str,
        job_id: str,
        computed: ComputedMatch,
        input_version: int
    ) -> MatchRecord:
        """
        Write scores for a pair unless a newer (or equal) input version is stored.

        The update is a single conditional UPDATE on input_version, so
        concurrent recomputes coalesce by version rather than arrival order.
        Flags and the contact gate state are never touched here.
        """
        values = self._score_values(computed)
        values['input_version'] = input_version

        for attempt in range(1, _MAX_UPSERT_ATTEMPTS + 1):
            result = self.db.execute(
                update(MatchRecord)
                .where(
                    MatchRecord.candidate_id == candidate_id,
                    MatchRecord.job_id == job_id,
                    MatchRecord.input_version < input_version
                )
                .values(updated_at=utcnow(), **values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:
                logger.debug(f"Updated match {candidate_id}/{job_id} to input version {input_version}")
                return self.get_by_pair(candidate_id, job_id)

            existing = self.get_by_pair(candidate_id, job_id)
            if existing is not None:
                logger.info(
                    f"Stale recompute for {candidate_id}/{job_id} ignored: "
                    f"stored version {existing.input_version} >= incoming {input_version}"
                )
                return existing

            record = MatchRecord(candidate_id=candidate_id, job_id=job_id, **values)
            try:
                with self.db.begin_nested():
                    self.db.add(record)
                    self.db.flush()
            except IntegrityError:
                if attempt >= _MAX_UPSERT_ATTEMPTS:
                    raise
                logger.info(f"Concurrent insert for {candidate_id}/{job_id}, retrying as update")
                continue

            logger.debug(f"Created match {record.id} for {candidate_id}/{job_id} at version {input_version}")
            return record

    def list_matches(
        self,
        match_filter: Optional[MatchFilter] = None,
        sort: MatchSort = MatchSort.SCORE,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[MatchRecord]:
        f = match_filter or MatchFilter()
        stmt = select(MatchRecord)

        if f.candidate_id is not None:
            stmt = stmt.where(MatchRecord.candidate_id == f.candidate_id)
        if f.job_id is not None:
            stmt = stmt.where(MatchRecord.job_id == f.job_id)
        if f.contact_gate_state is not None:
            stmt = stmt.where(MatchRecord.contact_gate_state == f.contact_gate_state)
        if f.is_viewed is not None:
            stmt = stmt.where(MatchRecord.is_viewed == f.is_viewed)
        if f.is_applied is not None:
            stmt = stmt.where(MatchRecord.is_applied == f.is_applied)
        if f.min_score is not None:
            stmt = stmt.where(MatchRecord.composite_score >= f.min_score)

        if MatchSort(sort) == MatchSort.RECENT:
            order = [MatchRecord.updated_at.desc(), MatchRecord.composite_score.desc()]
        else:
            order = [MatchRecord.composite_score.desc(), MatchRecord.updated_at.desc()]
        stmt = stmt.order_by(*order, MatchRecord.candidate_id.asc(), MatchRecord.job_id.asc())

        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return self.db.execute(stmt).scalars().all()

    def _set_flags(self, match_id: Any, **flags) -> Optional[MatchRecord]:
        key = as_match_id(match_id)
        if key is None:
            return None
        # updated_at tracks score changes, so keep it as is
        self.db.execute(
            update(MatchRecord)
            .where(MatchRecord.id == key)
            .values(updated_at=MatchRecord.updated_at, **flags)
            .execution_options(synchronize_session=False)
        )
        return self.get_by_id(key)

    def mark_viewed(self, match_id: Any) -> Optional[MatchRecord]:
        return self._set_flags(match_id, is_viewed=True)

    def mark_applied(self, match_id: Any) -> Optional[MatchRecord]:
        return self._set_flags(match_id, is_applied=True)

    def compare_and_set_contact_state(
        self,
        match_id: Any,
        expected: str,
        new: str,
        **extra: Any
    ) -> bool:
        """Move the contact gate from ``expected`` to ``new``; False if another writer got there first."""
        key = as_match_id(match_id)
        if key is None:
            return False
        result = self.db.execute(
            update(MatchRecord)
            .where(MatchRecord.id == key, MatchRecord.contact_gate_state == expected)
            .values(contact_gate_state=new, updated_at=MatchRecord.updated_at, **extra)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
