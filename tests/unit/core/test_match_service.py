#!/usr/bin/env python3
"""
Tests for MatchService and ProfileService wired through AppContext.

These tests require a database - marked with @pytest.mark.db
"""

import threading
import uuid
from unittest.mock import Mock

import pytest

from core.config_loader import RecomputeConfig
from core.dto import MatchFilter, MatchSort
from core.exceptions import CandidateNotFoundException, JobNotFoundException, MatchNotFoundException
from core.normalizer import SkillWeight
from core.profile_service import ProfileService
from pipeline.queue import RecomputeQueue
from tests import create_test_config, create_test_context, make_candidate, make_job, seed_match


@pytest.mark.db
class TestRecompute:

    def test_recompute_stores_scores_and_explanations(self, app_context):
        view = seed_match(app_context)
        expected = app_context.match_service.compute(make_candidate(), make_job())

        assert view.composite_score == expected.composite_score
        assert 0 <= view.composite_score <= 100
        assert view.input_version == 2
        assert view.match_reasons == expected.match_reasons
        assert [g['skill_id'] for g in view.missing_skills] == ['aws']
        assert view.missing_skills[0]['priority'] == 'critical'
        assert {m['skill_id'] for m in view.matched_skills} == {'python', 'docker'}

    def test_locked_view_is_anonymised(self, app_context):
        view = seed_match(app_context)
        assert view.contact_gate_state == 'locked'
        assert view.candidate_name == 'Senior Information Technology Professional'
        assert view.candidate_email is None
        assert view.candidate_phone is None

    def test_recompute_at_same_version_is_a_no_op(self, app_context):
        first = seed_match(app_context)
        again = app_context.match_service.recompute('cand-1', 'job-1')
        assert again.id == first.id
        assert again.input_version == first.input_version
        assert again.updated_at == app_context.match_service.get_match(first.id).updated_at

    def test_profile_edit_triggers_recompute(self, app_context):
        first = seed_match(app_context)
        version = app_context.profile_service.save_candidate(
            make_candidate(skills=[SkillWeight('Python'), SkillWeight('AWS'), SkillWeight('Docker')])
        )
        assert version == 2

        view = app_context.match_service.get_match(first.id)
        assert view.input_version == 3
        assert view.missing_skills == []
        assert view.skills_score == 100.0
        assert view.composite_score > first.composite_score

    def test_unknown_ids(self, app_context):
        seed_match(app_context)
        with pytest.raises(CandidateNotFoundException):
            app_context.match_service.recompute('nobody', 'job-1')
        with pytest.raises(JobNotFoundException):
            app_context.match_service.recompute('cand-1', 'no-job')
        with pytest.raises(JobNotFoundException):
            app_context.match_service.recompute_job('no-job')
        with pytest.raises(MatchNotFoundException):
            app_context.match_service.get_match(uuid.uuid4())


@pytest.mark.db
class TestBatchRecompute:

    def test_recompute_job_covers_every_candidate(self, app_context):
        seed_match(app_context)
        app_context.profile_service.save_candidate(make_candidate('cand-2', experience_years=1), recompute=False)

        result = app_context.match_service.recompute_job('job-1')
        assert result.total == 2
        assert result.succeeded == 2
        assert result.failed == 0

        views = app_context.match_service.list_matches(MatchFilter(job_id='job-1'))
        assert [v.candidate_id for v in views] == ['cand-1', 'cand-2']

    def test_recompute_candidate_skips_inactive_jobs(self, app_context):
        seed_match(app_context)
        app_context.profile_service.save_job(make_job('job-2'), is_active=False)

        result = app_context.match_service.recompute_candidate('cand-1')
        assert result.total == 1
        assert app_context.match_service.list_matches(MatchFilter(job_id='job-2')) == []

    def test_empty_batch(self, app_context):
        app_context.profile_service.save_job(make_job('job-1'), recompute=False)
        result = app_context.match_service.recompute_job('job-1')
        assert result.to_dict() == {'total': 0, 'succeeded': 0, 'failed': 0, 'errors': {}}


@pytest.mark.db
class TestReadsAndFlags:

    def test_flags(self, app_context):
        view = seed_match(app_context)
        viewed = app_context.match_service.mark_viewed(view.id)
        applied = app_context.match_service.mark_applied(view.id)

        assert viewed.is_viewed is True
        assert applied.is_viewed is True
        assert applied.is_applied is True
        assert applied.updated_at == viewed.updated_at

    def test_flag_on_unknown_match(self, app_context):
        with pytest.raises(MatchNotFoundException):
            app_context.match_service.mark_viewed(uuid.uuid4())

    def test_list_sorted_by_score(self, app_context):
        seed_match(app_context)
        app_context.profile_service.save_candidate(
            make_candidate('cand-2', skills=[], experience_years=0, location='Durban')
        )

        views = app_context.match_service.list_matches(sort=MatchSort.SCORE)
        assert [v.candidate_id for v in views] == ['cand-1', 'cand-2']
        assert views[0].composite_score >= views[1].composite_score
        assert 'skills' in views[1].unknown_dimensions

        top = app_context.match_service.list_matches(limit=1)
        assert len(top) == 1

    def test_deleting_candidate_removes_matches(self, app_context):
        seed_match(app_context)
        assert app_context.profile_service.delete_candidate('cand-1') is True
        assert app_context.match_service.list_matches() == []


class TestProfileServiceQueueing:
    """Queue interaction only; the database side is covered above."""

    @pytest.fixture
    def service(self, app_context):
        return ProfileService(app_context.session_factory, queue=Mock())

    @pytest.mark.db
    def test_candidate_save_enqueues(self, service):
        service.save_candidate(make_candidate())
        service.queue.enqueue_candidate.assert_called_once_with('cand-1')

    @pytest.mark.db
    def test_recompute_can_be_skipped(self, service):
        service.save_candidate(make_candidate(), recompute=False)
        service.save_job(make_job(), recompute=False)
        service.queue.enqueue_candidate.assert_not_called()
        service.queue.enqueue_job.assert_not_called()

    @pytest.mark.db
    def test_inactive_job_not_enqueued(self, service):
        service.save_job(make_job(), is_active=False)
        service.queue.enqueue_job.assert_not_called()
        service.save_job(make_job())
        service.queue.enqueue_job.assert_called_once_with('job-1')


class TestBackgroundRecompute:
    """Sync-mode recompute runs off the save path unless the queue is inline."""

    @pytest.mark.db
    def test_save_returns_before_recompute_finishes(self, app_context):
        release = threading.Event()
        finished = []

        def slow_handler(task):
            release.wait(5)
            finished.append(task['job_id'])

        queue = RecomputeQueue(RecomputeConfig(use_async_queue=False), sync_handler=slow_handler)
        service = ProfileService(app_context.session_factory, queue)
        try:
            version = service.save_job(make_job('job-1'))

            assert version == 1
            assert finished == []
            assert queue.get_queue_status()['pending'] == 1
        finally:
            release.set()
            queue.shutdown()
        assert finished == ['job-1']

    @pytest.mark.db
    def test_background_recompute_stores_match(self):
        config = create_test_config(recompute=RecomputeConfig(use_async_queue=False, max_workers=1))
        ctx = create_test_context(config)
        try:
            ctx.profile_service.save_candidate(make_candidate('cand-1'))
            assert ctx.recompute_queue.drain(timeout=10)
            ctx.profile_service.save_job(make_job('job-1'))
            assert ctx.recompute_queue.drain(timeout=10)

            views = ctx.match_service.list_matches(MatchFilter(job_id='job-1'))
            assert [(v.candidate_id, v.job_id) for v in views] == [('cand-1', 'job-1')]
        finally:
            ctx.close()
