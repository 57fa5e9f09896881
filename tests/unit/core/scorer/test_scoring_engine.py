#!/usr/bin/env python3
"""
Unit tests for ScoringEngine: weights validation, composite bounds and the
documented scoring scenarios.
"""

import unittest

from core.config_loader import ScorerConfig, ScoringWeights
from core.exceptions import InvalidWeightConfiguration
from core.normalizer import ProfileNormalizer, SynonymTable, CandidateProfile, JobRequirement, SkillWeight
from core.normalizer.models import DIMENSIONS
from core.scorer import ScoringEngine, validate_weights
from core.scorer.service import round_half_up
from tests import make_candidate, make_job


class TestWeightValidation(unittest.TestCase):

    def test_default_weights_are_valid(self):
        validate_weights(ScoringWeights().as_dict())

    def test_weights_not_summing_to_one_refuse_to_start(self):
        config = ScorerConfig(weights=ScoringWeights(skills=0.5))
        with self.assertRaises(InvalidWeightConfiguration):
            ScoringEngine(config)

    def test_tolerance(self):
        weights = ScoringWeights().as_dict()
        weights["skills"] += 5e-7
        validate_weights(weights, tolerance=1e-6)
        weights["skills"] += 5e-6
        with self.assertRaises(InvalidWeightConfiguration):
            validate_weights(weights, tolerance=1e-6)

    def test_missing_or_negative_weight(self):
        weights = ScoringWeights().as_dict()
        del weights["availability"]
        with self.assertRaises(InvalidWeightConfiguration):
            validate_weights(weights)

        weights = ScoringWeights(skills=0.45, availability=-0.05).as_dict()
        with self.assertRaises(InvalidWeightConfiguration):
            validate_weights(weights)


class TestRoundHalfUp(unittest.TestCase):

    def test_rounding(self):
        self.assertEqual(round_half_up(55.5), 56)
        self.assertEqual(round_half_up(54.5), 55)
        self.assertEqual(round_half_up(54.49), 54)


class TestScoringEngine(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.normalizer = ProfileNormalizer(SynonymTable.default())
        cls.engine = ScoringEngine(ScorerConfig())

    def score(self, candidate, job):
        return self.engine.compute_score(*self.normalizer.normalize(candidate, job))

    def test_scenario_a_skills_score(self):
        result = self.score(make_candidate(), make_job())
        self.assertEqual(round(result.score_of("skills")), 56)

    def test_scenario_b_experience_below_floor(self):
        result = self.score(make_candidate(experience_years=2), make_job(min_experience_years=5))
        self.assertEqual(result.score_of("experience"), 0.0)

    def test_scenario_c_remote_job_other_province(self):
        result = self.score(make_candidate(location="Cape Town"), make_job(location="Johannesburg", remote_allowed=True))
        self.assertEqual(result.score_of("location"), 100.0)

    def test_perfect_match_scores_100(self):
        candidate = make_candidate(skills=[SkillWeight("python"), SkillWeight("aws"), SkillWeight("docker")])
        result = self.score(candidate, make_job())
        self.assertEqual(result.composite, 100)
        self.assertEqual(result.unknown_dimensions, [])

    def test_composite_is_weighted_sum(self):
        result = self.score(make_candidate(), make_job())
        expected = sum(dim.weight * dim.score for dim in result.dimensions.values())
        self.assertEqual(result.composite, round_half_up(expected))
        self.assertEqual(list(result.dimensions), list(DIMENSIONS))

    def test_empty_inputs_never_raise(self):
        result = self.score(CandidateProfile(id="empty"), JobRequirement(id="empty"))
        self.assertGreaterEqual(result.composite, 0)
        self.assertLessEqual(result.composite, 100)
        for name in ("skills", "experience", "salary", "location", "industry", "availability"):
            self.assertIn(name, result.unknown_dimensions)
            self.assertEqual(result.score_of(name), 0.0)

    def test_composite_bounds_across_inputs(self):
        for years in (0, 1, 3, 8, 50):
            for location in ("Durban", "Johannesburg", None):
                for remote in (True, False):
                    result = self.score(
                        make_candidate(experience_years=years, location=location),
                        make_job(remote_allowed=remote),
                    )
                    self.assertGreaterEqual(result.composite, 0)
                    self.assertLessEqual(result.composite, 100)
                    for dim in result.dimensions.values():
                        self.assertGreaterEqual(dim.score, 0.0)
                        self.assertLessEqual(dim.score, 100.0)

    def test_components_are_json_friendly(self):
        components = self.score(make_candidate(), make_job()).components()
        self.assertEqual(set(components), set(DIMENSIONS))
        self.assertIn("details", components["skills"])
        self.assertFalse(components["skills"]["unknown"])


if __name__ == "__main__":
    unittest.main()
