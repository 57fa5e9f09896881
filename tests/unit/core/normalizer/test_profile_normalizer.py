#!/usr/bin/env python3
"""
Unit tests for ProfileNormalizer and SynonymTable.
"""

import unittest

from core.normalizer import ProfileNormalizer, SynonymTable, SkillWeight, SalaryRange, slugify
from core.normalizer.models import (
    DIM_SKILLS, DIM_EXPERIENCE, DIM_SALARY, DIM_LOCATION,
    DIM_INDUSTRY, DIM_SA_CONTEXT, DIM_AVAILABILITY,
)
from tests import make_candidate, make_job


class TestSynonymTable(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.synonyms = SynonymTable.default()

    def test_slugify(self):
        self.assertEqual(slugify("  Node.js "), "node_js")
        self.assertEqual(slugify("C#"), "c#")

    def test_skill_aliases_resolve_to_canonical_id(self):
        self.assertEqual(self.synonyms.resolve_skill("Amazon Web Services"), "aws")
        self.assertEqual(self.synonyms.resolve_skill("K8s"), "kubernetes")
        self.assertEqual(self.synonyms.resolve_skill("python3"), "python")

    def test_unknown_skill_falls_back_to_slug(self):
        self.assertEqual(self.synonyms.resolve_skill("Quantum Basket Weaving"), "quantum_basket_weaving")

    def test_language_aliases(self):
        self.assertEqual(self.synonyms.resolve_language("Zulu"), "isizulu")
        self.assertEqual(self.synonyms.resolve_language("Northern Sotho"), "sepedi")

    def test_industry_taxonomy(self):
        it = self.synonyms.resolve_industry("Software")
        self.assertEqual(it.id, "information_technology")
        self.assertEqual(it.family, "technology")
        self.assertEqual(it.display_name, "Information Technology")
        self.assertIsNone(self.synonyms.resolve_industry("   "))

    def test_location_city_province_country(self):
        jhb = self.synonyms.resolve_location("Jozi")
        self.assertEqual((jhb.city, jhb.province, jhb.country), ("johannesburg", "gauteng", "za"))

        kzn = self.synonyms.resolve_location("KZN")
        self.assertEqual((kzn.city, kzn.province, kzn.country), (None, "kwazulu_natal", "za"))

        za = self.synonyms.resolve_location("South Africa")
        self.assertEqual((za.city, za.province, za.country), (None, None, "za"))

    def test_location_city_wins_over_province_token(self):
        loc = self.synonyms.resolve_location("Western Cape, Stellenbosch")
        self.assertEqual(loc.city, "stellenbosch")
        self.assertEqual(loc.province, "western_cape")

    def test_renamed_city_alias(self):
        loc = self.synonyms.resolve_location("Port Elizabeth")
        self.assertEqual(loc.city, "gqeberha")
        self.assertEqual(loc.province, "eastern_cape")

    def test_unresolved_location_keeps_first_token(self):
        loc = self.synonyms.resolve_location("London, UK")
        self.assertEqual(loc.city, "london")
        self.assertIsNone(loc.province)
        self.assertIsNone(self.synonyms.resolve_location("Remote"))


class TestProfileNormalizer(unittest.TestCase):

    def setUp(self):
        self.normalizer = ProfileNormalizer(SynonymTable.default())

    def test_complete_candidate_has_no_unknowns(self):
        cv = self.normalizer.normalize_candidate(make_candidate())
        self.assertEqual(cv.unknown, frozenset())
        self.assertEqual(cv.skill_map(), {"docker": 0.5, "python": 1.0})
        self.assertEqual(cv.languages, frozenset({"english", "isizulu"}))
        self.assertEqual(cv.location.city, "johannesburg")

    def test_skill_weights_are_clamped(self):
        profile = make_candidate(skills=[SkillWeight("python", 1.7), SkillWeight("sql", -0.2)])
        with self.assertLogs("core.normalizer.service", level="WARNING"):
            cv = self.normalizer.normalize_candidate(profile)
        self.assertEqual(cv.skill_map(), {"python": 1.0, "sql": 0.0})

    def test_duplicate_skills_keep_highest_weight(self):
        profile = make_candidate(skills=[SkillWeight("py", 0.4), SkillWeight("Python", 0.9)])
        cv = self.normalizer.normalize_candidate(profile)
        self.assertEqual(cv.skill_map(), {"python": 0.9})

    def test_required_overrides_preferred(self):
        job = make_job(
            required_skills=[SkillWeight("python", 0.8)],
            preferred_skills=[SkillWeight("py", 0.3), SkillWeight("git", 0.2)],
        )
        jv = self.normalizer.normalize_job(job)
        self.assertEqual(jv.required_map(), {"python": 0.8})
        self.assertEqual(jv.preferred_map(), {"git": 0.2})

    def test_empty_candidate_flags_every_dimension(self):
        cv = self.normalizer.normalize_candidate(make_candidate(
            skills=[], experience_years=None, location=None, salary_expectation=None,
            industry=None, bbbee_level=None, nqf_level=None, languages=[], availability_weeks=None,
        ))
        self.assertEqual(cv.unknown, frozenset({
            DIM_SKILLS, DIM_EXPERIENCE, DIM_SALARY, DIM_LOCATION,
            DIM_INDUSTRY, DIM_SA_CONTEXT, DIM_AVAILABILITY,
        }))

    def test_negative_years_are_unknown(self):
        cv = self.normalizer.normalize_candidate(make_candidate(experience_years=-3))
        self.assertIsNone(cv.experience_years)
        self.assertIn(DIM_EXPERIENCE, cv.unknown)

    def test_salary_normalization(self):
        point = self.normalizer.normalize_candidate(make_candidate(salary_expectation=SalaryRange(None, 45000)))
        self.assertEqual((point.salary.minimum, point.salary.maximum), (45000.0, 45000.0))

        swapped = self.normalizer.normalize_candidate(make_candidate(salary_expectation=SalaryRange(60000, 50000)))
        self.assertEqual((swapped.salary.minimum, swapped.salary.maximum), (50000.0, 60000.0))

        negative = self.normalizer.normalize_candidate(make_candidate(salary_expectation=SalaryRange(-1, 10)))
        self.assertIsNone(negative.salary)
        self.assertIn(DIM_SALARY, negative.unknown)

    def test_urgency_labels_and_weeks(self):
        self.assertEqual(self.normalizer.normalize_job(make_job(urgency="Urgent")).deadline_weeks, 2)
        self.assertEqual(self.normalizer.normalize_job(make_job(urgency=6)).deadline_weeks, 6.0)

        jv = self.normalizer.normalize_job(make_job(urgency="whenever"))
        self.assertIsNone(jv.deadline_weeks)
        self.assertIn(DIM_AVAILABILITY, jv.unknown)

    def test_remote_job_without_location_is_not_unknown(self):
        jv = self.normalizer.normalize_job(make_job(location=None, remote_allowed=True))
        self.assertNotIn(DIM_LOCATION, jv.unknown)

        jv = self.normalizer.normalize_job(make_job(location=None, remote_allowed=False))
        self.assertIn(DIM_LOCATION, jv.unknown)

    def test_vectors_are_immutable(self):
        cv = self.normalizer.normalize_candidate(make_candidate())
        with self.assertRaises(Exception):
            cv.experience_years = 10


if __name__ == "__main__":
    unittest.main()
