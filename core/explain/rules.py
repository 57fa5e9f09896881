#!/usr/bin/env python3
"""
Explanation rules - declarative (dimension, kind, condition) -> template table.

Templates are plain ``str.format`` strings keyed by name, so a localised
dictionary can be swapped in without touching the rule table. Conditions see the
rendering context (the dimension details plus score, unknown flag and the
missing-skill list); the first matching rule per (dimension, kind) wins.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from core.normalizer.models import (
    DIM_SKILLS, DIM_EXPERIENCE, DIM_SALARY, DIM_LOCATION,
    DIM_INDUSTRY, DIM_SA_CONTEXT, DIM_AVAILABILITY,
)

REASON = 'reason'
SUGGESTION = 'suggestion'

DIMENSION_LABELS: Dict[str, str] = {
    DIM_SKILLS: 'skills',
    DIM_EXPERIENCE: 'work experience',
    DIM_SALARY: 'salary expectation',
    DIM_LOCATION: 'location',
    DIM_INDUSTRY: 'industry',
    DIM_SA_CONTEXT: 'B-BBEE, NQF and language',
    DIM_AVAILABILITY: 'availability',
}

TEMPLATES: Dict[str, str] = {
    # reasons
    'skills_strong': "Strong skills match: {matched_count} of {total_count} listed skills",
    'experience_exceeds': "Experience exceeds requirement: {candidate_years:g} years vs {required_years:g} required",
    'experience_meets': "Experience meets requirement: {candidate_years:g} years vs {required_years:g} required",
    'experience_close': "Experience close to requirement: {candidate_years:g} years vs {required_years:g} required",
    'experience_open': "No minimum experience required",
    'salary_inside': "Salary expectation fits within the offered range",
    'salary_overlap': "Salary expectation largely overlaps the offered range",
    'location_remote': "Remote work is allowed",
    'location_city': "Based in the same city ({job_location})",
    'location_province': "Based in the same province as the role",
    'industry_exact': "Industry experience in {job_industry}",
    'industry_parent': "Related industry experience ({candidate_industry})",
    'sa_context_aligned': "Meets the South African employment requirements for the role",
    'availability_in_time': "Available within the hiring timeline",
    # suggestions
    'skills_missing': "Build skills in {missing_skills} to close the gap",
    'skills_general': "Add more of the skills this role lists",
    'experience_below': "Gain more experience: {required_years:g} years required, {candidate_years:g} on profile",
    'salary_above': "Salary expectation is above the offered range",
    'salary_below': "Salary expectation is below the offered range",
    'location_far': "Consider roles in {job_location} or remote positions",
    'industry_different': "Highlight transferable experience for the {job_industry} industry",
    'sa_context_languages': "Add proficiency in {missing_languages}",
    'sa_context_nqf': "Consider a qualification at NQF level {required_nqf_level}",
    'sa_context_bbbee': "Role prefers B-BBEE level {required_bbbee_level} or better",
    'availability_late': "Shorten your notice period to meet the {deadline_weeks:g}-week hiring timeline",
    'add_details': "Add your {dimension_label} details for a more accurate match",
}


@dataclass(frozen=True)
class Rule:
    dimension: str
    kind: str
    condition: Callable[[Dict[str, Any]], bool]
    template: str


def _always(ctx: Dict[str, Any]) -> bool:
    return True


def _unknown(ctx: Dict[str, Any]) -> bool:
    return ctx['unknown']


def _detail(key: str, *values) -> Callable[[Dict[str, Any]], bool]:
    def check(ctx: Dict[str, Any]) -> bool:
        return ctx.get(key) in values
    return check


def _has(key: str) -> Callable[[Dict[str, Any]], bool]:
    def check(ctx: Dict[str, Any]) -> bool:
        return bool(ctx.get(key))
    return check


def _component_below(component: str, threshold: float = 100.0) -> Callable[[Dict[str, Any]], bool]:
    def check(ctx: Dict[str, Any]) -> bool:
        return ctx.get('components', {}).get(component, 100.0) < threshold
    return check


def _candidate_above_job(ctx: Dict[str, Any]) -> bool:
    # compare range midpoints so an overlapping range still gets the right direction
    candidate_min = ctx.get('candidate_min', 0)
    job_max = ctx.get('job_max', 0)
    candidate_mid = (candidate_min + ctx.get('candidate_max', candidate_min)) / 2
    job_mid = (ctx.get('job_min', job_max) + job_max) / 2
    return candidate_mid > job_mid


RULES: List[Rule] = [
    # reasons
    Rule(DIM_SKILLS, REASON, _always, 'skills_strong'),
    Rule(DIM_EXPERIENCE, REASON, _detail('band', 'overqualified'), 'experience_exceeds'),
    Rule(DIM_EXPERIENCE, REASON, _detail('band', 'no_requirement'), 'experience_open'),
    Rule(DIM_EXPERIENCE, REASON, _detail('band', 'below'), 'experience_close'),
    Rule(DIM_EXPERIENCE, REASON, _always, 'experience_meets'),
    Rule(DIM_SALARY, REASON, _detail('band', 'inside'), 'salary_inside'),
    Rule(DIM_SALARY, REASON, _always, 'salary_overlap'),
    Rule(DIM_LOCATION, REASON, _detail('match', 'remote'), 'location_remote'),
    Rule(DIM_LOCATION, REASON, _detail('match', 'city'), 'location_city'),
    Rule(DIM_LOCATION, REASON, _always, 'location_province'),
    Rule(DIM_INDUSTRY, REASON, _detail('match', 'exact'), 'industry_exact'),
    Rule(DIM_INDUSTRY, REASON, _always, 'industry_parent'),
    Rule(DIM_SA_CONTEXT, REASON, _always, 'sa_context_aligned'),
    Rule(DIM_AVAILABILITY, REASON, _always, 'availability_in_time'),
    # suggestions; unknown inputs first
    Rule(DIM_SKILLS, SUGGESTION, _unknown, 'add_details'),
    Rule(DIM_SKILLS, SUGGESTION, _has('missing_skills'), 'skills_missing'),
    Rule(DIM_SKILLS, SUGGESTION, _always, 'skills_general'),
    Rule(DIM_EXPERIENCE, SUGGESTION, _unknown, 'add_details'),
    Rule(DIM_EXPERIENCE, SUGGESTION, _always, 'experience_below'),
    Rule(DIM_SALARY, SUGGESTION, _unknown, 'add_details'),
    Rule(DIM_SALARY, SUGGESTION, _candidate_above_job, 'salary_above'),
    Rule(DIM_SALARY, SUGGESTION, _always, 'salary_below'),
    Rule(DIM_LOCATION, SUGGESTION, _unknown, 'add_details'),
    Rule(DIM_LOCATION, SUGGESTION, _always, 'location_far'),
    Rule(DIM_INDUSTRY, SUGGESTION, _unknown, 'add_details'),
    Rule(DIM_INDUSTRY, SUGGESTION, _always, 'industry_different'),
    Rule(DIM_SA_CONTEXT, SUGGESTION, _unknown, 'add_details'),
    Rule(DIM_SA_CONTEXT, SUGGESTION, _has('missing_languages'), 'sa_context_languages'),
    Rule(DIM_SA_CONTEXT, SUGGESTION, _component_below('nqf'), 'sa_context_nqf'),
    Rule(DIM_SA_CONTEXT, SUGGESTION, _always, 'sa_context_bbbee'),
    Rule(DIM_AVAILABILITY, SUGGESTION, _unknown, 'add_details'),
    Rule(DIM_AVAILABILITY, SUGGESTION, _always, 'availability_late'),
]
