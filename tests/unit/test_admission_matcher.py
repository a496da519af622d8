"""
Unit tests for the admission matcher.

Covers the three passes (subject combination, geography, university type),
purity and idempotence.
"""

import pytest
from uuid import uuid4

from uniguide.domain.matcher import (
    AdmissionMatcher,
    MatchCriteria,
    normalize,
    passes_geography,
    passes_uni_type,
)
from uniguide.infrastructure.db.models.admission import Admission

from tests.factories import build_profile


def make_admission(combination="A01", province="Hồ Chí Minh", uni_type="Công lập"):
    return Admission(
        id=uuid4(),
        admission_code=f"QS{uuid4().hex[:6]}",
        subject_combination=combination,
        province=province,
        uni_type=uni_type,
    )


@pytest.fixture
def matcher():
    return AdmissionMatcher()


# ============== Subject Combination ==============

class TestSubjectCombination:
    """Subject pass against the student's exam scenarios."""

    def test_criteria_collects_national_combinations(self, sample_profile):
        criteria = MatchCriteria.from_profile(sample_profile)
        assert criteria.subject_combinations == frozenset({"A01", "C01", "D01", "D11"})

    def test_admission_outside_combinations_is_dropped(self, matcher, sample_profile):
        kept = make_admission("A01")
        dropped = make_admission("B00")
        assert matcher.filter(sample_profile, [kept, dropped]) == [kept]

    def test_combination_is_normalized(self, matcher, sample_profile):
        admission = make_admission(" a01 ")
        assert matcher.filter(sample_profile, [admission]) == [admission]

    def test_subject_pass_skipped_without_national_exam(self, matcher, profile_without_national_exam):
        criteria = MatchCriteria.from_profile(profile_without_national_exam)
        assert criteria.subject_combinations is None
        admission = make_admission("B00")
        assert matcher.filter(profile_without_national_exam, [admission]) == [admission]

    def test_incomplete_national_exam_skips_subject_pass(self, matcher):
        profile = build_profile(national_exams=[
            {"name": "Toán", "score": 8.0},
            {"name": "Ngữ Văn", "score": 7.0},
            {"name": "Vật Lý", "score": 8.5},
        ])
        admission = make_admission("B00")
        assert matcher.filter(profile, [admission]) == [admission]


# ============== Geography ==============

class TestGeography:
    """Province containment after trim + upper-case."""

    def test_normalize(self):
        assert normalize("  ho chi minh city ") == "HO CHI MINH CITY"
        assert normalize(None) == ""

    def test_same_city_different_case_matches(self):
        profile = build_profile(province="ho chi minh city", national_exams=[])
        criteria = MatchCriteria.from_profile(profile)
        assert passes_geography(make_admission(province="Ho Chi Minh City"), criteria)

    def test_other_city_does_not_match(self):
        profile = build_profile(province="ho chi minh city", national_exams=[])
        criteria = MatchCriteria.from_profile(profile)
        assert not passes_geography(make_admission(province="Hanoi"), criteria)

    def test_admission_province_containing_student_province(self, sample_profile):
        criteria = MatchCriteria.from_profile(sample_profile)
        assert passes_geography(make_admission(province="TP. Hồ Chí Minh"), criteria)

    def test_missing_admission_province_does_not_match(self, sample_profile):
        criteria = MatchCriteria.from_profile(sample_profile)
        assert not passes_geography(make_admission(province=None), criteria)


# ============== University Type ==============

class TestUniType:
    """Exclusion of the category the student did not choose."""

    def test_public_student_excludes_private(self, sample_profile):
        criteria = MatchCriteria.from_profile(sample_profile)
        assert not passes_uni_type(make_admission(uni_type="Private University"), criteria)
        assert not passes_uni_type(make_admission(uni_type="Tư thục"), criteria)

    def test_public_student_includes_public(self, sample_profile):
        criteria = MatchCriteria.from_profile(sample_profile)
        assert passes_uni_type(make_admission(uni_type="Public University"), criteria)

    def test_private_student_excludes_public(self):
        profile = build_profile(uni_type="Tư thục")
        criteria = MatchCriteria.from_profile(profile)
        assert not passes_uni_type(make_admission(uni_type="Trường Công lập"), criteria)
        assert passes_uni_type(make_admission(uni_type="Private University"), criteria)

    def test_unknown_admission_type_is_kept(self, sample_profile):
        criteria = MatchCriteria.from_profile(sample_profile)
        assert passes_uni_type(make_admission(uni_type=None), criteria)


# ============== Purity ==============

class TestMatcherPurity:
    """Filtering never mutates inputs and is idempotent."""

    def test_filter_is_idempotent(self, matcher, sample_profile):
        admissions = [
            make_admission("A01"),
            make_admission("D01", province="Hà Nội"),
            make_admission("C01", uni_type="Tư thục"),
            make_admission("D11"),
        ]
        once = matcher.filter(sample_profile, admissions)
        twice = matcher.filter(sample_profile, once)
        assert once == twice
        assert [a.subject_combination for a in once] == ["A01", "D11"]

    def test_filter_does_not_mutate_input(self, matcher, sample_profile):
        admissions = [make_admission("A01"), make_admission("B00")]
        snapshot = list(admissions)
        matcher.filter(sample_profile, admissions)
        assert admissions == snapshot
        assert admissions[1].subject_combination == "B00"
