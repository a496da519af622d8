"""
Admission matcher

Decides which admission programs are plausible for a student. Pure: takes a
profile and candidate admissions, returns the kept admissions in input order
without touching either.

An admission is kept when it passes all three checks:
1. Subject combination: its subject group is one of the student's exam
   scenario combinations (skipped when the student has no complete national
   exam to compare against)
2. Geography: its province contains the student's province
3. University type: it is not of the category the student excluded
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Protocol, Tuple, TypeVar

from uniguide.domain.enums import UniType
from uniguide.domain.exam_scenarios import collect_exam_scenarios
from uniguide.domain.student_profile import StudentProfile

PUBLIC_KEYWORDS: Tuple[str, ...] = ("PUBLIC", "CÔNG LẬP")
PRIVATE_KEYWORDS: Tuple[str, ...] = ("PRIVATE", "TƯ THỤC")


class AdmissionLike(Protocol):
    subject_combination: Optional[str]
    province: Optional[str]
    uni_type: Optional[str]


AdmissionT = TypeVar("AdmissionT", bound=AdmissionLike)


def normalize(value: Optional[str]) -> str:
    """Trim and upper-case a free-text field; None becomes ''."""
    return (value or "").strip().upper()


@dataclass(frozen=True)
class MatchCriteria:
    """Pre-computed matcher inputs derived from one student profile."""
    province: str
    uni_type: Optional[UniType]
    # None disables the subject pass
    subject_combinations: Optional[FrozenSet[str]]

    @classmethod
    def from_profile(cls, profile: StudentProfile) -> "MatchCriteria":
        combinations = None
        if profile.has_valid_national_exam():
            combinations = frozenset(
                normalize(scenario.to_hop_mon)
                for scenario in collect_exam_scenarios(profile)
            )
        return cls(
            province=normalize(profile.province),
            uni_type=profile.uni_type,
            subject_combinations=combinations,
        )


def passes_subject_combination(admission: AdmissionLike, criteria: MatchCriteria) -> bool:
    if criteria.subject_combinations is None:
        return True
    return normalize(admission.subject_combination) in criteria.subject_combinations


def passes_geography(admission: AdmissionLike, criteria: MatchCriteria) -> bool:
    return criteria.province in normalize(admission.province)


def passes_uni_type(admission: AdmissionLike, criteria: MatchCriteria) -> bool:
    admission_type = normalize(admission.uni_type)
    if criteria.uni_type == UniType.PUBLIC:
        excluded = PRIVATE_KEYWORDS
    elif criteria.uni_type == UniType.PRIVATE:
        excluded = PUBLIC_KEYWORDS
    else:
        return True
    return not any(keyword in admission_type for keyword in excluded)


class AdmissionMatcher:
    """Filters candidate admissions for a student profile."""

    def matches(self, admission: AdmissionLike, criteria: MatchCriteria) -> bool:
        return (
            passes_subject_combination(admission, criteria)
            and passes_geography(admission, criteria)
            and passes_uni_type(admission, criteria)
        )

    def filter(
        self,
        profile: StudentProfile,
        admissions: Iterable[AdmissionT],
    ) -> List[AdmissionT]:
        criteria = MatchCriteria.from_profile(profile)
        return [admission for admission in admissions if self.matches(admission, criteria)]
