"""
Exam scenarios

An exam scenario is one way a student can be considered for admission:
a subject group with its summed national-exam score, a V-SAT group, an
aptitude test, an international certificate, or a talent group. Scenarios feed
the L2 payloads and the subject pass of the admission matcher.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from uniguide.domain.enums import ExamCategory, ExamType
from uniguide.domain.student_profile import Certification, StudentProfile
from uniguide.domain.subjects import (
    SUBJECT_GROUPS,
    TALENT_EXAM_SUBJECTS,
    VSAT_SUBJECT_GROUPS,
    VietnameseSubject,
    get_all_possible_subject_groups,
)

logger = logging.getLogger(__name__)


class ScenarioType(str, Enum):
    NATIONAL = "national"
    VSAT = "vsat"
    DGNL = "dgnl"
    CCQT = "ccqt"
    TALENT = "talent"


@dataclass(frozen=True)
class ExamScenario:
    """One admission scenario: score (diem_chuan) for a combination (to_hop_mon)."""
    diem_chuan: float
    to_hop_mon: str
    type: ScenarioType


A_LEVEL_GRADE_POINTS: Dict[str, float] = {
    "A*": 1.0,
    "A": 0.9,
    "B": 0.8,
    "C": 0.7,
    "D": 0.6,
    "E": 0.5,
    "F": 0.0,
    "N": 0.0,
    "O": 0.0,
    "U": 0.0,
}

CCQT_SCORE_RANGES: Dict[ExamType, tuple] = {
    ExamType.ACT: (1, 36),
    ExamType.DUOLINGO: (10, 160),
    ExamType.IB: (0, 45),
    ExamType.OSSD: (0, 100),
    ExamType.PTE: (10, 90),
    ExamType.SAT: (400, 1600),
}


def ccqt_score(certification: Certification) -> Optional[float]:
    """
    Numeric score of an international certificate, or None when invalid.

    A-Level grades are converted to points; other certificates must parse
    as a number inside the exam's official range.
    """
    raw = certification.level.strip()
    if certification.exam_type == ExamType.A_LEVEL:
        return A_LEVEL_GRADE_POINTS.get(raw.upper())

    bounds = CCQT_SCORE_RANGES.get(certification.exam_type)
    if bounds is None:
        return None
    try:
        score = float(raw)
    except ValueError:
        return None
    low, high = bounds
    if not low <= score <= high:
        return None
    return score


def _national_scenarios(profile: StudentProfile) -> List[ExamScenario]:
    if not profile.has_valid_national_exam():
        return []

    national_scores = {exam.name: exam.score for exam in profile.national_exams}
    combined = dict(national_scores)
    for exam in profile.talent_exams:
        combined.setdefault(exam.name, exam.score)

    scenarios = []
    for code in get_all_possible_subject_groups(combined.keys()):
        members = SUBJECT_GROUPS[code]
        if not all(subject in national_scores for subject in members):
            continue
        total = sum(national_scores[subject] for subject in members)
        scenarios.append(ExamScenario(total, code, ScenarioType.NATIONAL))
    return scenarios


def _vsat_scenarios(profile: StudentProfile) -> List[ExamScenario]:
    if not profile.has_valid_vsat_scores():
        return []
    scores = {exam.name: exam.score for exam in profile.vsat_exams}
    scenarios = []
    for code in VSAT_SUBJECT_GROUPS:
        members = SUBJECT_GROUPS[code]
        if all(subject in scores for subject in members):
            total = sum(scores[subject] for subject in members)
            scenarios.append(ExamScenario(total, code, ScenarioType.VSAT))
    return scenarios


def _dgnl_scenarios(profile: StudentProfile) -> List[ExamScenario]:
    return [
        ExamScenario(exam.score, exam.exam_type.value, ScenarioType.DGNL)
        for exam in profile.aptitude_exams_in(ExamCategory.DGNL)
    ]


def _ccqt_scenarios(profile: StudentProfile) -> List[ExamScenario]:
    scenarios = []
    for cert in profile.certifications_in(ExamCategory.CCQT):
        score = ccqt_score(cert)
        if score is None:
            logger.warning(
                f"[SCENARIOS] Skipping {cert.exam_type.value} certificate with "
                f"invalid score '{cert.level}'"
            )
            continue
        scenarios.append(ExamScenario(score, cert.exam_type.value, ScenarioType.CCQT))
    return scenarios


def _talent_scenarios(profile: StudentProfile) -> List[ExamScenario]:
    if not profile.talent_exams:
        return []
    combined: Dict[VietnameseSubject, float] = {
        exam.name: exam.score for exam in profile.talent_exams
    }
    for exam in profile.national_exams:
        combined[exam.name] = exam.score

    scenarios = []
    for code in get_all_possible_subject_groups(combined.keys()):
        members = SUBJECT_GROUPS[code]
        if not any(subject in TALENT_EXAM_SUBJECTS for subject in members):
            continue
        total = sum(combined[subject] for subject in members)
        scenarios.append(ExamScenario(total, code, ScenarioType.TALENT))
    return scenarios


def collect_exam_scenarios(profile: StudentProfile) -> List[ExamScenario]:
    """All exam scenarios the profile supports, in a stable order."""
    return (
        _national_scenarios(profile)
        + _vsat_scenarios(profile)
        + _dgnl_scenarios(profile)
        + _ccqt_scenarios(profile)
        + _talent_scenarios(profile)
    )
