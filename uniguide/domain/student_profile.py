"""
Student profile domain model

Validated, framework-free view of a student row. Built once per pipeline run
and handed to the tier orchestrators and the admission matcher, so that no
database session is held while the prediction service is called.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from uniguide.domain.enums import (
    AcademicPerformance,
    Conduct,
    ExamCategory,
    ExamType,
    NationalExcellentSubject,
    Rank,
    SpecialStudentCase,
    UniType,
    EXAM_CATEGORIES,
)
from uniguide.domain.subjects import VietnameseSubject

NATIONAL_EXAM_SUBJECT_COUNT = 4
VSAT_MIN_SUBJECTS = 3
VSAT_MAX_SUBJECTS = 8
VSAT_MAX_SCORE = 150


class SubjectScore(BaseModel):
    """A single exam score for a subject."""
    name: VietnameseSubject
    score: float = Field(..., ge=0)


class AptitudeExam(BaseModel):
    """ĐGNL (aptitude assessment) result, with VNUHCM component scores."""
    exam_type: ExamType
    score: float = Field(..., ge=0)
    language_score: Optional[float] = None
    math_score: Optional[float] = None
    science_logic: Optional[float] = None


class Certification(BaseModel):
    """Language or international certificate. `level` holds the raw score/grade."""
    exam_type: ExamType
    level: str
    cefr: Optional[str] = None


class Award(BaseModel):
    """National excellent student contest award."""
    category: NationalExcellentSubject
    level: Rank


class ConductRecord(BaseModel):
    grade: int = Field(..., ge=10, le=12)
    conduct: Conduct


class AcademicPerformanceRecord(BaseModel):
    grade: int = Field(..., ge=10, le=12)
    academic_performance: AcademicPerformance


class StudentProfile(BaseModel):
    """Academic profile used by the prediction tiers."""

    student_id: UUID
    user_id: Optional[UUID] = None
    province: str
    uni_type: UniType
    min_budget: Optional[float] = None
    max_budget: Optional[float] = None
    majors: List[str] = Field(default_factory=list)
    special_cases: List[SpecialStudentCase] = Field(default_factory=list)
    national_exams: List[SubjectScore] = Field(default_factory=list)
    vsat_exams: List[SubjectScore] = Field(default_factory=list)
    talent_exams: List[SubjectScore] = Field(default_factory=list)
    aptitude_exams: List[AptitudeExam] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    awards: List[Award] = Field(default_factory=list)
    conducts: List[ConductRecord] = Field(default_factory=list)
    academic_performances: List[AcademicPerformanceRecord] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("province")
    @classmethod
    def validate_province(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Province cannot be empty")
        return v.strip()

    @classmethod
    def from_student(cls, student: Any) -> "StudentProfile":
        """Build a profile from a Student table row."""
        return cls(
            student_id=student.id,
            user_id=student.user_id,
            province=student.province,
            uni_type=student.uni_type,
            min_budget=student.min_budget,
            max_budget=student.max_budget,
            majors=list(student.majors or []),
            special_cases=list(student.special_cases or []),
            national_exams=list(student.national_exams or []),
            vsat_exams=list(student.vsat_exams or []),
            talent_exams=list(student.talent_exams or []),
            aptitude_exams=list(student.aptitude_exams or []),
            certifications=list(student.certifications or []),
            awards=list(student.awards or []),
            conducts=list(student.conducts or []),
            academic_performances=list(student.academic_performances or []),
        )

    def has_valid_national_exam(self) -> bool:
        """A national exam combination is complete with exactly four subjects."""
        return len(self.national_exams) == NATIONAL_EXAM_SUBJECT_COUNT

    def has_valid_vsat_scores(self) -> bool:
        if not VSAT_MIN_SUBJECTS <= len(self.vsat_exams) <= VSAT_MAX_SUBJECTS:
            return False
        return all(0 <= exam.score <= VSAT_MAX_SCORE for exam in self.vsat_exams)

    def certifications_in(self, category: ExamCategory) -> List[Certification]:
        members = EXAM_CATEGORIES[category]
        return [cert for cert in self.certifications if cert.exam_type in members]

    def aptitude_exams_in(self, category: ExamCategory) -> List[AptitudeExam]:
        members = EXAM_CATEGORIES[category]
        return [exam for exam in self.aptitude_exams if exam.exam_type in members]

    def conduct_for(self, grade: int) -> Optional[Conduct]:
        for record in self.conducts:
            if record.grade == grade:
                return record.conduct
        return None

    def academic_performance_for(self, grade: int) -> Optional[AcademicPerformance]:
        for record in self.academic_performances:
            if record.grade == grade:
                return record.academic_performance
        return None

    def special_case_flags(self) -> Dict[str, int]:
        """Priority flags shared by the L1 payload."""
        cases = set(self.special_cases)
        return {
            "ahld": int(SpecialStudentCase.HEROES_AND_CONTRIBUTORS in cases),
            "dan_toc_thieu_so": int(SpecialStudentCase.VERY_FEW_ETHNIC_MINORITY in cases),
            "haimuoi_huyen_ngheo_tnb": int(SpecialStudentCase.ETHNIC_MINORITY_STUDENT in cases),
        }

    @property
    def is_public_preference(self) -> int:
        return 1 if self.uni_type == UniType.PUBLIC else 0

    @property
    def tuition_budget(self) -> float:
        return float(self.max_budget or 0)
