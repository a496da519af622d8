"""
Student and Transcript SQLModels

The student profile is owned by the profile service; the prediction pipeline
only reads it. Exam sub-records are stored as JSON arrays and validated into
domain objects by StudentProfile.from_student().
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel

from uniguide.infrastructure.db.models.base import BaseModel


class Student(BaseModel, table=True):
    """Student profile table model."""

    __tablename__ = "students"

    user_id: Optional[UUID] = Field(
        default=None,
        foreign_key="users.id",
        index=True,
        description="Owning account, NULL for anonymous students"
    )
    province: str = Field(
        ...,
        max_length=100,
        description="Province the student wants to study in"
    )
    uni_type: str = Field(
        ...,
        max_length=50,
        description="Công lập or Tư thục"
    )
    min_budget: Optional[float] = Field(default=None, ge=0)
    max_budget: Optional[float] = Field(default=None, ge=0)

    majors: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Major group names"
    )
    special_cases: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    national_exams: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="[{name, score}] national graduation exam scores"
    )
    vsat_exams: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    talent_exams: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    aptitude_exams: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="[{exam_type, score, language_score?, math_score?, science_logic?}]"
    )
    certifications: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="[{exam_type, level, cefr?}]"
    )
    awards: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="[{category, level}] national excellent student awards"
    )
    conducts: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    academic_performances: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )


class TranscriptBase(SQLModel):
    """Shared transcript fields."""

    student_id: UUID = Field(
        ...,
        foreign_key="students.id",
        index=True,
    )
    grade: Optional[int] = Field(
        default=None,
        ge=10, le=12,
        description="School grade the sheet belongs to"
    )
    semester: Optional[int] = Field(
        default=None,
        ge=1, le=2,
        description="Semester, NULL for a full-year sheet"
    )
    ocr_result_id: Optional[UUID] = Field(
        default=None,
        foreign_key="ocr_results.id",
        description="OCR result the sheet was extracted from"
    )


class Transcript(TranscriptBase, BaseModel, table=True):
    """Transcript sheet with per-subject scores."""

    __tablename__ = "transcripts"

    subjects: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="[{subject, score}]"
    )
