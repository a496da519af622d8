"""
StudentAdmission SQLModel

Links a student to an admission program. Rows are only ever inserted by the
prediction pipeline; the (student_id, admission_id) pair is unique.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from uniguide.infrastructure.db.models.base import utc_now


class StudentAdmission(SQLModel, table=True):
    """Student ↔ admission program link."""

    __tablename__ = "student_admissions"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "admission_id",
            name="uq_student_admissions_student_admission",
        ),
    )

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True
    )
    student_id: UUID = Field(
        ...,
        foreign_key="students.id",
        index=True,
    )
    admission_id: UUID = Field(
        ...,
        foreign_key="admissions.id",
        index=True,
    )
    created_by: str = Field(
        ...,
        max_length=255,
        description="Email of the acting user or ANONYMOUS"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
