"""
Admission SQLModel

Read-mostly admission program catalog. One row per (university, major,
admission method); admission_code is the code the prediction service returns.
"""

from typing import Optional

from sqlmodel import Field, SQLModel

from uniguide.infrastructure.db.models.base import BaseModel


class AdmissionBase(SQLModel):
    """Base schema for admission programs."""

    admission_code: str = Field(
        ...,
        max_length=100,
        index=True,
        description="Admission code (ma_xet_tuyen)"
    )
    subject_combination: Optional[str] = Field(
        default=None,
        max_length=20,
        description="Subject group code such as A00"
    )
    province: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Province of the university campus"
    )
    uni_type: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Free-text ownership type (public/private)"
    )
    university_code: Optional[str] = Field(default=None, max_length=50)
    university_name: Optional[str] = Field(default=None, max_length=255)
    major_code: Optional[str] = Field(default=None, max_length=50)
    major_name: Optional[str] = Field(default=None, max_length=255)
    tuition_fee: Optional[float] = Field(default=None, ge=0)


class Admission(AdmissionBase, BaseModel, table=True):
    """Admission program table model."""

    __tablename__ = "admissions"
